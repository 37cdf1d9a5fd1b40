"""SQL for venue enrichment.

Every optional dimension is a separate statement so that a missing view or
table only removes that dimension. Fallbacks target older schemas that lack
the ranking view or the publisher join.
"""

from scholar.infrastructure.persistence.sqlalchemy.query_executor import QueryVariant

_VENUE_COLUMNS = """
    v.id,
    v.name,
    v.type,
    v.issn,
    v.eissn,
    v.scopus_id AS scopus_source_id,
    v.wikidata_id,
    v.openalex_id,
    v.mag_id,
    v.publisher_id,
    v.impact_factor,
    v.created_at,
    v.updated_at,
    v.validation_status,
    v.citescore,
    v.sjr,
    v.snip,
    v.open_access,
    v.aggregation_type,
    v.coverage_start_year,
    v.coverage_end_year,
    v.works_count AS works_count_precomputed,
    v.cited_by_count,
    v.h_index,
    v.i10_index,
    v.two_year_mean_citedness,
    v.homepage_url,
    v.country_code,
    v.is_in_doaj,
    v.is_indexed_in_scopus
"""

BASE = QueryVariant(
    label="base",
    primary=f"""
        SELECT {_VENUE_COLUMNS},
            pub.name AS publisher_name,
            pub.type AS publisher_type,
            pub.country_code AS publisher_country
        FROM venues v
        LEFT JOIN organizations pub ON v.publisher_id = pub.id
        WHERE v.id IN :venue_ids
    """,
    # Strictly venues only: no optional tables
    fallback=f"""
        SELECT {_VENUE_COLUMNS},
            NULL AS publisher_name,
            NULL AS publisher_type,
            NULL AS publisher_country
        FROM venues v
        WHERE v.id IN :venue_ids
    """,
    optional=False,
)

STATS = QueryVariant(
    label="stats",
    primary="""
        SELECT venue_id,
               total_works AS publications_count,
               open_access_works AS open_access_publications,
               open_access_percentage,
               first_publication_year,
               latest_publication_year
        FROM v_venue_ranking
        WHERE venue_id IN :venue_ids
    """,
    fallback="""
        SELECT venue_id,
               SUM(works_count) AS publications_count,
               SUM(oa_works_count) AS open_access_publications,
               CASE WHEN SUM(works_count) = 0 THEN NULL
                    ELSE ROUND(SUM(oa_works_count) * 100.0 / SUM(works_count), 2)
               END AS open_access_percentage,
               MIN(CASE WHEN works_count > 0 THEN year END) AS first_publication_year,
               MAX(CASE WHEN works_count > 0 THEN year END) AS latest_publication_year
        FROM venue_yearly_stats
        WHERE venue_id IN :venue_ids
        GROUP BY venue_id
    """,
)

UNIQUE_AUTHORS = QueryVariant(
    label="unique_authors",
    primary="""
        SELECT venue_id, unique_authors
        FROM v_venue_ranking
        WHERE venue_id IN :venue_ids
    """,
    fallback="""
        SELECT pub.venue_id,
               COUNT(DISTINCT a.person_id) AS unique_authors
        FROM publications pub
        JOIN authorships a ON a.work_id = pub.work_id
        WHERE pub.venue_id IN :venue_ids
        GROUP BY pub.venue_id
    """,
)

SUBJECTS = QueryVariant(
    label="subjects",
    primary="""
        SELECT vs.venue_id, vs.subject_id, vs.score, s.term, s.vocabulary, s.lang
        FROM venue_subjects vs
        JOIN subjects s ON s.id = vs.subject_id
        WHERE vs.venue_id IN :venue_ids
        ORDER BY vs.venue_id, vs.score DESC
    """,
)

YEARLY_STATS = QueryVariant(
    label="yearly_stats",
    primary="""
        SELECT venue_id, year, works_count, oa_works_count, cited_by_count
        FROM venue_yearly_stats
        WHERE venue_id IN :venue_ids
        ORDER BY venue_id, year DESC
    """,
)

TOP_AUTHORS = QueryVariant(
    label="top_authors",
    primary="""
        SELECT pub.venue_id,
               a.person_id,
               COUNT(*) AS works_count,
               MIN(a.position) AS best_position,
               MAX(CASE WHEN a.is_corresponding THEN 1 ELSE 0 END) AS is_corresponding,
               p.preferred_name,
               p.given_names,
               p.family_name
        FROM publications pub
        JOIN authorships a ON pub.work_id = a.work_id
        LEFT JOIN persons p ON p.id = a.person_id
        WHERE pub.venue_id IN :venue_ids
        GROUP BY pub.venue_id, a.person_id, p.preferred_name, p.given_names, p.family_name
    """,
)

RECENT_WORKS_SQL = """
    SELECT w.id,
           w.title,
           w.subtitle,
           w.work_type,
           w.language,
           p.year,
           p.volume,
           p.issue,
           p.pages,
           p.doi,
           p.peer_reviewed,
           p.publication_date
    FROM publications p
    JOIN works w ON w.id = p.work_id
    WHERE p.venue_id = :venue_id
    ORDER BY p.year DESC, p.id DESC
    LIMIT :limit
"""

RECENT_WORK_AUTHORS_SQL = """
    SELECT a.work_id,
           a.person_id,
           a.position,
           a.is_corresponding,
           p.preferred_name,
           p.given_names,
           p.family_name
    FROM authorships a
    LEFT JOIN persons p ON a.person_id = p.id
    WHERE a.work_id IN :work_ids
    ORDER BY a.work_id, a.position
    LIMIT 1000
"""

# Columns the list view needs; the fallback assumes only the core columns
_LIST_COLUMNS = """
    v.id,
    v.name,
    v.type,
    v.issn,
    v.eissn,
    v.scopus_id AS scopus_source_id,
    v.wikidata_id,
    v.openalex_id,
    v.mag_id,
    v.publisher_id,
    v.impact_factor,
    v.citescore,
    v.sjr,
    v.snip,
    v.created_at,
    v.updated_at,
    v.open_access,
    v.aggregation_type,
    v.coverage_start_year,
    v.coverage_end_year,
    v.is_indexed_in_scopus,
    v.two_year_mean_citedness,
    v.homepage_url,
    v.country_code,
    v.is_in_doaj,
    COALESCE(v.works_count, 0) AS works_count_precomputed,
    pub.name AS publisher_name,
    pub.type AS publisher_type,
    pub.country_code AS publisher_country
"""

_LIST_MINIMAL_COLUMNS = """
    v.id,
    v.name,
    v.type,
    v.issn,
    v.eissn,
    v.publisher_id,
    v.impact_factor,
    v.created_at,
    v.updated_at,
    COALESCE(v.works_count, 0) AS works_count_precomputed
"""

SORT_COLUMNS = {
    "name": "v.name",
    "type": "v.type",
    "impact_factor": "v.impact_factor",
    "works_count": "works_count_precomputed",
    "id": "v.id",
}


def list_variant(where_sql: str, order_sql: str) -> QueryVariant:
    """List query for already-validated WHERE and ORDER BY fragments."""
    return QueryVariant(
        label="list",
        primary=f"""
            SELECT {_LIST_COLUMNS}
            FROM venues v
            LEFT JOIN organizations pub ON v.publisher_id = pub.id
            {where_sql}
            ORDER BY {order_sql}
            LIMIT :limit OFFSET :offset
        """,
        fallback=f"""
            SELECT {_LIST_MINIMAL_COLUMNS}
            FROM venues v
            {where_sql}
            ORDER BY {order_sql}
            LIMIT :limit OFFSET :offset
        """,
        optional=False,
    )


def count_sql(where_sql: str) -> str:
    return f"SELECT COUNT(*) AS total FROM venues v {where_sql}"
