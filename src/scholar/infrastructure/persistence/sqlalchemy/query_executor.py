"""Deadline-bounded execution of raw SQL against the relational store.

Every call checks out its own pooled connection, so several queries can run
concurrently under ``asyncio.gather``. The caller regains control at the
deadline even when the driver is still waiting on the server; the in-flight
task is cancelled best effort and never awaited. Where the dialect supports
it, a server-side statement timeout is set as well so abandoned statements
do not keep running.

Driver errors are classified into the search domain exceptions:

- missing column, table, view or view definer -> ``SchemaDrift``
- server-side statement timeout -> ``QueryTimeout``
- connection failures -> ``StoreUnavailable``
- anything else -> ``QueryError``

``QueryVariant`` describes a query that may have a reduced fallback for older
schemas; ``run_variant`` evaluates it in one place.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import bindparam, text
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from scholar.domain.search import (
    QueryError,
    QueryTimeout,
    SchemaDrift,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 3000

# MySQL / MariaDB error numbers
_MYSQL_DRIFT_ERRNOS = frozenset({1054, 1146, 1449})
_MYSQL_CONNECTION_ERRNOS = frozenset({2002, 2003, 2006, 2013})
# max_execution_time (MySQL) and max_statement_time (MariaDB) exceeded
_MYSQL_TIMEOUT_ERRNOS = frozenset({1969, 3024})

# SQLSTATE codes (MySQL 42S22/42S02, PostgreSQL 42703/42P01)
_DRIFT_SQLSTATES = frozenset({"42S22", "42S02", "42703", "42P01"})
# PostgreSQL query_canceled, raised by statement_timeout
_TIMEOUT_SQLSTATES = frozenset({"57014"})

_DRIFT_MESSAGES = (
    "no such column",
    "no such table",
    "unknown column",
    "doesn't exist",
    "does not exist",
    "definer",
)


def _sqlstate(orig: BaseException | None) -> str | None:
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            value = getattr(candidate, attr, None)
            if isinstance(value, str) and value:
                return value
    return None


def _errno(orig: BaseException | None) -> int | None:
    if orig is None:
        return None
    if isinstance(getattr(orig, "errno", None), int):
        return orig.errno
    if orig.args and isinstance(orig.args[0], int):
        return orig.args[0]
    return None


def classify_error(exc: BaseException, label: str, timeout_ms: int = 0) -> Exception:
    """Map a driver or SQLAlchemy error onto the search domain exceptions."""
    orig = exc.orig if isinstance(exc, DBAPIError) else None
    state = _sqlstate(orig)
    errno = _errno(orig)
    message = str(orig if orig is not None else exc).lower()

    if errno in _MYSQL_DRIFT_ERRNOS or state in _DRIFT_SQLSTATES:
        return SchemaDrift(label, reason=message[:200])

    if errno in _MYSQL_TIMEOUT_ERRNOS or state in _TIMEOUT_SQLSTATES:
        return QueryTimeout(label, timeout_ms)

    if (
        isinstance(exc, (InterfaceError, OSError, ConnectionError))
        or (isinstance(exc, DBAPIError) and exc.connection_invalidated)
        or isinstance(orig, (OSError, ConnectionError))
        or errno in _MYSQL_CONNECTION_ERRNOS
        or (state is not None and state.startswith("08"))
    ):
        return StoreUnavailable(f"Relational store unavailable: {message[:200]}", label)

    if any(marker in message for marker in _DRIFT_MESSAGES):
        return SchemaDrift(label, reason=message[:200])

    return QueryError(label, reason=message[:200])


def _discard_result(task: asyncio.Task) -> None:
    # Retrieve the outcome so abandoned tasks do not log "never retrieved"
    if not task.cancelled():
        task.exception()


@dataclass(frozen=True)
class QueryVariant:
    """A labelled query with an optional reduced-schema fallback.

    ``optional`` variants degrade to empty rows plus a warning when they
    cannot run; required ones re-raise.
    """

    label: str
    primary: str
    fallback: str | None = None
    optional: bool = True


@dataclass
class VariantOutcome:
    rows: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    used_fallback: bool = False
    skipped: bool = False


class DeadlineQueryExecutor:
    """Run read-only SQL with a per-call deadline."""

    def __init__(self, engine: AsyncEngine, default_timeout_ms: int = DEFAULT_TIMEOUT_MS):
        self._engine = engine
        self._default_timeout_ms = default_timeout_ms

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    async def fetch_all(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout_ms: int | None = None,
        label: str = "query",
    ) -> list[dict[str, Any]]:
        """Execute ``sql`` and return rows as dicts.

        List or tuple parameters are bound as expanding ``IN`` parameters.

        Raises
        ------
        QueryTimeout
            When the deadline passes first.
        SchemaDrift, StoreUnavailable, QueryError
            As classified from the driver error.
        """
        deadline_ms = timeout_ms or self._default_timeout_ms
        task = asyncio.ensure_future(
            self._execute(sql, dict(params or {}), deadline_ms, label),
        )
        try:
            done, _ = await asyncio.wait({task}, timeout=deadline_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            task.add_done_callback(_discard_result)
            raise

        if task in done:
            return task.result()

        task.cancel()
        task.add_done_callback(_discard_result)
        logger.warning("Query '%s' exceeded %d ms deadline", label, deadline_ms)
        raise QueryTimeout(label, deadline_ms)

    async def run_variant(
        self,
        variant: QueryVariant,
        params: Mapping[str, Any] | None = None,
        *,
        timeout_ms: int | None = None,
    ) -> VariantOutcome:
        label = variant.label
        try:
            rows = await self.fetch_all(
                variant.primary,
                params,
                timeout_ms=timeout_ms,
                label=label,
            )
            return VariantOutcome(rows=rows)
        except SchemaDrift as drift:
            logger.warning("Schema drift in '%s': %s", label, drift.details.get("reason"))
            if variant.fallback is None:
                if not variant.optional:
                    raise
                return VariantOutcome(
                    warnings=[f"Partial enrichment skipped: {label} unavailable"],
                    skipped=True,
                )
        except QueryTimeout:
            if not variant.optional:
                raise
            return VariantOutcome(
                warnings=[f"Partial enrichment skipped: {label} timed out"],
                skipped=True,
            )

        warnings = []
        if label != "base":
            warnings.append(f"Partial enrichment: {label} reduced due to schema differences")
        try:
            rows = await self.fetch_all(
                variant.fallback,
                params,
                timeout_ms=timeout_ms,
                label=f"{label}_fallback",
            )
        except (SchemaDrift, QueryTimeout) as e:
            if not variant.optional:
                raise
            logger.warning("Fallback for '%s' failed: %s", label, e)
            warnings.append(f"Enrichment fallback failed for {label}")
            return VariantOutcome(warnings=warnings, used_fallback=True, skipped=True)
        return VariantOutcome(rows=rows, warnings=warnings, used_fallback=True)

    async def ping(self) -> bool:
        try:
            await self.fetch_all("SELECT 1", label="ping")
        except Exception as e:
            logger.warning("Database ping failed: %s", e)
            return False
        return True

    async def _execute(
        self,
        sql: str,
        params: dict[str, Any],
        timeout_ms: int,
        label: str,
    ) -> list[dict[str, Any]]:
        expanding = [
            name for name, value in params.items() if isinstance(value, (list, tuple))
        ]
        try:
            async with self._engine.connect() as conn:
                statement_sql = await self._apply_timeout_hint(conn, sql, timeout_ms)
                stmt = text(statement_sql)
                if expanding:
                    stmt = stmt.bindparams(
                        *(bindparam(name, expanding=True) for name in expanding),
                    )
                result = await conn.execute(stmt, params)
                return [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, OSError, ConnectionError) as e:
            raise classify_error(e, label, timeout_ms) from e

    async def _apply_timeout_hint(
        self,
        conn: AsyncConnection,
        sql: str,
        timeout_ms: int,
    ) -> str:
        dialect = conn.dialect
        if dialect.name == "postgresql":
            await conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
        elif dialect.name == "mysql" and getattr(dialect, "is_mariadb", False):
            seconds = max(timeout_ms / 1000, 0.001)
            return f"SET STATEMENT max_statement_time={seconds:.3f} FOR {sql}"
        return sql
