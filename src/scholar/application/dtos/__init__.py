"""Data Transfer Objects returned by the caller-facing queries.

DTOs are organized by domain:
- search: search results and provenance
- venues: enriched venue records
"""
