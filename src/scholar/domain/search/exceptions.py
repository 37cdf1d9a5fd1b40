"""Search domain exceptions.

These describe failures of the two backends a search or enrichment talks
to: the full-text index and the relational store. Only ``StoreUnavailable``
and ``QueryError`` are expected to reach callers; the others drive the
fallback paths.
"""

from __future__ import annotations

from scholar.domain.shared.exceptions import DomainException, ErrorCode

# =============================================================================
# Base Backend Exception
# =============================================================================


class SearchBackendError(DomainException):
    """Base exception for index and store failures."""


# =============================================================================
# Full-Text Index
# =============================================================================


class IndexUnavailable(SearchBackendError):
    """Raised when the full-text index cannot answer.

    Covers connection errors, timeouts, HTTP errors and malformed payloads.
    Callers always fall back to the store search.
    """

    def __init__(
        self,
        message: str = "Full-text index unavailable",
        reason: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.INDEX_UNAVAILABLE,
            details={"reason": reason} if reason else None,
        )


# =============================================================================
# Relational Store
# =============================================================================


class QueryTimeout(SearchBackendError):
    """Raised when a store query exceeds its deadline."""

    def __init__(self, label: str, timeout_ms: int) -> None:
        super().__init__(
            message=f"Query '{label}' exceeded {timeout_ms} ms",
            code=ErrorCode.QUERY_TIMEOUT,
            details={"label": label, "timeout_ms": timeout_ms},
        )
        self.label = label
        self.timeout_ms = timeout_ms


class SchemaDrift(SearchBackendError):
    """Raised when a query references a column, table or view that is missing."""

    def __init__(self, label: str, reason: str | None = None) -> None:
        super().__init__(
            message=f"Schema mismatch in query '{label}'",
            code=ErrorCode.SCHEMA_DRIFT,
            details={"label": label, "reason": reason} if reason else {"label": label},
        )
        self.label = label


class StoreUnavailable(SearchBackendError):
    """Raised when the relational store itself cannot be reached."""

    def __init__(
        self,
        message: str = "Relational store unavailable",
        label: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.STORE_UNAVAILABLE,
            details={"label": label} if label else None,
        )


class QueryError(SearchBackendError):
    """Raised for store errors that are neither drift nor connectivity."""

    def __init__(self, label: str, reason: str | None = None) -> None:
        super().__init__(
            message=f"Query '{label}' failed",
            code=ErrorCode.QUERY_FAILED,
            details={"label": label, "reason": reason} if reason else {"label": label},
        )
        self.label = label
