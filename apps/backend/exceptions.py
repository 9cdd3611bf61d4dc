"""
Custom exception hierarchy for the Modpack Index backend.

Every failure the catalog core can report carries one ErrorKind so call sites
match on a single enumeration instead of on message strings.

Exception Hierarchy:
    ModpackIndexError (base)
    ├── ValidationError
    ├── SourceUnavailableError
    ├── StorageUnavailableError
    ├── EmptyUpstreamPageError
    └── ItemUpsertFailedError

Usage:
    from exceptions import SourceUnavailableError

    # Raise with the failing source and the underlying cause
    raise SourceUnavailableError("Modrinth API error: 503", source="modrinth", cause=exc)

    # Match on the kind
    try:
        await aggregator.search(...)
    except ModpackIndexError as e:
        if e.kind is ErrorKind.SOURCE_UNAVAILABLE:
            ...
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    SOURCE_UNAVAILABLE = "source_unavailable"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    EMPTY_UPSTREAM_PAGE = "empty_upstream_page"
    ITEM_UPSERT_FAILED = "item_upsert_failed"


class ModpackIndexError(Exception):
    """
    Base exception for all Modpack Index application errors.

    Attributes:
        message: Human-readable error message
        kind: ErrorKind used by callers to branch on the failure
        detail: Optional dict with additional error context
        cause: The underlying exception, if any
        status_code: Suggested HTTP status code (for API errors)
    """

    kind: ErrorKind = ErrorKind.STORAGE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.cause = cause
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for JSON serialization."""
        result = {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.detail:
            result["detail"] = self.detail
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result


class ValidationError(ModpackIndexError):
    """
    Raised when caller input is invalid.

    Examples:
        raise ValidationError("limit must be positive", detail={"limit": 0})
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message, detail=detail, status_code=400)


class SourceUnavailableError(ModpackIndexError):
    """
    Raised when one upstream catalog (or the local store acting as a search
    source) fails to answer.

    Examples:
        raise SourceUnavailableError("CurseForge API key not configured", source="curseforge")
    """

    kind = ErrorKind.SOURCE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        *,
        source: str,
        detail: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        detail = dict(detail or {})
        detail["source"] = source
        super().__init__(message, detail=detail, cause=cause, status_code=502)
        self.source = source


class StorageUnavailableError(ModpackIndexError):
    """
    Raised when the local store cannot be read or written.

    Examples:
        raise StorageUnavailableError("Failed to upsert platform", cause=exc)
    """

    kind = ErrorKind.STORAGE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, detail=detail, cause=cause, status_code=500)


class EmptyUpstreamPageError(ModpackIndexError):
    """Raised when a sync page comes back with no items."""

    kind = ErrorKind.EMPTY_UPSTREAM_PAGE

    def __init__(self, platform: str):
        super().__init__("no items found", detail={"platform": platform}, status_code=502)
        self.platform = platform


class ItemUpsertFailedError(ModpackIndexError):
    """
    Raised (and recorded, never propagated past the sync loop) when a single
    modpack cannot be written.
    """

    kind = ErrorKind.ITEM_UPSERT_FAILED

    def __init__(self, title: str, *, cause: Optional[BaseException] = None):
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(
            f"Failed to sync {title}: {reason}",
            detail={"title": title},
            cause=cause,
            status_code=500,
        )
        self.title = title
