"""
Domain error taxonomy for Movie Club

Services raise these; the HTTP layer (movieclub.main) maps them to status
codes. Lookup misses are NOT errors: single-record fetches return None.

- InvalidInputError: malformed identifiers, out-of-range scores
- EntryConflictError: an update would duplicate a (movie, group) pair
- CatalogUnavailableError: TMDB failed (network, status, decoding)
- StorageError: the database failed
- OperationCancelled: the caller went away or its deadline passed
"""
from typing import Optional


class MovieClubError(Exception):
    """Base class for all Movie Club errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class InvalidInputError(MovieClubError):
    """Input rejected before it reached storage."""


class EntryConflictError(MovieClubError):
    """Movie is already placed in the target group."""


class CatalogUnavailableError(MovieClubError):
    """External metadata source failed. Safe to retry later."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        self.status_code = status_code
        super().__init__(message, original_error)


class StorageError(MovieClubError):
    """Persistence-layer failure, labelled with the operation that failed."""

    def __init__(self, operation: str, original_error: Optional[Exception] = None):
        self.operation = operation
        detail = f"{operation}: {original_error}" if original_error else operation
        super().__init__(detail, original_error)


class OperationCancelled(MovieClubError):
    """Caller gave up. No response is owed."""


# PostgreSQL SQLSTATE for "canceling statement due to statement timeout / user request"
QUERY_CANCELED = "57014"


def storage_error(operation: str, exc: Exception) -> MovieClubError:
    """
    Translate a SQLAlchemy error into the domain taxonomy.

    Usage:
        except SQLAlchemyError as e:
            raise storage_error("list entries by group", e) from e
    """
    if getattr(getattr(exc, "orig", None), "pgcode", None) == QUERY_CANCELED:
        return OperationCancelled(f"{operation}: cancelled", original_error=exc)
    return StorageError(operation, exc)
