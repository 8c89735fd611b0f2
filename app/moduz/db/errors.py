from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.moduz.core.error_catalog import ErrorCatalog, ErrorDefinition

_LOCK_MARKERS = (
    "lock timeout",
    "deadlock detected",
    "database is locked",
    "could not obtain lock",
)


def is_lock_timeout(exc: Exception) -> bool:
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return any(marker in message for marker in _LOCK_MARKERS)
    return False


def storage_error(exc: SQLAlchemyError) -> ErrorDefinition:
    """Map a storage exception onto the retryable catalog entries."""
    if is_lock_timeout(exc):
        return ErrorCatalog.LOCK_TIMEOUT
    return ErrorCatalog.STORAGE_UNAVAILABLE
