from contextlib import contextmanager
from fastapi import HTTPException, status
from helpers.ordering import (
    OrderingError, ItemNotFound, IndexOutOfRange, ScopeConflict, PersistenceFailure
)
from settings import logger

STALE_DATA_DETAIL = "Could not complete, data changed, please refresh"


def to_http_exception(error: OrderingError) -> HTTPException:
    """Map an ordering failure onto the HTTP error the client sees."""
    if isinstance(error, ItemNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{error.kind} not found"
        )
    if isinstance(error, (IndexOutOfRange, ScopeConflict)):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=STALE_DATA_DETAIL
        )
    if isinstance(error, PersistenceFailure):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not save the new order, please retry"
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


@contextmanager
def translate_ordering_errors():
    """Re-raise ordering failures as HTTPException inside route handlers."""
    try:
        yield
    except OrderingError as e:
        logger.warning("Ordering request rejected", extra={
            "error_type": type(e).__name__,
            "error": str(e)
        })
        raise to_http_exception(e) from e
