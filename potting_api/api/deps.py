"""API dependencies."""

import threading
from functools import lru_cache

from fastapi import HTTPException, status

from potting_api.config import settings
from potting_api.database import get_db  # noqa: F401
from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.errors import (
    BatchNotFoundError,
    CoordinatorError,
    StorageFailureError,
)
from potting_api.services.hardware_notifier import get_hardware_notifier


@lru_cache
def get_coordinator() -> BatchCoordinator:
    """Process-wide coordinator sharing one lock across requests."""
    return BatchCoordinator(
        notifier=get_hardware_notifier(settings),
        lock=threading.RLock(),
    )


def to_http_exception(error: CoordinatorError) -> HTTPException:
    """Map a coordinator error to its HTTP status."""
    if isinstance(error, BatchNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, StorageFailureError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=status_code, detail=str(error))
