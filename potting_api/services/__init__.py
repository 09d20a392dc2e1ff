"""Business logic services."""

from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.hardware_notifier import get_hardware_notifier

__all__ = ["BatchCoordinator", "get_hardware_notifier"]
