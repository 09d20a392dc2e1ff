"""Best-effort start/stop commands to the machine controller."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from potting_api.config import Settings
from potting_api.services.errors import HardwareUnreachableError

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Outcome of one controller call."""

    command: str
    success: bool
    error: Optional[str] = None
    skipped: bool = False


class BaseHardwareNotifier(ABC):
    """Base class for hardware notifiers.

    Implementations must never raise: a failed call is reported through
    the returned NotificationResult and the batch bookkeeping stands.
    """

    @abstractmethod
    def notify_start(self, batch_id: int) -> NotificationResult:
        """Ask the controller to start producing for a batch."""
        pass

    @abstractmethod
    def notify_stop(self) -> NotificationResult:
        """Ask the controller to stop producing."""
        pass


class HttpHardwareNotifier(BaseHardwareNotifier):
    """Talks to the ESP32 controller over HTTP."""

    def __init__(self, base_url: str, timeout: float = 2.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def notify_start(self, batch_id: int) -> NotificationResult:
        return self._send("start-batch", {"batchId": batch_id})

    def notify_stop(self) -> NotificationResult:
        return self._send("stop-batch", None)

    def _send(self, command: str, payload: Optional[Dict[str, Any]]) -> NotificationResult:
        url = f"{self.base_url}/{command}"
        try:
            self._post(url, payload)
        except HardwareUnreachableError as e:
            logger.error(f"Failed to contact hardware for {command} at {url}: {e}")
            return NotificationResult(command=command, success=False, error=str(e))

        logger.info(f"Sent {command} command to hardware at {url}")
        return NotificationResult(command=command, success=True)

    def _post(self, url: str, payload: Optional[Dict[str, Any]]) -> None:
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise HardwareUnreachableError(str(e)) from e


class DisabledHardwareNotifier(BaseHardwareNotifier):
    """Used when no controller is attached (bench setups, demos)."""

    def notify_start(self, batch_id: int) -> NotificationResult:
        logger.info(f"Hardware disabled, not sending start-batch for batch {batch_id}")
        return NotificationResult(command="start-batch", success=False, skipped=True)

    def notify_stop(self) -> NotificationResult:
        logger.info("Hardware disabled, not sending stop-batch")
        return NotificationResult(command="stop-batch", success=False, skipped=True)


def get_hardware_notifier(settings: Settings) -> BaseHardwareNotifier:
    """Build the notifier configured for this deployment.

    Args:
        settings: Application settings

    Returns:
        Configured notifier instance
    """
    if not settings.hardware_enabled:
        return DisabledHardwareNotifier()

    return HttpHardwareNotifier(
        base_url=settings.controller_base_url,
        timeout=settings.controller_timeout_seconds,
    )
