"""SQLAlchemy models."""

from potting_api.database import Base
from potting_api.models.batch import Batch
from potting_api.models.machine_state import MachineState

__all__ = [
    "Base",
    "Batch",
    "MachineState",
]
