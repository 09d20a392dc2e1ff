"""Machine state access."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from potting_api.models.machine_state import SINGLETON_KEY, MachineState
from potting_api.schemas.machine_state import SupplyLevel
from potting_api.services.errors import InvalidInputError

logger = logging.getLogger(__name__)


def get_or_create(db: Session) -> MachineState:
    """
    Get the singleton machine state, creating it with defaults if absent.

    Args:
        db: Database session

    Returns:
        MachineState instance
    """
    state = db.query(MachineState).filter(MachineState.singleton_key == SINGLETON_KEY).first()

    if not state:
        state = MachineState(
            singleton_key=SINGLETON_KEY,
            soil_level=SupplyLevel.SUFFICIENT,
            cup_level=SupplyLevel.SUFFICIENT,
            active_batch_id=None,
        )
        db.add(state)
        db.commit()
        db.refresh(state)
        logger.info("Created machine state record")

    return state


def supplies_sufficient(state: MachineState) -> bool:
    """Both soil and cups are sufficient."""
    return state.soil_level == SupplyLevel.SUFFICIENT and state.cup_level == SupplyLevel.SUFFICIENT


def apply_supply_reading(
    state: MachineState,
    soil_level: Optional[int] = None,
    cup_level: Optional[int] = None,
) -> bool:
    """
    Update whichever supply levels are present in the reading.

    Mutates the record in memory only; the caller persists it.

    Args:
        state: Machine state to update
        soil_level: New soil level, or None to leave unchanged
        cup_level: New cup level, or None to leave unchanged

    Returns:
        True if any level changed

    Raises:
        InvalidInputError: If a level is not 0 or 1
    """
    for name, value in (("soilLevel", soil_level), ("cupLevel", cup_level)):
        if value is not None and value not in SupplyLevel.VALUES:
            raise InvalidInputError(f"{name} must be 0 (Low) or 1 (Sufficient), got {value!r}")

    changed = False
    if soil_level is not None and soil_level != state.soil_level:
        state.soil_level = soil_level
        changed = True
    if cup_level is not None and cup_level != state.cup_level:
        state.cup_level = cup_level
        changed = True

    return changed
