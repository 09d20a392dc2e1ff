"""Machine state endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from potting_api.api.deps import get_coordinator, get_db, to_http_exception
from potting_api.schemas.machine_state import MachineStateResponse, SupplyReading
from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.errors import CoordinatorError

router = APIRouter()


@router.get("", response_model=MachineStateResponse)
def get_machine_state(
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """Get the machine state, creating it on first call."""
    try:
        return coordinator.get_machine_state(db)
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.put("", response_model=MachineStateResponse)
def update_machine_state(
    reading: SupplyReading,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """
    Apply a supply sensor reading.

    - **soilLevel**: 0 = Low, 1 = Sufficient (optional)
    - **cupLevel**: 0 = Low, 1 = Sufficient (optional)

    Pauses the active batch when a supply runs low and resumes it once
    both recover.
    """
    try:
        return coordinator.apply_supply_reading(db, reading.soil_level, reading.cup_level)
    except CoordinatorError as e:
        raise to_http_exception(e)
