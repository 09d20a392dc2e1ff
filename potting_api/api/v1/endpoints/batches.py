"""Batch endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from potting_api.api.deps import get_coordinator, get_db, to_http_exception
from potting_api.api.v1.endpoints import machine_state
from potting_api.schemas.batch import (
    BatchCreate,
    BatchProgressUpdate,
    BatchResponse,
    MessageResponse,
)
from potting_api.schemas.machine_state import MachineStateResponse
from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.errors import CoordinatorError

router = APIRouter()

# Paths the dashboard and the sensor firmware already use
router.add_api_route(
    "/machine-state",
    machine_state.get_machine_state,
    methods=["GET"],
    response_model=MachineStateResponse,
)
router.add_api_route(
    "/machine-state-update",
    machine_state.update_machine_state,
    methods=["PUT"],
    response_model=MachineStateResponse,
)


@router.get("", response_model=List[BatchResponse])
def list_batches(
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """List all batches, newest first."""
    try:
        return coordinator.list_batches(db)
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
def create_batch(
    batch_data: BatchCreate,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """
    Start a new batch.

    - **title**: Batch title
    - **seedType**: Seed type code
    - **outputCount**: Number of pots to produce

    Rejected while another batch runs or while supplies are low.
    """
    try:
        return coordinator.create_batch(
            db,
            title=batch_data.title,
            seed_type=batch_data.seed_type,
            output_count=batch_data.output_count,
        )
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.get("/{batch_id}", response_model=BatchResponse)
def get_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """Get batch by ID."""
    try:
        return coordinator.get_batch(db, batch_id)
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.put("/{batch_id}", response_model=BatchResponse)
def report_progress(
    batch_id: int,
    update: BatchProgressUpdate,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """
    Report production progress.

    - **potsIncrement**: Pots completed since the last report (required, > 0)
    - **soilLevel**: Optional soil reading taken with the report
    - **cupLevel**: Optional cup reading taken with the report
    """
    try:
        return coordinator.report_progress(
            db,
            batch_id,
            update.pots_increment,
            soil_level=update.soil_level,
            cup_level=update.cup_level,
        )
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.put("/{batch_id}/cancel", response_model=BatchResponse)
def cancel_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """Cancel an Ongoing or Paused batch."""
    try:
        return coordinator.cancel_batch(db, batch_id)
    except CoordinatorError as e:
        raise to_http_exception(e)


@router.delete("/{batch_id}", response_model=MessageResponse)
def delete_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    coordinator: BatchCoordinator = Depends(get_coordinator),
):
    """Delete a batch. The active batch must be cancelled first."""
    try:
        coordinator.delete_batch(db, batch_id)
    except CoordinatorError as e:
        raise to_http_exception(e)

    return MessageResponse(message="Batch deleted successfully")
