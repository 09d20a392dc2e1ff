"""Batch status transition rules."""

from potting_api.models.batch import Batch
from potting_api.models.machine_state import MachineState
from potting_api.schemas.batch import BatchStatus
from potting_api.services.machine_state_service import supplies_sufficient


def is_terminal(batch: Batch) -> bool:
    return batch.status in BatchStatus.TERMINAL


def apply_rules(batch: Batch, state: MachineState, check_completion: bool = True) -> str:
    """
    Evaluate the transition rules against a non-terminal batch.

    Precedence:
    1. pots done reached the target -> Finished (count clamped, machine freed)
    2. any supply low -> Paused
    3. otherwise -> Ongoing

    Completion wins over low supplies. Supply-only updates pass
    ``check_completion=False`` so progress is never touched.

    Args:
        batch: Batch to transition (must not be terminal)
        state: Machine state holding supply levels and the active reference
        check_completion: Whether rule 1 is evaluated

    Returns:
        The resulting status
    """
    if is_terminal(batch):
        raise ValueError(f"Batch {batch.id} is already {batch.status}")

    if check_completion and batch.pots_done_count >= batch.output_count:
        batch.pots_done_count = batch.output_count
        batch.status = BatchStatus.FINISHED
        if state.active_batch_id == batch.id:
            state.active_batch_id = None
    elif not supplies_sufficient(state):
        batch.status = BatchStatus.PAUSED
    else:
        batch.status = BatchStatus.ONGOING

    return batch.status


def cancel(batch: Batch, state: MachineState) -> None:
    """Move an active batch to Cancelled and free the machine."""
    if is_terminal(batch):
        raise ValueError(f"Batch {batch.id} is already {batch.status}")

    batch.status = BatchStatus.CANCELLED
    if state.active_batch_id == batch.id:
        state.active_batch_id = None
