"""Batch and machine state coordination.

Every mutating operation runs read -> validate -> mutate -> persist while
holding the coordinator lock, so the single-active-batch rule and pot
counts survive concurrent requests. Hardware commands go out after the
lock is released and never affect the stored outcome.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from potting_api.models.batch import Batch
from potting_api.models.machine_state import MachineState
from potting_api.schemas.batch import MAX_COUNT, BatchStatus
from potting_api.services import batch_lifecycle, machine_state_service
from potting_api.services.errors import (
    ActiveBatchDeletionError,
    AlreadyActiveError,
    AlreadyTerminalError,
    BatchNotFoundError,
    InvalidInputError,
    StorageFailureError,
    SuppliesLowError,
)
from potting_api.services.hardware_notifier import BaseHardwareNotifier

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@contextmanager
def storage_guard(db: Session, action: str) -> Iterator[None]:
    """Roll back on any error; re-raise database errors as StorageFailureError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure while trying to {action}: {e}", exc_info=True)
        raise StorageFailureError(f"Storage failure while trying to {action}") from e
    except Exception:
        db.rollback()
        raise


class BatchCoordinator:
    """Applies external events to batches and the machine state."""

    def __init__(self, notifier: BaseHardwareNotifier, lock=None):
        self.notifier = notifier
        self.lock = lock if lock is not None else threading.RLock()

    # Queries

    def get_machine_state(self, db: Session) -> MachineState:
        with self.lock, storage_guard(db, "load machine state"):
            return machine_state_service.get_or_create(db)

    def list_batches(self, db: Session) -> List[Batch]:
        """All batches, newest first."""
        with storage_guard(db, "list batches"):
            return db.query(Batch).order_by(Batch.created_at.desc(), Batch.id.desc()).all()

    def get_batch(self, db: Session, batch_id: int) -> Batch:
        with storage_guard(db, f"load batch {batch_id}"):
            return self._load_batch(db, batch_id)

    # Commands

    def create_batch(self, db: Session, title: str, seed_type: int, output_count: int) -> Batch:
        """
        Start a new batch on a free machine with sufficient supplies.

        Args:
            db: Database session
            title: Batch title
            seed_type: Seed type code
            output_count: Number of pots to produce

        Returns:
            Created batch, status Ongoing

        Raises:
            InvalidInputError: If a field is missing or malformed
            AlreadyActiveError: If another batch is Ongoing or Paused
            SuppliesLowError: If soil or cups are low
        """
        if not isinstance(title, str) or not title.strip():
            raise InvalidInputError("title is required")
        if not _is_int(seed_type) or not 0 <= seed_type <= MAX_COUNT:
            raise InvalidInputError(f"seedType must be an integer between 0 and {MAX_COUNT}, got {seed_type!r}")
        if not _is_int(output_count) or not 0 < output_count <= MAX_COUNT:
            raise InvalidInputError(f"outputCount must be an integer between 1 and {MAX_COUNT}, got {output_count!r}")

        with self.lock, storage_guard(db, "create batch"):
            state = machine_state_service.get_or_create(db)

            if state.active_batch_id is not None:
                logger.warning(f"Rejected batch creation: batch {state.active_batch_id} is in progress")
                raise AlreadyActiveError(f"Batch {state.active_batch_id} is already in progress")
            if not machine_state_service.supplies_sufficient(state):
                logger.warning(
                    f"Rejected batch creation: supplies low (soil={state.soil_level}, cup={state.cup_level})"
                )
                raise SuppliesLowError("Cannot start: supplies are low")

            batch = Batch(
                title=title.strip(),
                seed_type=seed_type,
                output_count=output_count,
                pots_done_count=0,
                status=BatchStatus.ONGOING,
            )
            db.add(batch)
            db.flush()

            state.active_batch_id = batch.id
            db.commit()
            db.refresh(batch)

            logger.info(f"Batch {batch.id} created ({title!r}, {output_count} pots), machine busy")

        self.notifier.notify_start(batch.id)
        return batch

    def report_progress(
        self,
        db: Session,
        batch_id: int,
        pots_increment: Optional[int],
        soil_level: Optional[int] = None,
        cup_level: Optional[int] = None,
    ) -> Batch:
        """
        Add completed pots to a batch and re-evaluate its status.

        A supply reading sent along with the progress is applied to the
        machine state first. Reaching the target finishes the batch even
        when supplies read low in the same report.

        Args:
            db: Database session
            batch_id: Batch ID
            pots_increment: Pots completed since the last report (> 0)
            soil_level: Optional soil reading
            cup_level: Optional cup reading

        Returns:
            Updated batch

        Raises:
            InvalidInputError: If the increment is missing or not positive
            BatchNotFoundError: If batch not found
            AlreadyTerminalError: If batch is Finished or Cancelled
        """
        if pots_increment is None:
            raise InvalidInputError("potsIncrement is required")
        if not _is_int(pots_increment) or not 0 < pots_increment <= MAX_COUNT:
            raise InvalidInputError(f"potsIncrement must be an integer between 1 and {MAX_COUNT}, got {pots_increment!r}")

        with self.lock, storage_guard(db, f"update batch {batch_id}"):
            state = machine_state_service.get_or_create(db)
            batch = self._load_batch(db, batch_id)
            self._ensure_not_terminal(batch, "updated")

            if machine_state_service.apply_supply_reading(state, soil_level, cup_level):
                logger.info(f"Supply reading with progress: soil={state.soil_level}, cup={state.cup_level}")

            previous = batch.status
            batch.pots_done_count += pots_increment
            batch_lifecycle.apply_rules(batch, state)

            db.commit()
            db.refresh(batch)

            self._log_transition(batch, previous)

        return batch

    def apply_supply_reading(
        self,
        db: Session,
        soil_level: Optional[int] = None,
        cup_level: Optional[int] = None,
    ) -> MachineState:
        """
        Record a supply sensor reading and pause or resume the active batch.

        Args:
            db: Database session
            soil_level: Optional soil reading
            cup_level: Optional cup reading

        Returns:
            Updated machine state
        """
        with self.lock, storage_guard(db, "apply supply reading"):
            state = machine_state_service.get_or_create(db)
            changed = machine_state_service.apply_supply_reading(state, soil_level, cup_level)

            if state.active_batch_id is not None:
                batch = db.query(Batch).filter(Batch.id == state.active_batch_id).first()
                if batch is None or batch_lifecycle.is_terminal(batch):
                    logger.warning(f"Active batch {state.active_batch_id} is not running, freeing machine")
                    state.active_batch_id = None
                elif changed:
                    previous = batch.status
                    batch_lifecycle.apply_rules(batch, state, check_completion=False)
                    self._log_transition(batch, previous)

            db.commit()
            db.refresh(state)

            if changed:
                logger.info(f"Supply reading applied: soil={state.soil_level}, cup={state.cup_level}")
            else:
                logger.debug("Supply reading unchanged")

        return state

    def cancel_batch(self, db: Session, batch_id: int) -> Batch:
        """
        Cancel an Ongoing or Paused batch and free the machine.

        Raises:
            BatchNotFoundError: If batch not found
            AlreadyTerminalError: If batch is Finished or Cancelled
        """
        with self.lock, storage_guard(db, f"cancel batch {batch_id}"):
            state = machine_state_service.get_or_create(db)
            batch = self._load_batch(db, batch_id)
            self._ensure_not_terminal(batch, "cancelled")

            batch_lifecycle.cancel(batch, state)

            db.commit()
            db.refresh(batch)

            logger.info(f"Batch {batch.id} cancelled, machine free")

        self.notifier.notify_stop()
        return batch

    def delete_batch(self, db: Session, batch_id: int) -> None:
        """
        Permanently delete a batch that is not the active one.

        Raises:
            ActiveBatchDeletionError: If batch is the active batch
            BatchNotFoundError: If batch not found
        """
        with self.lock, storage_guard(db, f"delete batch {batch_id}"):
            state = machine_state_service.get_or_create(db)

            if state.active_batch_id == batch_id:
                logger.warning(f"Rejected deletion of active batch {batch_id}")
                raise ActiveBatchDeletionError("Cannot delete an active batch. Cancel it first.")

            batch = self._load_batch(db, batch_id)
            db.delete(batch)
            db.commit()

            logger.info(f"Batch {batch_id} deleted")

    # Helpers

    def _load_batch(self, db: Session, batch_id: int) -> Batch:
        batch = db.query(Batch).filter(Batch.id == batch_id).first()
        if not batch:
            raise BatchNotFoundError(f"Batch {batch_id} not found")
        return batch

    def _ensure_not_terminal(self, batch: Batch, verb: str) -> None:
        if batch_lifecycle.is_terminal(batch):
            logger.warning(f"Rejected change to batch {batch.id}: status is {batch.status}")
            raise AlreadyTerminalError(f"Batch {batch.id} cannot be {verb}, status is: {batch.status}")

    def _log_transition(self, batch: Batch, previous: str) -> None:
        if batch.status != previous:
            logger.info(f"Batch {batch.id}: {previous} -> {batch.status} ({batch.pots_done_count}/{batch.output_count})")
