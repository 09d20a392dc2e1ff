"""Tests for batch status transition rules."""

import pytest

from potting_api.models.batch import Batch
from potting_api.models.machine_state import MachineState
from potting_api.schemas.batch import BatchStatus
from potting_api.schemas.machine_state import SupplyLevel
from potting_api.services import batch_lifecycle


def make_batch(pots_done=0, output=5, status=BatchStatus.ONGOING):
    return Batch(
        id=1,
        title="Basil",
        seed_type=2,
        output_count=output,
        pots_done_count=pots_done,
        status=status,
    )


def make_state(soil=SupplyLevel.SUFFICIENT, cup=SupplyLevel.SUFFICIENT, active=1):
    return MachineState(singleton_key="main", soil_level=soil, cup_level=cup, active_batch_id=active)


class TestApplyRules:
    """Tests for apply_rules precedence."""

    def test_ongoing_when_supplies_sufficient(self):
        batch, state = make_batch(pots_done=2), make_state()
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.ONGOING
        assert state.active_batch_id == 1

    def test_paused_when_soil_low(self):
        batch, state = make_batch(pots_done=2), make_state(soil=SupplyLevel.LOW)
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.PAUSED

    def test_paused_when_cups_low(self):
        batch, state = make_batch(pots_done=2), make_state(cup=SupplyLevel.LOW)
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.PAUSED

    def test_paused_resumes_once_supplies_recover(self):
        batch, state = make_batch(pots_done=2, status=BatchStatus.PAUSED), make_state()
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.ONGOING

    def test_finished_clamps_and_frees_machine(self):
        batch, state = make_batch(pots_done=7), make_state()
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.FINISHED
        assert batch.pots_done_count == 5
        assert state.active_batch_id is None

    def test_finished_wins_over_low_supplies(self):
        batch, state = make_batch(pots_done=5), make_state(soil=SupplyLevel.LOW, cup=SupplyLevel.LOW)
        assert batch_lifecycle.apply_rules(batch, state) == BatchStatus.FINISHED
        assert state.active_batch_id is None

    def test_supply_only_evaluation_skips_completion(self):
        batch, state = make_batch(pots_done=5), make_state(soil=SupplyLevel.LOW)
        assert batch_lifecycle.apply_rules(batch, state, check_completion=False) == BatchStatus.PAUSED
        assert state.active_batch_id == 1

    def test_does_not_clear_reference_to_other_batch(self):
        batch, state = make_batch(pots_done=5), make_state(active=99)
        batch_lifecycle.apply_rules(batch, state)
        assert state.active_batch_id == 99

    @pytest.mark.parametrize("status", BatchStatus.TERMINAL)
    def test_terminal_batch_rejected(self, status):
        with pytest.raises(ValueError):
            batch_lifecycle.apply_rules(make_batch(status=status), make_state())


class TestCancel:
    """Tests for cancel."""

    def test_cancel_paused_batch(self):
        batch, state = make_batch(status=BatchStatus.PAUSED), make_state(soil=SupplyLevel.LOW)
        batch_lifecycle.cancel(batch, state)
        assert batch.status == BatchStatus.CANCELLED
        assert state.active_batch_id is None

    def test_cancel_finished_batch_rejected(self):
        batch = make_batch(pots_done=5, status=BatchStatus.FINISHED)
        with pytest.raises(ValueError):
            batch_lifecycle.cancel(batch, make_state(active=None))
        assert batch.status == BatchStatus.FINISHED
