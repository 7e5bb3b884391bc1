"""Tests for taskboard.fsm module."""

import pytest
from transitions import MachineError

from taskboard.fsm import MoveStateMachine, STATES, TRANSITIONS


class TestMoveStateMachine:
    """Tests for the idle/moving machine."""

    def test_states_defined(self):
        assert STATES == ["idle", "moving"]
        assert {t["trigger"] for t in TRANSITIONS} == {"begin_move", "end_move"}

    def test_starts_idle(self):
        fsm = MoveStateMachine()
        assert fsm.state == "idle"
        assert not fsm.busy

    def test_begin_and_end(self):
        fsm = MoveStateMachine()
        fsm.begin_move()
        assert fsm.state == "moving"
        assert fsm.busy
        fsm.end_move()
        assert fsm.state == "idle"

    def test_cannot_begin_twice(self):
        """Only one move can be in flight."""
        fsm = MoveStateMachine()
        fsm.begin_move()
        with pytest.raises(MachineError):
            fsm.begin_move()

    def test_cannot_end_when_idle(self):
        fsm = MoveStateMachine()
        with pytest.raises(MachineError):
            fsm.end_move()
