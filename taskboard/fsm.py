"""Move state machine using transitions library.

A board accepts one drag-and-drop move at a time:

    idle --begin_move--> moving --end_move--> idle

Moves attempted while the machine is in ``moving`` are rejected by the
caller, not queued.
"""

import logging

from transitions import Machine

logger = logging.getLogger("taskboard.fsm")


STATES = ["idle", "moving"]

TRANSITIONS = [
    {"trigger": "begin_move", "source": "idle", "dest": "moving"},
    {"trigger": "end_move", "source": "moving", "dest": "idle"},
]


class MoveStateMachine:
    """Tracks whether a move is in flight"""

    def __init__(self):
        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            after_state_change="on_state_change",
        )

    @property
    def busy(self) -> bool:
        return self.state == "moving"

    def on_state_change(self) -> None:
        logger.debug(f"[FSM] move state -> {self.state}")
