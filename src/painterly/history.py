"""Linear undo/redo over the persistent canvas.

State machine over (snapshots, cursor), initial state ((), 0):

    push   truncate snapshots to cursor, append the current pixels, cursor += 1
    undo   no-op at cursor 0; otherwise clear the canvas, restore
           snapshots[cursor - 2] when cursor > 1, cursor -= 1
    redo   no-op at cursor == len; otherwise clear the canvas, restore
           snapshots[cursor], cursor += 1
    clear  drop all snapshots, cursor = 0 (the canvas itself is cleared by
           the caller)

There is no snapshot of the empty canvas: undoing the first action restores
the blank background.

transition() is pure; HistoryManager applies its result to a RasterBuffer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.painterly.raster import RasterBuffer, Snapshot

logger = logging.getLogger(__name__)


class HistoryAction(Enum):
    PUSH = "push"
    UNDO = "undo"
    REDO = "redo"
    CLEAR = "clear"


@dataclass(frozen=True)
class HistoryState:
    """Snapshots plus cursor; 0 <= cursor <= len(snapshots)."""
    snapshots: Tuple[Snapshot, ...] = ()
    cursor: int = 0

    def __post_init__(self):
        if not 0 <= self.cursor <= len(self.snapshots):
            raise ValueError(
                f"cursor {self.cursor} out of range for {len(self.snapshots)} snapshots"
            )

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self.snapshots)


@dataclass(frozen=True)
class Transition:
    """Result of one transition.

    Attributes
    ----------
    state : HistoryState
        State after the action
    changed : bool
        False for no-ops
    reset_canvas : bool
        Canvas must be cleared to background (undo/redo)
    restore : Snapshot, optional
        Snapshot to draw after clearing; None leaves the blank background
    """
    state: HistoryState
    changed: bool
    reset_canvas: bool = False
    restore: Optional[Snapshot] = None


def transition(
    state: HistoryState,
    action: HistoryAction,
    snapshot: Optional[Snapshot] = None
) -> Transition:
    """Compute the next history state.

    Parameters
    ----------
    state : HistoryState
        Current state
    action : HistoryAction
        Requested transition
    snapshot : Snapshot, optional
        Current canvas pixels; required for PUSH

    Returns
    -------
    Transition
        New state and the canvas effect to apply

    Raises
    ------
    ValueError
        If PUSH is requested without a snapshot
    """
    snapshots, cursor = state.snapshots, state.cursor

    if action is HistoryAction.PUSH:
        if snapshot is None:
            raise ValueError("PUSH requires a snapshot of the current canvas")
        new_state = HistoryState(snapshots[:cursor] + (snapshot,), cursor + 1)
        return Transition(new_state, changed=True)

    if action is HistoryAction.UNDO:
        if cursor == 0:
            return Transition(state, changed=False)
        restore = snapshots[cursor - 2] if cursor > 1 else None
        return Transition(HistoryState(snapshots, cursor - 1), True, True, restore)

    if action is HistoryAction.REDO:
        if cursor == len(snapshots):
            return Transition(state, changed=False)
        return Transition(HistoryState(snapshots, cursor + 1), True, True, snapshots[cursor])

    if action is HistoryAction.CLEAR:
        return Transition(HistoryState(), changed=bool(snapshots) or cursor != 0)

    raise ValueError(f"Unknown history action: {action}")


class HistoryManager:
    """Applies history transitions to a canvas buffer.

    Every operation is a no-op (returning False) while no buffer is attached.
    """

    def __init__(self, buffer: Optional[RasterBuffer] = None):
        self.buffer = buffer
        self.state = HistoryState()

    @property
    def cursor(self) -> int:
        return self.state.cursor

    @property
    def snapshots(self) -> Tuple[Snapshot, ...]:
        return self.state.snapshots

    def __len__(self) -> int:
        return len(self.state.snapshots)

    def attach(self, buffer: Optional[RasterBuffer]) -> None:
        self.buffer = buffer

    def _apply(self, action: HistoryAction) -> bool:
        if self.buffer is None:
            logger.debug(f"History {action.value} ignored: no canvas attached")
            return False

        snapshot = self.buffer.snapshot() if action is HistoryAction.PUSH else None
        result = transition(self.state, action, snapshot)
        self.state = result.state

        if result.reset_canvas:
            self.buffer.clear()
            if result.restore is not None:
                self.buffer.restore(result.restore)

        logger.debug(
            f"History {action.value}: cursor={self.state.cursor}/{len(self.state.snapshots)}"
            + ("" if result.changed else " (no-op)")
        )
        return result.changed

    def push(self) -> bool:
        return self._apply(HistoryAction.PUSH)

    def undo(self) -> bool:
        return self._apply(HistoryAction.UNDO)

    def redo(self) -> bool:
        return self._apply(HistoryAction.REDO)

    def clear(self) -> bool:
        return self._apply(HistoryAction.CLEAR)
