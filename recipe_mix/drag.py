"""Divider drag sessions over the mix bar.

A drag is an explicit, caller-owned session: ``begin_drag`` captures the
divider, every ``update_drag`` produces a fresh mix for re-rendering, and
``end_drag`` releases the session. Ending performs no computation, so the
last update stands; there is no rollback to the pre-drag mix.
"""

import logging
from dataclasses import dataclass, replace

from recipe_mix.models import AllocationSet
from recipe_mix.rebalance import set_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragSession:
    """State of one divider drag.

    Parameters
    ----------
    divider_index : int
        Index of the entry left of the dragged divider.
    active : bool
        ``False`` once the pointer was released.
    """

    divider_index: int
    active: bool = True


def divider_positions(allocation: AllocationSet) -> list[float]:
    """Cumulative percentage at each divider, left to right.

    A mix of ``n`` entries has ``n - 1`` dividers.
    """
    positions = []
    cumulative = 0.0
    for entry in allocation.entries[:-1]:
        cumulative += entry.percentage
        positions.append(cumulative)
    return positions


def pointer_to_percentage(pointer_x: float, bar_left: float, bar_width: float) -> float:
    """Convert a pointer coordinate over the mix bar to percent of its width.

    Parameters
    ----------
    pointer_x : float
        Horizontal pointer position.
    bar_left : float
        Left edge of the bar, same coordinate space.
    bar_width : float
        Width of the bar.

    Returns
    -------
    float
        Unclamped position; ``0.0`` for a bar without width.
    """
    if bar_width <= 0:
        return 0.0
    return (pointer_x - bar_left) / bar_width * 100


def begin_drag(
    allocation: AllocationSet,
    divider_index: int,
    current: DragSession | None = None,
) -> DragSession | None:
    """Start dragging the divider right of entry ``divider_index``.

    Parameters
    ----------
    allocation : AllocationSet
        Mix being edited.
    divider_index : int
        Index of the entry left of the divider.
    current : DragSession, optional
        Session already held by the caller. An active one is returned
        unchanged, since only one drag may run at a time.

    Returns
    -------
    DragSession | None
        ``None`` if the mix has no such divider.
    """
    if current is not None and current.active:
        logger.warning("Drag on divider %d still active, ignoring begin", current.divider_index)
        return current
    if not (0 <= divider_index < len(allocation) - 1):
        return None
    return DragSession(divider_index=divider_index)


def update_drag(session: DragSession | None, allocation: AllocationSet, raw_percentage: float) -> AllocationSet:
    """Apply the latest pointer position of an active drag."""
    if session is None or not session.active:
        return allocation
    return set_split(allocation, session.divider_index, raw_percentage)


def end_drag(session: DragSession | None) -> DragSession | None:
    """Finish a drag.

    Nothing is recomputed; the last ``update_drag`` result stands.

    Returns
    -------
    DragSession | None
        An inactive copy of ``session``.
    """
    if session is None:
        return None
    return replace(session, active=False)
