"""Proportional rebalancing of a recipe mix.

Adds and removes sources while keeping the mix at exactly 100 percent, and
moves the boundary between two neighbouring shares when a divider is
dragged. Every operation is total: invalid requests return the input set
unchanged.
"""

import logging
import math

from recipe_mix._types import SourceLike
from recipe_mix.models import TOTAL, AllocationEntry, AllocationSet, round_half_up, rounding_correct

logger = logging.getLogger(__name__)


def add_source(allocation: AllocationSet, source_id: str) -> AllocationSet:
    """Append a source and compress the existing shares to make room.

    With ``n`` entries after the addition, each existing share is scaled
    by ``(n - 1) / n`` and rounded half-up. The new entrant takes what is
    left, which is ``round(100 / n)`` unless the per-entry rounding drifts.
    The drift is intended: ``{A:50, B:50}`` plus C gives ``{33, 33, 34}``
    and ``{33, 33, 34}`` plus D gives ``{25, 25, 26, 24}``, so the entrant
    can end up one point off ``round(100 / n)`` for four or more sources.

    Parameters
    ----------
    allocation : AllocationSet
        Current mix.
    source_id : str
        Source to add. Already-present sources leave the mix unchanged.

    Returns
    -------
    AllocationSet
    """
    if source_id in allocation:
        return allocation
    if allocation.is_empty:
        return AllocationSet.of((source_id, TOTAL))

    n = len(allocation) + 1
    scaled = [max(1, round_half_up(e.percentage * (n - 1) / n)) for e in allocation]
    new_share = TOTAL - sum(scaled)
    if new_share < 1:
        new_share = 1
        scaled = rounding_correct(scaled, TOTAL - new_share)

    entries = [e.with_percentage(pct) for e, pct in zip(allocation, scaled)]
    entries.append(AllocationEntry(source_id, new_share))
    return AllocationSet(tuple(entries))


def redistribute(remaining: list[AllocationEntry], freed: float) -> AllocationSet:
    """Spread a freed share over the remaining entries.

    The share is split proportionally to the current percentages, or
    equally if they sum to zero. Results are rounded half-up and the first
    entry absorbs the rounding remainder.

    Parameters
    ----------
    remaining : list[AllocationEntry]
        Entries left after a removal, in order.
    freed : float
        Percentage released by the removed entry.

    Returns
    -------
    AllocationSet
        Empty if nothing remains.
    """
    if not remaining:
        return AllocationSet()

    remaining_total = sum(e.percentage for e in remaining)
    if remaining_total > 0:
        raw = [e.percentage + freed * e.percentage / remaining_total for e in remaining]
    else:
        raw = [e.percentage + freed / len(remaining) for e in remaining]

    corrected = rounding_correct([round_half_up(value) for value in raw])
    # Rounding can only zero out fractional legacy shares.
    return AllocationSet(tuple(e.with_percentage(pct) for e, pct in zip(remaining, corrected) if pct > 0))


def remove_source(allocation: AllocationSet, source_id: str) -> AllocationSet:
    """Remove a source and hand its share to the others.

    Parameters
    ----------
    allocation : AllocationSet
        Current mix.
    source_id : str
        Source to remove. Absent sources leave the mix unchanged.

    Returns
    -------
    AllocationSet
    """
    removed = allocation.get(source_id)
    if removed is None:
        return allocation
    remaining = [e for e in allocation if e.source_id != source_id]
    return redistribute(remaining, removed.percentage)


def toggle_source(
    allocation: AllocationSet,
    source: SourceLike,
    max_entries: int | None = None,
) -> AllocationSet:
    """Remove ``source`` if it is in the mix, otherwise add it.

    Parameters
    ----------
    allocation : AllocationSet
        Current mix.
    source : SourceLike
        Toggled source. Unusable sources are never added.
    max_entries : int, optional
        Upper bound on the number of ingredients; adding to a full mix is
        a no-op.

    Returns
    -------
    AllocationSet
    """
    if source.id in allocation:
        result = remove_source(allocation, source.id)
        logger.debug("Removed source %s: %s", source.id, result.as_dict())
        return result
    if not source.usable:
        logger.debug("Ignoring unusable source %s", source.id)
        return allocation
    if max_entries is not None and len(allocation) >= max_entries:
        logger.debug("Mix already holds %d ingredients, not adding %s", len(allocation), source.id)
        return allocation
    result = add_source(allocation, source.id)
    logger.debug("Added source %s: %s", source.id, result.as_dict())
    return result


def set_split(allocation: AllocationSet, divider_index: int, raw_percentage: float) -> AllocationSet:
    """Move the boundary between entry ``divider_index`` and the next one.

    ``raw_percentage`` is the pointer position on the whole mix bar; the
    cumulative share before ``divider_index`` is subtracted to obtain the
    left-hand share. The left share is rounded and clamped so both sides
    keep at least one percent and neither exceeds 100, and the right share
    takes the rest of the pair. Other entries are untouched.

    Parameters
    ----------
    allocation : AllocationSet
        Current mix, at least two entries.
    divider_index : int
        Index of the entry left of the dragged divider.
    raw_percentage : float
        Pointer position in percent of the bar width.

    Returns
    -------
    AllocationSet
    """
    if not (0 <= divider_index < len(allocation) - 1):
        return allocation
    if not math.isfinite(raw_percentage):
        return allocation

    left_entry = allocation[divider_index]
    right_entry = allocation[divider_index + 1]
    combined = left_entry.percentage + right_entry.percentage
    # Legacy mixes can exceed 100 in total; neither side may pass 100.
    lower = max(1, combined - TOTAL)
    upper = min(combined - 1, TOTAL)
    if lower > upper:
        return allocation

    offset = sum(e.percentage for e in allocation.entries[:divider_index])
    left = min(max(round_half_up(raw_percentage - offset), lower), upper)
    if left == left_entry.percentage:
        return allocation

    entries = list(allocation.entries)
    entries[divider_index] = left_entry.with_percentage(left)
    entries[divider_index + 1] = right_entry.with_percentage(combined - left)
    return AllocationSet(tuple(entries))
