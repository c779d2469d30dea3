"""Commit gate for recipe mixes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from recipe_mix._types import SourceLike
from recipe_mix.models import TOTAL, AllocationSet
from recipe_mix.reconcile import classify

logger = logging.getLogger(__name__)

SUM_TOLERANCE = 0.1

EMPTY_MIX = "EMPTY_MIX"
SUM_MISMATCH = "SUM_MISMATCH"
SHARE_BELOW_MINIMUM = "SHARE_BELOW_MINIMUM"
MISSING_SOURCES = "MISSING_SOURCES"


@dataclass(frozen=True)
class CommitVerdict:
    """Outcome of a commit check.

    Parameters
    ----------
    ok : bool
        Whether the mix may be handed to the persistence collaborator.
    reason : str | None
        ``EMPTY_MIX``, ``SUM_MISMATCH``, ``SHARE_BELOW_MINIMUM`` or
        ``MISSING_SOURCES``; ``None`` when ``ok``.
    total : float
        Sum of the mix percentages.
    missing : tuple[str, ...]
        Source ids without a usable source, for ``MISSING_SOURCES``.
    undersized : tuple[str, ...]
        Source ids holding less than one percent, for ``SHARE_BELOW_MINIMUM``.
    """

    ok: bool
    reason: str | None = None
    total: float = 0.0
    missing: tuple[str, ...] = field(default_factory=tuple)
    undersized: tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.ok


def can_commit(
    allocation: AllocationSet,
    sources: Iterable[SourceLike],
    tolerance: float = SUM_TOLERANCE,
) -> CommitVerdict:
    """Check whether a mix may be saved.

    Checks run in order: the mix must be non-empty, its total must be
    within ``tolerance`` of 100, every entry must hold at least one percent
    and every entry must reference a usable source of the roster.

    Parameters
    ----------
    allocation : AllocationSet
        Mix to commit.
    sources : Iterable[SourceLike]
        Roster snapshot. An empty roster marks every entry as missing.
    tolerance : float
        Accepted deviation of the total, for fractional legacy data.

    Returns
    -------
    CommitVerdict
    """
    total = allocation.total
    if allocation.is_empty:
        return CommitVerdict(ok=False, reason=EMPTY_MIX, total=total)
    if abs(total - TOTAL) > tolerance:
        # Mixes built through the rebalancing operations always sum to 100.
        logger.warning("Mix total %s deviates from %d", total, TOTAL)
        return CommitVerdict(ok=False, reason=SUM_MISMATCH, total=total)
    undersized = tuple(e.source_id for e in allocation if e.percentage < 1)
    if undersized:
        # Legacy data can hold fractional shares the editor cannot drag.
        logger.warning("Shares below 1%% for %s", ", ".join(undersized))
        return CommitVerdict(ok=False, reason=SHARE_BELOW_MINIMUM, total=total, undersized=undersized)
    missing = classify(allocation, sources).missing_ids
    if missing:
        return CommitVerdict(ok=False, reason=MISSING_SOURCES, total=total, missing=tuple(missing))
    return CommitVerdict(ok=True, total=total)
