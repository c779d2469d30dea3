"""Reconciliation of saved mixes against the current source roster.

A saved recipe can reference a tank that has since been removed or lost its
capacity/density configuration. Such entries are reported as missing and
resolved by substituting another source or dropping them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from recipe_mix._types import SourceLike
from recipe_mix.models import TOTAL, AllocationEntry, AllocationSet
from recipe_mix.rebalance import remove_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Partition of a mix by source availability.

    Parameters
    ----------
    valid : AllocationSet
        Entries whose source is in the roster and usable, in mix order.
    missing : AllocationSet
        Entries whose source is absent or unusable, in mix order.
    """

    valid: AllocationSet
    missing: AllocationSet

    @property
    def missing_ids(self) -> list[str]:
        return self.missing.source_ids


def _usable_ids(sources: Iterable[SourceLike]) -> set[str]:
    return {s.id for s in sources if s.usable}


def classify(allocation: AllocationSet, sources: Iterable[SourceLike]) -> Classification:
    """Split a mix into entries with and without a usable source.

    Parameters
    ----------
    allocation : AllocationSet
        Mix to inspect.
    sources : Iterable[SourceLike]
        Current roster snapshot.

    Returns
    -------
    Classification
    """
    usable = _usable_ids(sources)
    valid = tuple(e for e in allocation if e.source_id in usable)
    missing = tuple(e for e in allocation if e.source_id not in usable)
    return Classification(valid=AllocationSet(valid), missing=AllocationSet(missing))


def substitute(
    allocation: AllocationSet,
    missing_source_id: str,
    replacement_source_id: str,
    sources: Iterable[SourceLike],
) -> AllocationSet:
    """Point a missing entry at another source.

    If the replacement already has an entry, the two are merged into the
    replacement's position and the missing entry is dropped. Otherwise the
    missing entry keeps its position and percentage under the new id.

    Parameters
    ----------
    allocation : AllocationSet
        Mix being reconciled.
    missing_source_id : str
        Source id of the entry to resolve.
    replacement_source_id : str
        Source taking over the share.
    sources : Iterable[SourceLike]
        Roster snapshot. A replacement that is absent or unusable is refused.

    Returns
    -------
    AllocationSet
        Unchanged when there is nothing to substitute.
    """
    missing = allocation.get(missing_source_id)
    if missing is None or missing_source_id == replacement_source_id:
        return allocation
    if replacement_source_id not in _usable_ids(sources):
        logger.warning("Refusing substitution with unusable source %s", replacement_source_id)
        return allocation

    if replacement_source_id in allocation:
        logger.info("Merging %s into existing entry %s", missing_source_id, replacement_source_id)
        merged = min(allocation.get(replacement_source_id).percentage + missing.percentage, TOTAL)
        entries = tuple(
            e.with_percentage(merged) if e.source_id == replacement_source_id else e
            for e in allocation
            if e.source_id != missing_source_id
        )
    else:
        logger.info("Replacing %s with %s", missing_source_id, replacement_source_id)
        entries = tuple(
            AllocationEntry(replacement_source_id, e.percentage) if e.source_id == missing_source_id else e
            for e in allocation
        )
    return AllocationSet(entries)


def drop(allocation: AllocationSet, missing_source_id: str) -> AllocationSet:
    """Remove a missing entry and redistribute its share proportionally."""
    return remove_source(allocation, missing_source_id)


def reconcile(allocation: AllocationSet, sources: Iterable[SourceLike]) -> AllocationSet:
    """Drop every missing entry, in mix order.

    A mix without missing entries is returned as is.

    Parameters
    ----------
    allocation : AllocationSet
        Mix to reconcile.
    sources : Iterable[SourceLike]
        Current roster snapshot.

    Returns
    -------
    AllocationSet
    """
    classification = classify(allocation, sources)
    if classification.missing.is_empty:
        return allocation
    result = allocation
    for source_id in classification.missing_ids:
        result = drop(result, source_id)
    logger.info("Dropped %d missing sources: %s", len(classification.missing), classification.missing_ids)
    return result


def substitution_candidates(sources: Iterable[SourceLike]) -> list[SourceLike]:
    """Usable sources a missing entry can be substituted with, in roster order.

    Sources already in the mix are included; choosing one merges the shares.
    """
    return [s for s in sources if s.usable]
