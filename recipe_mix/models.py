"""Data models for the recipe mix engine."""

import logging
import math
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from recipe_mix._types import IngredientPayload, RecipePayload

logger = logging.getLogger(__name__)

TOTAL = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values.

    The browser client rounds with ``Math.round``; Python's ``round`` would
    send 33.5 and 34.5 to the same even neighbour.

    Parameters
    ----------
    value : float
        Value to round.

    Returns
    -------
    int
    """
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Source:
    """A food source (tank) as seen by the engine.

    Parameters
    ----------
    id : str
        Opaque source identifier (the tank UID).
    name : str
        Display name.
    usable : bool
        Whether the source carries a valid physical configuration and may
        receive a new allocation.
    """

    id: str
    name: str = ""
    usable: bool = True

    @classmethod
    def from_tank(cls, tank: Mapping[str, Any]) -> "Source":
        """Build a source from a tank record of the device API.

        A tank is usable only with both a positive capacity and a positive
        density.

        Parameters
        ----------
        tank : Mapping[str, Any]
            Must contain ``uid``; ``name``, ``capacity`` and ``density`` are
            optional.

        Returns
        -------
        Source
        """
        capacity = tank.get("capacity") or 0
        density = tank.get("density") or 0
        return cls(
            id=tank["uid"],
            name=tank.get("name", ""),
            usable=float(capacity) > 0 and float(density) > 0,
        )


@dataclass(frozen=True)
class AllocationEntry:
    """Share of the mix assigned to one source.

    Parameters
    ----------
    source_id : str
        Identifier of the source.
    percentage : float
        Share between 0 and 100. Integer for every entry the engine creates;
        saved legacy data may carry fractions.

    Raises
    ------
    ValueError
        If percentage is outside [0, 100].
    """

    source_id: str
    percentage: float

    def __post_init__(self) -> None:
        """Validate the percentage range."""
        if not (0 <= self.percentage <= TOTAL):
            raise ValueError("Percentage must be between 0 and 100.")

    def with_percentage(self, percentage: float) -> "AllocationEntry":
        """Return a copy holding ``percentage``."""
        return replace(self, percentage=percentage)


@dataclass(frozen=True)
class AllocationSet:
    """Ordered, immutable mapping of source to percentage.

    Order matters: the first entry absorbs rounding remainders and the index
    of an entry identifies the drag handle to its right.

    Parameters
    ----------
    entries : tuple[AllocationEntry, ...]
        Entries in display order, unique by ``source_id``.

    Raises
    ------
    ValueError
        If two entries reference the same source.
    """

    entries: tuple[AllocationEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Freeze the entries and check uniqueness."""
        entries = tuple(self.entries)
        object.__setattr__(self, "entries", entries)
        ids = [e.source_id for e in entries]
        if len(set(ids)) != len(ids):
            raise ValueError("Allocation entries must have unique source ids.")

    @classmethod
    def of(cls, *pairs: tuple[str, float]) -> "AllocationSet":
        """Build a set from ``(source_id, percentage)`` pairs."""
        return cls(tuple(AllocationEntry(sid, pct) for sid, pct in pairs))

    @classmethod
    def from_ingredients(cls, ingredients: Iterable[Mapping[str, Any]]) -> "AllocationSet":
        """Seed a set from a saved recipe's ingredient list.

        Zero-share ingredients are pruned and repeated references to one
        source are merged into the first occurrence. The total is left
        as saved so that a corrupt mix is reported at commit time.

        Parameters
        ----------
        ingredients : Iterable[Mapping[str, Any]]
            Each item carries ``tank_uid`` (device field) or ``source_id``,
            and ``percentage``.

        Returns
        -------
        AllocationSet
        """
        merged: dict[str, float] = {}
        for ingredient in ingredients:
            source_id = ingredient.get("tank_uid", ingredient.get("source_id"))
            percentage = ingredient.get("percentage") or 0
            if source_id is None or percentage <= 0:
                logger.debug("Pruning empty ingredient %r", ingredient)
                continue
            if source_id in merged:
                logger.info("Merging repeated ingredient for source %s", source_id)
            merged[source_id] = merged.get(source_id, 0) + percentage
        return cls(tuple(AllocationEntry(sid, min(pct, TOTAL)) for sid, pct in merged.items()))

    def to_ingredients(self) -> list[IngredientPayload]:
        """Export the mix in device field names, in order."""
        return [{"tank_uid": e.source_id, "percentage": e.percentage} for e in self.entries]

    def __iter__(self) -> Iterator[AllocationEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> AllocationEntry:
        return self.entries[index]

    def __contains__(self, source_id: object) -> bool:
        return any(e.source_id == source_id for e in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def total(self) -> float:
        return sum(e.percentage for e in self.entries)

    @property
    def source_ids(self) -> list[str]:
        return [e.source_id for e in self.entries]

    def as_dict(self) -> dict[str, float]:
        return {e.source_id: e.percentage for e in self.entries}

    def get(self, source_id: str) -> AllocationEntry | None:
        for entry in self.entries:
            if entry.source_id == source_id:
                return entry
        return None

    def index(self, source_id: str) -> int:
        """Position of ``source_id``, or ``-1`` when absent."""
        for idx, entry in enumerate(self.entries):
            if entry.source_id == source_id:
                return idx
        return -1


def rounding_correct(percentages: Sequence[int], target: int = TOTAL, minimum: int = 1) -> list[int]:
    """Restore an exact total after independent per-entry rounding.

    The whole difference ``target - sum`` is added to the first entry, so
    the outcome is deterministic and depends on entry order only. A
    negative correction never takes an entry below ``minimum``; whatever
    the first entry cannot absorb carries over to the next ones.

    Parameters
    ----------
    percentages : Sequence[int]
        Independently rounded percentages.
    target : int
        Required total.
    minimum : int
        Smallest share a corrected entry may be left with.

    Returns
    -------
    list[int]
        New list; empty input yields an empty list.
    """
    result = list(percentages)
    diff = target - sum(result)
    if diff:
        logger.debug("Rounding correction of %+d applied from first entry", diff)
    for idx, value in enumerate(result):
        if not diff:
            break
        adjusted = max(value + diff, min(value, minimum))
        diff -= adjusted - value
        result[idx] = adjusted
    return result


def recipe_defaults() -> dict[str, Any]:
    """Field values of a recipe that has never been saved."""
    return {"id": 0, "name": "", "is_enabled": True, "daily_weight": 100, "servings": 2}


@dataclass
class Recipe:
    """Feeding recipe whose ingredient list is the allocation set.

    Parameters
    ----------
    id : int
        Recipe identifier, ``0`` when new.
    name : str
        Display name.
    daily_weight : float
        Grams dispensed per day.
    servings : int
        Number of servings per day.
    is_enabled : bool
        Whether the feeder schedules this recipe.
    ingredients : AllocationSet
        The mix.
    """

    id: int = 0
    name: str = ""
    daily_weight: float = 100
    servings: int = 2
    is_enabled: bool = True
    ingredients: AllocationSet = field(default_factory=AllocationSet)

    def __post_init__(self) -> None:
        """Validate the portioning fields."""
        if self.daily_weight < 0:
            raise ValueError("daily_weight must be non-negative")
        if self.servings < 1:
            raise ValueError("servings must be at least 1")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Recipe":
        """Build a recipe from its device JSON shape, filling missing fields with defaults."""
        values = {**recipe_defaults(), **payload}
        return cls(
            id=values["id"],
            name=values["name"],
            daily_weight=values["daily_weight"],
            servings=values["servings"],
            is_enabled=values["is_enabled"],
            ingredients=AllocationSet.from_ingredients(values.get("ingredients") or []),
        )

    def to_payload(self) -> RecipePayload:
        """Device JSON shape, with ingredients in mix order."""
        return {
            "id": self.id,
            "name": self.name,
            "is_enabled": self.is_enabled,
            "daily_weight": self.daily_weight,
            "servings": self.servings,
            "ingredients": self.ingredients.to_ingredients(),
        }
