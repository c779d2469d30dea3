"""EDITOR component: one recipe editing session over the mix engine."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any, Protocol

from recipe_mix import drag as drag_ops
from recipe_mix import reconcile as reconcile_ops
from recipe_mix._types import RecipeStore, SourceLike
from recipe_mix.models import AllocationSet, Recipe
from recipe_mix.rebalance import toggle_source
from recipe_mix.validate import SUM_TOLERANCE, CommitVerdict, can_commit

logger = logging.getLogger(__name__)

MAX_INGREDIENTS = 6


class EditorComponent(Protocol):
    """Structural interface for UI event handlers."""

    def execute(self, event: dict) -> dict:
        """Process event and return the state to render."""
        ...


class MixEditor(EditorComponent):
    """Edit the ingredient mix of a single recipe.

    Holds the recipe under edit and the active drag session, dispatches UI
    interactions to the rebalancing and reconciliation operations, and
    hands the validated payload to the persistence collaborator on save.
    Interactions while no recipe is open are ignored.

    Parameters
    ----------
    max_ingredients : int
        Largest number of sources a mix may hold.
    sum_tolerance : float
        Accepted deviation of the mix total at commit time.

    Raises
    ------
    ValueError
        If max_ingredients is below 1 or sum_tolerance is negative.
    """

    def __init__(
        self,
        max_ingredients: int = MAX_INGREDIENTS,
        sum_tolerance: float = SUM_TOLERANCE,
    ) -> None:
        if max_ingredients < 1:
            raise ValueError("max_ingredients must be at least 1.")
        if sum_tolerance < 0:
            raise ValueError("sum_tolerance must be non-negative.")
        self.max_ingredients = max_ingredients
        self.sum_tolerance = sum_tolerance
        self.recipe: Recipe | None = None
        self.drag: drag_ops.DragSession | None = None

    @property
    def is_open(self) -> bool:
        return self.recipe is not None

    @property
    def allocation(self) -> AllocationSet:
        if self.recipe is None:
            return AllocationSet()
        return self.recipe.ingredients

    def _apply(self, allocation: AllocationSet) -> AllocationSet:
        if allocation is not self.recipe.ingredients:
            self.recipe = replace(self.recipe, ingredients=allocation)
        return allocation

    def _closed(self, action: str) -> bool:
        if self.recipe is None:
            logger.warning("No recipe open, ignoring %s", action)
            return True
        return False

    def open(self, recipe: Recipe | Mapping[str, Any] | None = None) -> Recipe:
        """Start editing a saved recipe, or a new one when ``recipe`` is ``None``.

        Parameters
        ----------
        recipe : Recipe | Mapping[str, Any], optional
            Saved recipe, either as a model or in its device JSON shape.

        Returns
        -------
        Recipe
            The working copy.
        """
        if recipe is None:
            self.recipe = Recipe()
        elif isinstance(recipe, Recipe):
            self.recipe = replace(recipe)
        else:
            self.recipe = Recipe.from_payload(recipe)
        self.drag = None
        logger.info("Editing recipe id=%s with %d ingredients", self.recipe.id, len(self.recipe.ingredients))
        return self.recipe

    def cancel(self) -> None:
        """Discard the recipe under edit and any drag session."""
        self.recipe = None
        self.drag = None

    def toggle(self, source: SourceLike) -> AllocationSet:
        """Add ``source`` to the mix, or remove it if already present.

        Adding is a no-op once the mix holds ``max_ingredients`` sources.
        """
        if self._closed("toggle"):
            return self.allocation
        return self._apply(toggle_source(self.allocation, source, self.max_ingredients))

    def begin_drag(self, divider_index: int) -> drag_ops.DragSession | None:
        """Start dragging the divider right of entry ``divider_index``.

        Returns
        -------
        DragSession | None
            The active session, or ``None`` for an invalid divider.
        """
        if self._closed("begin_drag"):
            return None
        self.drag = drag_ops.begin_drag(self.allocation, divider_index, self.drag)
        return self.drag

    def update_drag(self, raw_percentage: float) -> AllocationSet:
        """Move the dragged divider to ``raw_percentage`` of the bar."""
        if self._closed("update_drag"):
            return self.allocation
        return self._apply(drag_ops.update_drag(self.drag, self.allocation, raw_percentage))

    def end_drag(self) -> None:
        """Release the divider; the last update stands."""
        self.drag = drag_ops.end_drag(self.drag)

    def missing(self, sources: Iterable[SourceLike]) -> list[str]:
        """Source ids of the mix that lack a usable source."""
        return reconcile_ops.classify(self.allocation, sources).missing_ids

    def substitute(
        self,
        missing_source_id: str,
        replacement_source_id: str,
        sources: Iterable[SourceLike],
    ) -> AllocationSet:
        """Hand the share of a missing source to a usable replacement."""
        if self._closed("substitute"):
            return self.allocation
        result = reconcile_ops.substitute(self.allocation, missing_source_id, replacement_source_id, sources)
        return self._apply(result)

    def drop(self, missing_source_id: str) -> AllocationSet:
        """Remove a missing source and redistribute its share."""
        if self._closed("drop"):
            return self.allocation
        return self._apply(reconcile_ops.drop(self.allocation, missing_source_id))

    def validate(self, sources: Iterable[SourceLike]) -> CommitVerdict:
        """Check the mix against the commit rules without saving it.

        Parameters
        ----------
        sources : Iterable[SourceLike]
            Roster snapshot the mix must be backed by.

        Returns
        -------
        CommitVerdict
        """
        return can_commit(self.allocation, sources, self.sum_tolerance)

    def save(self, store: RecipeStore, sources: Iterable[SourceLike]) -> CommitVerdict:
        """Validate the mix and hand the recipe payload to ``store``.

        Parameters
        ----------
        store : RecipeStore
            Persistence collaborator; called only for a committable mix.
        sources : Iterable[SourceLike]
            Roster snapshot used to reject mixes with missing sources.

        Returns
        -------
        CommitVerdict
            The session is closed only when the verdict is ``ok``.
        """
        verdict = self.validate(sources)
        if not verdict.ok:
            logger.warning(
                "Recipe not saved: reason=%s, total=%s, missing=%s, undersized=%s",
                verdict.reason,
                verdict.total,
                list(verdict.missing),
                list(verdict.undersized),
            )
            return verdict

        payload = self.recipe.to_payload()
        store.save(payload)
        logger.info("Recipe saved: id=%s, ingredients=%d", payload["id"], len(payload["ingredients"]))
        self.cancel()
        return verdict

    def execute(self, event: dict) -> dict:
        """Dispatch a UI interaction and return the state to render.

        Parameters
        ----------
        event : dict
            Must contain ``action``, one of ``toggle`` (with ``source``),
            ``begin_drag`` (with ``divider_index``), ``update_drag`` (with
            ``raw_percentage``), ``end_drag``, ``substitute`` (with
            ``missing_source_id``, ``replacement_source_id`` and
            ``sources``) or ``drop`` (with ``missing_source_id``).

        Returns
        -------
        dict
            ``ingredients`` in device field names, ``dividers`` with the
            cumulative handle positions, and ``dragging``.

        Raises
        ------
        ValueError
            If the action is unknown.
        """
        action = event["action"]
        if action == "toggle":
            self.toggle(event["source"])
        elif action == "begin_drag":
            self.begin_drag(event["divider_index"])
        elif action == "update_drag":
            self.update_drag(event["raw_percentage"])
        elif action == "end_drag":
            self.end_drag()
        elif action == "substitute":
            self.substitute(event["missing_source_id"], event["replacement_source_id"], event["sources"])
        elif action == "drop":
            self.drop(event["missing_source_id"])
        else:
            raise ValueError(f"Unknown action: {action}")

        allocation = self.allocation
        return {
            "ingredients": allocation.to_ingredients(),
            "dividers": drag_ops.divider_positions(allocation),
            "dragging": self.drag is not None and self.drag.active,
        }
