"""Ingredient mix allocation for pet-feeder recipes."""

from recipe_mix.drag import DragSession, begin_drag, end_drag, update_drag
from recipe_mix.editor import MixEditor
from recipe_mix.models import AllocationEntry, AllocationSet, Recipe, Source, rounding_correct
from recipe_mix.rebalance import add_source, remove_source, set_split, toggle_source
from recipe_mix.reconcile import Classification, classify, drop, reconcile, substitute
from recipe_mix.validate import CommitVerdict, can_commit

__all__ = [
    "AllocationEntry",
    "AllocationSet",
    "Classification",
    "CommitVerdict",
    "DragSession",
    "MixEditor",
    "Recipe",
    "Source",
    "add_source",
    "begin_drag",
    "can_commit",
    "classify",
    "drop",
    "end_drag",
    "reconcile",
    "remove_source",
    "rounding_correct",
    "set_split",
    "substitute",
    "toggle_source",
    "update_drag",
]
