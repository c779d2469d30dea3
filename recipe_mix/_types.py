"""Type definitions for the payload contracts and external collaborators."""

from typing import Any, Protocol, TypedDict


class IngredientPayload(TypedDict):
    """One ingredient of a saved recipe, in device field names.

    Parameters
    ----------
    tank_uid : str
        Identifier of the tank the ingredient is dispensed from.
    percentage : float
        Share of the daily weight, integer for mixes built by the engine.
    """

    tank_uid: str
    percentage: float


class RecipePayload(TypedDict):
    """Recipe shape exchanged with the persistence collaborator.

    Parameters
    ----------
    id : int
        Recipe identifier, ``0`` for a recipe that was never saved.
    name : str
        Display name.
    is_enabled : bool
        Whether the feeder schedules this recipe.
    daily_weight : float
        Grams dispensed per day.
    servings : int
        Number of servings the daily weight is split into.
    ingredients : list[IngredientPayload]
        Mix taken verbatim from the allocation set.
    """

    id: int
    name: str
    is_enabled: bool
    daily_weight: float
    servings: int
    ingredients: list[IngredientPayload]


class SourceLike(Protocol):
    """Anything the engine can treat as a food source."""

    @property
    def id(self) -> str: ...

    @property
    def usable(self) -> bool: ...


class RecipeStore(Protocol):
    """Persistence collaborator invoked on save.

    The store owns the transport call and the roster refresh afterwards;
    the engine does not inspect its return value.
    """

    def save(self, payload: RecipePayload) -> Any: ...
