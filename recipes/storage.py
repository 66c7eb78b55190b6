from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol

from .models import Recipe


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer."""

    def list_recipes(self) -> Iterable[Recipe]:
        """Return an iterable of every stored recipe."""

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Return a single recipe, or ``None`` when it does not exist.

        Raises :class:`~recipes.errors.InvalidRecipeIdError` for identifiers
        the store cannot address.
        """

    def add_recipe(self, fields: Mapping[str, Any]) -> Recipe:
        """Persist a new recipe and return the stored instance.

        Raises :class:`~recipes.errors.RecipeValidationError` or
        :class:`~recipes.errors.DuplicateTitleError` when the recipe is
        rejected.
        """

    def update_recipe(self, recipe_id: str, fields: Mapping[str, Any]) -> Optional[Recipe]:
        """Apply a partial update and return the new representation, or ``None``."""

    def delete_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Remove a recipe and return what was removed, or ``None``."""


__all__ = ["RecipeRepository"]
