from typing import Dict


class RecipeStorageError(Exception):
    """Base class for failures raised by a recipe repository."""


class InvalidRecipeIdError(RecipeStorageError):
    """The identifier cannot address a stored recipe."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Invalid recipe id: {recipe_id!r}")
        self.recipe_id = recipe_id


class DuplicateTitleError(RecipeStorageError):
    """Another recipe already uses the title."""

    def __init__(self, title: str) -> None:
        super().__init__(f"A recipe titled {title!r} already exists.")
        self.title = title


class RecipeValidationError(RecipeStorageError):
    """The repository rejected the recipe fields."""

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__(", ".join(f"{key}: {value}" for key, value in errors.items()))
        self.errors = errors


__all__ = [
    "DuplicateTitleError",
    "InvalidRecipeIdError",
    "RecipeStorageError",
    "RecipeValidationError",
]
