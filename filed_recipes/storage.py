from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Hashable, List, Optional, Protocol, TextIO

from .models import Recipe
from .recipe_format import parse_recipes, write_recipes

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer."""

    @property
    def is_modified(self) -> bool:
        """``True`` when recipes were deleted since the last load or save."""

    def __len__(self) -> int:
        """Return the number of recipes currently held."""

    def load(self) -> None:
        """Replace the held recipes with the ones in the recipe file."""

    def save(self) -> None:
        """Overwrite the recipe file with the held recipes."""

    def get_all(self) -> List[Recipe]:
        """Return copies of all recipes ordered by name."""

    def get_at(self, index: int) -> Recipe:
        """Return a copy of a single recipe or raise :class:`IndexError`."""

    def delete(self, recipe: Optional[Recipe]) -> bool:
        """Remove a recipe, returning ``False`` when it is not held."""

    def delete_at(self, index: int) -> bool:
        """Remove the recipe at ``index`` or raise :class:`IndexError`."""

    def subscribe(self, callback: ChangeCallback, key: Optional[Hashable] = None) -> Hashable:
        """Register ``callback`` to run after every change to the recipes."""

    def unsubscribe(self, key: Hashable) -> None:
        """Remove a callback registered with :meth:`subscribe`."""


class BaseRecipeRepository(RecipeRepository):
    """Recipe collection kept in memory and stored as a recipe text file.

    Subclasses decide where the text lives by implementing
    :meth:`_open_for_reading`, :meth:`_open_for_writing` and
    :meth:`_location`.
    """

    def __init__(self) -> None:
        self._recipes: List[Recipe] = []
        self._subscribers: Dict[Hashable, ChangeCallback] = {}
        self._is_modified = False

    @property
    def path(self) -> str:
        return self._location()

    @property
    def is_modified(self) -> bool:
        return self._is_modified

    def __len__(self) -> int:
        return len(self._recipes)

    def load(self) -> None:
        with self._open_for_reading() as reader:
            recipes = parse_recipes(reader)

        self._recipes = sorted(recipes, key=lambda recipe: recipe.name)
        self._is_modified = False
        logger.info("Loaded %d recipes from %s", len(self._recipes), self._location())
        self._notify()

    def save(self) -> None:
        with self._open_for_writing() as writer:
            write_recipes(self._recipes, writer)

        self._is_modified = False
        logger.info("Saved %d recipes to %s", len(self._recipes), self._location())
        self._notify()

    def get_all(self) -> List[Recipe]:
        return [recipe.clone() for recipe in self._recipes]

    def get_at(self, index: int) -> Recipe:
        return self._recipe_at(index).clone()

    def delete(self, recipe: Optional[Recipe]) -> bool:
        stored = self._find(recipe)
        if stored is None:
            logger.warning("Recipe %r is not in the collection; nothing deleted.", recipe)
            return False

        self._recipes = [existing for existing in self._recipes if existing is not stored]
        self._is_modified = True
        self._notify()
        return True

    def delete_at(self, index: int) -> bool:
        return self.delete(self._recipe_at(index))

    def subscribe(self, callback: ChangeCallback, key: Optional[Hashable] = None) -> Hashable:
        key = callback if key is None else key
        self._subscribers[key] = callback
        logger.debug("Subscribed %r to recipe changes", key)
        return key

    def unsubscribe(self, key: Hashable) -> None:
        if self._subscribers.pop(key, None) is not None:
            logger.debug("Unsubscribed %r from recipe changes", key)

    def _open_for_reading(self) -> TextIO:
        raise NotImplementedError

    def _open_for_writing(self) -> TextIO:
        raise NotImplementedError

    def _location(self) -> str:
        raise NotImplementedError

    def _recipe_at(self, index: int) -> Recipe:
        if not 0 <= index < len(self._recipes):
            raise IndexError(
                f"Recipe index {index} out of range for {len(self._recipes)} recipes."
            )
        return self._recipes[index]

    def _find(self, recipe: Optional[Recipe]) -> Optional[Recipe]:
        if recipe is None:
            return None
        for existing in self._recipes:
            if existing is recipe:
                return existing
        # Probably a copy handed out by get_all() or get_at().
        for existing in self._recipes:
            if existing == recipe:
                return existing
        return None

    def _notify(self) -> None:
        for callback in list(self._subscribers.values()):
            callback()


class FileRecipeRepository(BaseRecipeRepository):
    """Recipe storage backed by a single text file on the local disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        path_text = os.fspath(path)
        if not path_text or "\0" in path_text:
            raise ValueError(f"Invalid recipe file path: {path_text!r}")

        super().__init__()
        self._path = os.path.abspath(path_text)

    @classmethod
    def from_env(cls) -> "FileRecipeRepository":
        """Build a repository from environment variables."""

        return cls(os.environ.get("RECIPES_PATH", "recipes.txt"))

    def _open_for_reading(self) -> TextIO:
        return open(self._path, "r", encoding="utf-8")

    def _open_for_writing(self) -> TextIO:
        return open(self._path, "w", encoding="utf-8")

    def _location(self) -> str:
        return self._path


__all__ = ["BaseRecipeRepository", "ChangeCallback", "FileRecipeRepository", "RecipeRepository"]
