"""Plain-text rendering of recipes."""

from __future__ import annotations

from typing import Iterable

from .models import Recipe

INGREDIENTS_HEADING = "INGREDIENSER"
INSTRUCTIONS_HEADING = "INSTRUKTIONER"


def _heading(text: str) -> list[str]:
    return [text, "═" * len(text)]


def format_recipe(recipe: Recipe) -> str:
    lines = _heading(recipe.name)

    lines.append("")
    lines.extend(_heading(INGREDIENTS_HEADING))
    lines.extend(str(ingredient) for ingredient in recipe.ingredients)

    lines.append("")
    lines.extend(_heading(INSTRUCTIONS_HEADING))
    lines.extend(recipe.instructions)

    return "\n".join(lines) + "\n"


def format_recipes(recipes: Iterable[Recipe]) -> str:
    return "\n".join(format_recipe(recipe) for recipe in recipes)


__all__ = ["format_recipe", "format_recipes"]
