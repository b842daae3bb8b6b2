"""Reading and writing the section-delimited recipe file format.

A recipe file is a sequence of recipes, each one laid out as::

    [Recept]
    Pancakes

    [Ingredienser]
    2;dl;flour
    3;st;eggs

    [Instruktioner]
    Mix ingredients.
    Fry.

Blank lines only separate sections. Everything else is interpreted by the
section marker most recently seen.
"""

from __future__ import annotations

import enum
import io
from typing import Iterable, List, Optional, TextIO

from .models import Ingredient, Recipe

SECTION_RECIPE = "[Recept]"
SECTION_INGREDIENTS = "[Ingredienser]"
SECTION_INSTRUCTIONS = "[Instruktioner]"

INGREDIENT_SEPARATOR = ";"


class FileFormatError(ValueError):
    """Raised when a recipe file does not follow the expected layout."""

    def __init__(self, message: str, *, line_number: int, line: str) -> None:
        super().__init__(f"Line {line_number}: {message} ({line!r})")
        self.line_number = line_number
        self.line = line


class ReadStatus(enum.Enum):
    """How the next content line read from the file is interpreted."""

    INDEFINITE = "indefinite"
    NEW = "new"
    INGREDIENT = "ingredient"
    INSTRUCTION = "instruction"


_SECTION_STATUS = {
    SECTION_RECIPE: ReadStatus.NEW,
    SECTION_INGREDIENTS: ReadStatus.INGREDIENT,
    SECTION_INSTRUCTIONS: ReadStatus.INSTRUCTION,
}


def parse_ingredient(line: str, *, line_number: int) -> Ingredient:
    tokens = line.split(INGREDIENT_SEPARATOR)
    if len(tokens) != 3:
        raise FileFormatError(
            f"expected 3 fields separated by '{INGREDIENT_SEPARATOR}', got {len(tokens)}",
            line_number=line_number,
            line=line,
        )
    amount, measure, name = tokens
    return Ingredient(amount=amount, measure=measure, name=name)


def parse_recipes(lines: Iterable[str]) -> List[Recipe]:
    """Parse recipe file lines into recipes, in file order.

    ``lines`` may be an open text file; trailing line terminators are
    ignored. Raises :class:`FileFormatError` on the first malformed line.
    """

    recipes: List[Recipe] = []
    status = ReadStatus.INDEFINITE
    recipe: Optional[Recipe] = None

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line:
            continue

        if line in _SECTION_STATUS:
            status = _SECTION_STATUS[line]
            continue

        if status is ReadStatus.NEW:
            recipe = Recipe(name=line)
            recipes.append(recipe)
            continue

        if status is ReadStatus.INDEFINITE:
            raise FileFormatError(
                "content before any section marker", line_number=line_number, line=line
            )

        if recipe is None:
            raise FileFormatError(
                f"{status.value} line outside of a recipe",
                line_number=line_number,
                line=line,
            )

        if status is ReadStatus.INGREDIENT:
            recipe.add_ingredient(parse_ingredient(line, line_number=line_number))
        else:
            recipe.add_instruction(line)

    return recipes


def format_ingredient(ingredient: Ingredient) -> str:
    return INGREDIENT_SEPARATOR.join((ingredient.amount, ingredient.measure, ingredient.name))


def write_recipes(recipes: Iterable[Recipe], writer: TextIO) -> None:
    """Write ``recipes`` to ``writer`` in the layout :func:`parse_recipes` reads."""

    for recipe in recipes:
        writer.write(f"{SECTION_RECIPE}\n")
        writer.write(f"{recipe.name}\n")
        writer.write("\n")

        writer.write(f"{SECTION_INGREDIENTS}\n")
        for ingredient in recipe.ingredients:
            writer.write(f"{format_ingredient(ingredient)}\n")
        writer.write("\n")

        writer.write(f"{SECTION_INSTRUCTIONS}\n")
        for instruction in recipe.instructions:
            writer.write(f"{instruction}\n")
        writer.write("\n")


def format_recipes(recipes: Iterable[Recipe]) -> str:
    buffer = io.StringIO()
    write_recipes(recipes, buffer)
    return buffer.getvalue()


__all__ = [
    "FileFormatError",
    "ReadStatus",
    "SECTION_INGREDIENTS",
    "SECTION_INSTRUCTIONS",
    "SECTION_RECIPE",
    "format_recipes",
    "parse_recipes",
    "write_recipes",
]
