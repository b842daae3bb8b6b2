from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Ingredient:
    """A single ingredient line: amount, unit of measure and name."""

    amount: str
    measure: str
    name: str

    def __str__(self) -> str:
        return " ".join(part for part in (self.amount, self.measure, self.name) if part)


@dataclass(eq=False)
class Recipe:
    """Domain object representing a filed recipe.

    Recipes are identified by their name: two recipes with the same name
    compare equal regardless of their ingredients and instructions. The name
    cannot be changed once the recipe is built.
    """

    name: str
    ingredients: List[Ingredient] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A recipe must have a name.")

    def __setattr__(self, key: str, value: object) -> None:
        if key == "name" and "name" in self.__dict__:
            raise AttributeError("A recipe's name cannot be changed.")
        super().__setattr__(key, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipe):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def add_ingredient(self, ingredient: Ingredient) -> None:
        self.ingredients.append(ingredient)

    def add_instruction(self, instruction: str) -> None:
        self.instructions.append(instruction)

    def clone(self) -> "Recipe":
        # Ingredients are frozen, so copying the lists is a deep copy.
        return Recipe(
            name=self.name,
            ingredients=list(self.ingredients),
            instructions=list(self.instructions),
        )


__all__ = ["Ingredient", "Recipe"]
