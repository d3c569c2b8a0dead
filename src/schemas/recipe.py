"""Recipe suggestion schemas."""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecipeIngredient(BaseModel):
    """Ingredient line in a suggested recipe."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    quantity: str | None = None
    note: str | None = None

    @field_validator("quantity", "note", mode="before")
    @classmethod
    def _numbers_as_text(cls, v: Any) -> Any:
        if isinstance(v, int | float) and not isinstance(v, bool):
            return f"{v:g}"
        return v


class SuggestedRecipe(BaseModel):
    """A recipe as returned by the model (camelCase keys accepted)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    prep_time: str | None = Field(None, alias="prepTime")
    servings: int | None = None
    ingredients_from_pantry: list[RecipeIngredient] = Field(
        default_factory=list, alias="ingredientsFromPantry"
    )
    ingredients_to_buy: list[RecipeIngredient] = Field(
        default_factory=list, alias="ingredientsToBuy"
    )
    directions: list[str] = Field(default_factory=list)

    @field_validator("prep_time", mode="before")
    @classmethod
    def _minutes_as_text(cls, v: Any) -> Any:
        if isinstance(v, int | float) and not isinstance(v, bool):
            return f"{v:g} minutes"
        return v

    @field_validator("servings", mode="before")
    @classmethod
    def _leading_number(cls, v: Any) -> Any:
        # "4 servings", "4-6" -> 4
        if isinstance(v, str):
            match = re.search(r"\d+", v)
            return int(match.group()) if match else None
        return v


class RecipeSuggestionResponse(BaseModel):
    """Recipe suggestion for the current pantry."""

    source: Literal["llm", "fallback", "placeholder"]
    recipe: SuggestedRecipe
    pantry_item_count: int
