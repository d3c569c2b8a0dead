"""Recipe suggestions generated from on-hand inventory."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Literal

from pydantic import ValidationError as PydanticValidationError

from src.models.inventory import InventoryItem
from src.schemas.recipe import SuggestedRecipe
from src.services.exceptions import LLMRequestError, ParseError, RecipeGenerationError
from src.services.inventory_store import USE_SOON_DAYS, days_until
from src.services.llm import AnthropicLLMService, LLMService
from src.services.llm_prompts import (
    RECIPE_SUGGESTION_SYSTEM_PROMPT,
    get_recipe_suggestion_prompt,
)
from src.services.receipt_parser import strip_code_fences

logger = logging.getLogger(__name__)

NO_DATE_TAG = "—"
FALLBACK_RECIPE_NAME = "Recipe suggestion"


def placeholder_recipe() -> SuggestedRecipe:
    """Returned for an empty pantry, without asking the model."""
    return SuggestedRecipe(
        name="Your pantry is empty",
        directions=[
            "Add items to your pantry first, by scanning a receipt or adding them by hand.",
            "Then ask for a recipe again.",
        ],
    )


@dataclass
class RecipeSuggestion:
    """A recipe plus where it came from.

    ``source`` is "llm" for a well-formed reply, "fallback" when the reply could
    not be parsed (``recipe.directions`` then holds the raw text), and
    "placeholder" for an empty pantry.
    """

    recipe: SuggestedRecipe
    source: Literal["llm", "fallback", "placeholder"]
    raw_text: str | None = None


def urgency_tag(expiration_date: date | None, today: date) -> str:
    days = days_until(expiration_date, today)
    if days is None:
        return NO_DATE_TAG
    if days < 0:
        return "EXPIRED"
    if days <= USE_SOON_DAYS:
        return "USE SOON"
    return f"{days} days left"


def format_pantry_summary(items: Sequence[InventoryItem], today: date) -> str:
    """One line per item: name, remaining quantity with unit, freshness tag."""
    return "\n".join(
        f"- {item.name}: {item.current_quantity:g} {item.user_unit} "
        f"[{urgency_tag(item.expiration_date, today)}]"
        for item in items
    )


def parse_recipe_response(text: str) -> SuggestedRecipe:
    """Parse the model's JSON reply. Raises ParseError on any shape problem."""
    body = strip_code_fences(text or "")
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ParseError(f"Recipe response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Recipe response is not a JSON object")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ParseError("Recipe response has no name")
    if not isinstance(data.get("directions"), list):
        raise ParseError("Recipe directions are not a list")

    try:
        return SuggestedRecipe.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"Recipe response has an unexpected shape: {e}") from e


class RecipeSuggestionService:
    """Asks a text model for one recipe built from the active pantry."""

    def __init__(self, llm_service: LLMService | AnthropicLLMService):
        self.llm_service = llm_service

    async def suggest(
        self, pantry_items: Sequence[InventoryItem], today: date | None = None
    ) -> RecipeSuggestion:
        """Suggest a recipe.

        Malformed model output never raises; it degrades to a fallback recipe.
        A failed model request raises RecipeGenerationError.
        """
        items = [item for item in pantry_items if item.is_active]
        if not items:
            return RecipeSuggestion(recipe=placeholder_recipe(), source="placeholder")

        summary = format_pantry_summary(items, today or date.today())
        try:
            raw_text = await self.llm_service.generate(
                prompt=get_recipe_suggestion_prompt(summary),
                system_prompt=RECIPE_SUGGESTION_SYSTEM_PROMPT,
                temperature=0.7,
            )
        except LLMRequestError as e:
            raise RecipeGenerationError(str(e)) from e

        try:
            recipe = parse_recipe_response(raw_text)
        except ParseError as e:
            logger.warning(f"Falling back to raw recipe text: {e}")
            return RecipeSuggestion(
                recipe=SuggestedRecipe(name=FALLBACK_RECIPE_NAME, directions=[raw_text]),
                source="fallback",
                raw_text=raw_text,
            )

        logger.info(f"Suggested recipe '{recipe.name}' from {len(items)} pantry items")
        return RecipeSuggestion(recipe=recipe, source="llm", raw_text=raw_text)
