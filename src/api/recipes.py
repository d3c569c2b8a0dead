"""Recipe suggestion API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import get_active_pantry_items, get_recipe_suggestion_service
from src.models.inventory import InventoryItem
from src.schemas.recipe import RecipeSuggestionResponse
from src.services.recipe_suggestion import RecipeSuggestionService

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.post("/suggest", response_model=RecipeSuggestionResponse)
async def suggest_recipe(
    pantry_items: Annotated[list[InventoryItem], Depends(get_active_pantry_items)],
    recipe_service: Annotated[RecipeSuggestionService, Depends(get_recipe_suggestion_service)],
):
    """Suggest one recipe from the active pantry, favouring items that expire soon.

    An empty pantry returns a placeholder without calling the model. If the
    model's reply cannot be parsed, the raw text comes back in `directions`
    with `source` set to "fallback".
    """
    suggestion = await recipe_service.suggest(pantry_items)
    return RecipeSuggestionResponse(
        source=suggestion.source,
        recipe=suggestion.recipe,
        pantry_item_count=len(pantry_items),
    )
