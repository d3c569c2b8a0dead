"""LLM prompt templates for receipt extraction and recipe suggestions."""

from datetime import date

# --- Receipt Extraction Prompts ---


def get_receipt_extraction_prompt(today: date) -> str:
    """Generate the instruction sent alongside a receipt image."""
    return f"""Analyze this grocery receipt image and extract ONLY the food items.

Today's date is {today.isoformat()}.

For each food item, provide:
- name: cleaned up, human-readable (e.g., "ORG MLK 1GAL" -> "Organic Milk")
- category: one of "protein", "carb", "dairy", "fruit", "vegetable", "other"
- quantity: a number (weight or count as printed; 1 if not shown)
- unit: the unit for quantity (e.g., "lb", "oz", "kg", "g", "l", "ml", "cup", "count")
- price: the line total as a number (0 if not shown)
- expiration_date: "YYYY-MM-DD", printed or estimated from typical shelf life
  (e.g., milk lasts about 7 days, spinach about 5). Use null if you cannot estimate.

Do not include:
- Tax lines, subtotals or totals
- Fees, bags, bottle deposits
- Discounts, coupons or payment information
- Non-food products (cleaning supplies, utensils, toiletries)

Return ONLY a JSON array, no other text:
[
  {{"name": "Milk", "category": "dairy", "quantity": 1, "unit": "count", "price": 3.49, "expiration_date": "2024-01-08"}},
  {{"name": "Chicken Breast", "category": "protein", "quantity": 2, "unit": "lb", "price": 9.98, "expiration_date": "2024-01-04"}}
]"""


# --- Recipe Suggestion Prompts ---

RECIPE_SUGGESTION_SYSTEM_PROMPT = """You are a home cooking assistant. Suggest ONE recipe that uses what is in the user's pantry.

Build the recipe around items marked USE SOON. Never use items marked EXPIRED.
Keep the shopping list short. Quantities are free text (e.g., "2 cups", "1 lb").

Respond ONLY with valid JSON matching this schema:
{
  "name": "string",
  "prepTime": "string",
  "servings": number,
  "ingredientsFromPantry": [{"name": "string", "quantity": "string", "note": "string"}],
  "ingredientsToBuy": [{"name": "string", "quantity": "string", "note": "string"}],
  "directions": ["string", ...]
}

ingredientsFromPantry names must match pantry item names. directions must be ordered steps."""


def get_recipe_suggestion_prompt(pantry_summary: str) -> str:
    """Generate prompt asking for a recipe from the pantry summary."""
    return f"""Here is what is in my pantry (name: quantity [freshness]):

{pantry_summary}

Suggest one recipe. Respond with JSON only."""
