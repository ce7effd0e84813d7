"""Edamam recipe source.

Edamam identifies recipes by URI; the canonical id is the URL-encoded URI so
it survives a trip through a path segment.
"""

from typing import Any, List, Optional
from urllib.parse import quote, unquote

from src.models.models import DietFlag, Recipe, SearchParams
from src.recipes.filters import map_provider_diet_labels
from src.recipes.http import fetch_json
from src.recipes.sources import RecipeSource
from src.recipes.spoonacular import PLACEHOLDER_IMAGE, strip_html
from src.utils.errors import UpstreamPermanentError
from src.utils.logger import logger

BASE_URL = "https://api.edamam.com/api/recipes/v2"
DEFAULT_TIME_MINUTES = 35
DEFAULT_CUISINE = "Global"
DEFAULT_STEPS = ["Review the linked instructions.", "Follow steps, adjusting seasoning to taste."]
RESPONSE_FIELDS = (
    "uri",
    "label",
    "image",
    "url",
    "cuisineType",
    "totalTime",
    "ingredientLines",
    "dietLabels",
    "healthLabels",
    "dishType",
    "mealType",
    "instructionLines",
)

# Flags without a health label (Halal) are enforced by local filtering only
EDAMAM_HEALTH_LABELS = {
    DietFlag.VEGETARIAN: ["vegetarian"],
    DietFlag.VEGAN: ["vegan"],
    DietFlag.GLUTEN_FREE: ["gluten-free"],
    DietFlag.DAIRY_FREE: ["dairy-free"],
    DietFlag.NUT_FREE: ["peanut-free", "tree-nut-free"],
    DietFlag.KOSHER: ["kosher"],
    DietFlag.PESCATARIAN: ["pescatarian"],
}


def to_recipe(record: dict[str, Any]) -> Recipe:
    """Map an Edamam recipe object into a Recipe.

    Raises:
        UpstreamPermanentError: If the record lacks a uri or label.
    """
    if not isinstance(record, dict) or not record.get("uri") or not record.get("label"):
        raise UpstreamPermanentError("Edamam record is missing uri or label", source="edamam")

    total_time = record.get("totalTime")
    cuisines = record.get("cuisineType") or []
    source_url = record.get("url")
    description = (
        f"Inspired by Edamam reference: {source_url}" if source_url else "Inspired by Edamam reference: See instructions link."
    )

    return Recipe(
        id=quote(record["uri"], safe=""),
        title=record["label"],
        description=strip_html(description),
        image=record.get("image") or PLACEHOLDER_IMAGE,
        time_minutes=int(total_time) if isinstance(total_time, (int, float)) and total_time > 0 else DEFAULT_TIME_MINUTES,
        cuisine=str(cuisines[0]).title() if cuisines else DEFAULT_CUISINE,
        diet_flags=map_provider_diet_labels([*(record.get("dietLabels") or []), *(record.get("healthLabels") or [])]),
        tags=record.get("dishType") or record.get("mealType") or [],
        ingredients=[str(line).strip() for line in record.get("ingredientLines") or [] if line],
        steps=[str(line).strip() for line in record.get("instructionLines") or [] if line] or list(DEFAULT_STEPS),
    )


def _hits(data: Any) -> List[dict]:
    if not isinstance(data, dict) or not isinstance(data.get("hits"), list):
        raise UpstreamPermanentError("Edamam payload has no hits list", source="edamam")
    return [hit.get("recipe") for hit in data["hits"] if isinstance(hit, dict)]


class EdamamRecipeSource(RecipeSource):
    """Recipe source backed by the Edamam Recipe Search API v2."""

    name = "edamam"
    narrows_by_query = True

    def __init__(self, app_id: str, app_key: str, timeout_seconds: float = 10) -> None:
        if not app_id or not app_key:
            raise ValueError("EDAMAM_APP_ID and EDAMAM_APP_KEY are required")

        self.app_id = app_id
        self.app_key = app_key
        self.timeout_seconds = timeout_seconds

    def _auth_params(self) -> List[tuple[str, str]]:
        return [("type", "public"), ("app_id", self.app_id), ("app_key", self.app_key)]

    def build_search_params(self, params: SearchParams) -> List[tuple[str, str]]:
        """Translate canonical search parameters into Edamam query pairs."""
        query = self._auth_params()
        query.append(("random", "false"))
        query.extend(("field", field) for field in RESPONSE_FIELDS)
        if params.q:
            query.append(("q", params.q))
        for flag in params.diets:
            query.extend(("health", label) for label in EDAMAM_HEALTH_LABELS.get(flag, []))
        query.extend(("excluded", item) for item in params.exclude)
        return query

    async def fetch_candidates(self, params: SearchParams) -> List[Recipe]:
        data = await fetch_json(BASE_URL, self.build_search_params(params), self.timeout_seconds, self.name)
        recipes = [to_recipe(record) for record in _hits(data)]
        logger.debug(f"Edamam returned {len(recipes)} recipes")
        return recipes

    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        uri = unquote(recipe_id)
        # Local dataset ids never look like Edamam URIs
        if not uri.startswith("http"):
            return None
        query = self._auth_params()
        query.append(("uri", uri))
        data = await fetch_json(f"{BASE_URL}/by-uri", query, self.timeout_seconds, self.name)
        records = _hits(data)
        return to_recipe(records[0]) if records else None
