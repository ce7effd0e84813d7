"""Spoonacular recipe source.

Translates search parameters into a complexSearch request and maps Spoonacular
records into the canonical Recipe shape. Wrap in FallbackRecipeSource so
upstream failures are answered from the local dataset.
"""

import re
from typing import Any, List, Optional

from src.models.models import DietFlag, Recipe, SearchParams
from src.recipes.filters import map_provider_diet_labels
from src.recipes.http import fetch_json
from src.recipes.sources import RecipeSource
from src.utils.errors import UpstreamPermanentError
from src.utils.logger import logger

BASE_URL = "https://api.spoonacular.com/recipes"
PLACEHOLDER_IMAGE = "/placeholder.jpg"
DEFAULT_TIME_MINUTES = 30
DEFAULT_CUISINE = "Fusion"
DEFAULT_STEPS = ["Prepare ingredients", "Cook according to instructions."]

# Flags without an upstream equivalent (Halal, Kosher) are enforced by local filtering only
SPOONACULAR_DIETS = {
    DietFlag.VEGETARIAN: "vegetarian",
    DietFlag.VEGAN: "vegan",
    DietFlag.GLUTEN_FREE: "gluten free",
    DietFlag.PESCATARIAN: "pescetarian",
}
SPOONACULAR_INTOLERANCES = {
    DietFlag.DAIRY_FREE: "dairy",
    DietFlag.NUT_FREE: "peanut,tree nut",
}

_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_html(value: str) -> str:
    """Remove markup tags from a provider description."""
    return _TAG_PATTERN.sub("", value or "").strip()


def to_recipe(record: dict[str, Any]) -> Recipe:
    """Map a Spoonacular recipe record into a Recipe.

    Raises:
        UpstreamPermanentError: If the record lacks an id or title.
    """
    if not isinstance(record, dict) or record.get("id") is None or not record.get("title"):
        raise UpstreamPermanentError("Spoonacular record is missing id or title", source="spoonacular")

    ingredients = [
        str(item.get("original", "")).strip()
        for item in record.get("extendedIngredients") or []
        if isinstance(item, dict) and item.get("original")
    ]

    instructions = record.get("analyzedInstructions") or []
    steps: List[str] = []
    if instructions and isinstance(instructions[0], dict):
        steps = [
            str(step.get("step", "")).strip()
            for step in instructions[0].get("steps") or []
            if isinstance(step, dict) and step.get("step")
        ]

    ready = record.get("readyInMinutes")
    cuisines = record.get("cuisines") or []

    return Recipe(
        id=str(record["id"]),
        title=record["title"],
        description=strip_html(record.get("summary") or ""),
        image=record.get("image") or PLACEHOLDER_IMAGE,
        time_minutes=ready if isinstance(ready, int) and ready >= 0 else DEFAULT_TIME_MINUTES,
        cuisine=cuisines[0] if cuisines else DEFAULT_CUISINE,
        diet_flags=map_provider_diet_labels(record.get("diets") or []),
        tags=record.get("dishTypes") or [],
        ingredients=ingredients,
        steps=steps or list(DEFAULT_STEPS),
    )


class SpoonacularRecipeSource(RecipeSource):
    """Recipe source backed by the Spoonacular REST API."""

    name = "spoonacular"
    narrows_by_query = True

    def __init__(self, api_key: str, timeout_seconds: float = 10, max_results: int = 30) -> None:
        """Initialize with credentials.

        Args:
            api_key: Spoonacular API key.
            timeout_seconds: Total timeout per HTTP call.
            max_results: Number of results requested per search.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            raise ValueError("SPOONACULAR_API_KEY is required")

        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_results = max_results

    def build_search_params(self, params: SearchParams) -> List[tuple[str, str]]:
        """Translate canonical search parameters into complexSearch query pairs."""
        query: List[tuple[str, str]] = [
            ("apiKey", self.api_key),
            ("number", str(self.max_results)),
            ("addRecipeInformation", "true"),
            ("fillIngredients", "true"),
        ]
        if params.q:
            query.append(("query", params.q))
        if params.have:
            query.append(("includeIngredients", ",".join(params.have)))
        if params.exclude:
            query.append(("excludeIngredients", ",".join(params.exclude)))
        diets = [SPOONACULAR_DIETS[flag] for flag in params.diets if flag in SPOONACULAR_DIETS]
        if diets:
            query.append(("diet", ",".join(diets)))
        intolerances = [SPOONACULAR_INTOLERANCES[flag] for flag in params.diets if flag in SPOONACULAR_INTOLERANCES]
        if intolerances:
            query.append(("intolerances", ",".join(intolerances)))
        return query

    async def fetch_candidates(self, params: SearchParams) -> List[Recipe]:
        data = await fetch_json(
            f"{BASE_URL}/complexSearch",
            self.build_search_params(params),
            self.timeout_seconds,
            self.name,
        )
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise UpstreamPermanentError("Spoonacular search payload has no results list", source=self.name)
        recipes = [to_recipe(item) for item in data["results"]]
        logger.debug(f"Spoonacular returned {len(recipes)} recipes")
        return recipes

    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        # Spoonacular ids are numeric; anything else cannot exist upstream
        if not recipe_id.isdigit():
            return None
        data = await fetch_json(
            f"{BASE_URL}/{recipe_id}/information",
            [("apiKey", self.api_key)],
            self.timeout_seconds,
            self.name,
        )
        return to_recipe(data)
