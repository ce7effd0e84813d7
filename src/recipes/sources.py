"""Recipe sources: the capability interface, the local dataset and the fallback decorator.

Every source maps its records into the canonical Recipe and then applies the
same diet/exclusion filtering and match scoring, so ranking does not depend on
where recipes came from. External sources are wrapped in FallbackRecipeSource,
which answers from the local dataset whenever the upstream call fails.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from src.models.models import Recipe, ScoredRecipe, SearchParams
from src.recipes.filters import matches_diet, matches_exclusions
from src.recipes.scoring import score_recipe
from src.utils.errors import UpstreamPermanentError
from src.utils.logger import logger

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
LOCAL_RECIPES_PATH = DATA_DIR / "recipes.json"


def rank_candidates(recipes: Iterable[Recipe], params: SearchParams) -> List[ScoredRecipe]:
    """Drop recipes failing diet or exclusion filters and score the rest."""
    scored: List[ScoredRecipe] = []
    for recipe in recipes:
        if params.diets and not matches_diet(recipe, params.diets):
            continue
        if params.exclude and not matches_exclusions(recipe, params.exclude):
            continue
        score = score_recipe(recipe, params.have, params.exclude, params.diets)
        scored.append(ScoredRecipe(recipe=recipe, score=score))
    return scored


class RecipeSource(ABC):
    """Capability interface implemented by every recipe backend."""

    name: str = "base"
    # True when the upstream already narrowed its results by the free-text query
    narrows_by_query: bool = False

    @abstractmethod
    async def fetch_candidates(self, params: SearchParams) -> List[Recipe]:
        """Return canonical recipes for the query, before filtering and scoring."""

    @abstractmethod
    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Return the full recipe, or None when it does not exist."""

    async def search(self, params: SearchParams) -> List[ScoredRecipe]:
        """Fetch candidates, then filter and score them."""
        recipes = await self.fetch_candidates(params)
        return rank_candidates(recipes, params)


class LocalRecipeSource(RecipeSource):
    """Fixed in-memory dataset. Read-only after load."""

    name = "local"

    def __init__(self, recipes: Optional[Iterable[Recipe]] = None, path: Path = LOCAL_RECIPES_PATH) -> None:
        """Load the dataset.

        Args:
            recipes: Recipes to serve instead of the bundled file (used by tests).
            path: JSON file holding a list of recipe objects.

        Raises:
            RuntimeError: If the bundled dataset cannot be read or parsed.
        """
        if recipes is None:
            recipes = self._load(path)
        self._recipes: List[Recipe] = list(recipes)
        self._index = {recipe.id: recipe for recipe in self._recipes}

    @staticmethod
    def _load(path: Path) -> List[Recipe]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [Recipe.model_validate(item) for item in raw]
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Local recipe dataset could not be loaded from {path}: {e}") from e

    def __len__(self) -> int:
        return len(self._recipes)

    async def fetch_candidates(self, params: SearchParams) -> List[Recipe]:
        return [recipe.model_copy(deep=True) for recipe in self._recipes]

    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        recipe = self._index.get(recipe_id)
        return recipe.model_copy(deep=True) if recipe else None


class FallbackRecipeSource(RecipeSource):
    """Serve from a primary source and fall back to another on any failure.

    Search and detail lookups never raise because of the primary; failures are
    logged (transient as warning, permanent as error) and the fallback answers
    the same call. A primary that reports "not found" is also retried on the
    fallback, since ids from the local dataset can reach any provider.
    """

    def __init__(self, primary: RecipeSource, fallback: RecipeSource) -> None:
        self.primary = primary
        self.fallback = fallback
        self.name = primary.name
        self.narrows_by_query = primary.narrows_by_query

    def _log_failure(self, operation: str, error: Exception) -> None:
        message = f"{self.primary.name} {operation} failed, falling back to {self.fallback.name}: {error}"
        if isinstance(error, UpstreamPermanentError):
            logger.error(message, extra={"provider": self.primary.name})
        else:
            logger.warning(message, extra={"provider": self.primary.name})

    async def fetch_candidates(self, params: SearchParams) -> List[Recipe]:
        try:
            return await self.primary.fetch_candidates(params)
        except Exception as e:
            self._log_failure("search", e)
            return await self.fallback.fetch_candidates(params)

    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        try:
            recipe = await self.primary.get_by_id(recipe_id)
        except Exception as e:
            self._log_failure(f"detail lookup for {recipe_id!r}", e)
            return await self.fallback.get_by_id(recipe_id)
        if recipe is None:
            logger.debug(f"{self.primary.name} has no recipe {recipe_id!r}, trying {self.fallback.name}")
            return await self.fallback.get_by_id(recipe_id)
        return recipe
