"""Search orchestration: normalize, fetch, filter by query, relax, sort."""

from typing import List, Optional

from src.models.models import Recipe, RecipeSummary, ScoredRecipe, SearchParams, SearchQuery
from src.recipes.filters import matches_query, normalize_diet_filters
from src.recipes.scoring import apply_match_score, sort_summaries
from src.recipes.sources import RecipeSource
from src.utils.logger import logger


def build_search_params(query: SearchQuery, q: Optional[str] = None) -> SearchParams:
    """Normalize diet flags and lowercase pantry/exclusion terms once per request."""
    return SearchParams(
        q=q,
        diets=normalize_diet_filters(query.diet),
        have=[item.lower() for item in query.have],
        exclude=[item.lower() for item in query.exclude],
        people=query.people,
    )


class RecipeSearchService:
    """Runs searches and detail lookups against the active recipe source."""

    def __init__(self, source: RecipeSource) -> None:
        self.source = source

    async def search(self, query: SearchQuery) -> List[RecipeSummary]:
        """Return scored summaries for the query, best match first.

        When the free-text query filters every candidate away, it is dropped
        and the remaining filters are applied to the whole pool instead. Diet
        and exclusion filters are never relaxed.
        """
        params = build_search_params(query, q=query.q)
        pool = await self.source.search(params)

        if query.q:
            matched = [item for item in pool if matches_query(item.recipe, query.q)]
            if not matched:
                logger.debug(f"No recipe matched query {query.q!r}, relaxing to filters only")
                if self.source.narrows_by_query:
                    # Upstream results were already narrowed by q; fetch the unnarrowed pool
                    pool = await self.source.search(build_search_params(query))
                matched = pool
            pool = matched

        return sort_summaries(self._summaries(pool))

    @staticmethod
    def _summaries(scored: List[ScoredRecipe]) -> List[RecipeSummary]:
        return [apply_match_score(item.recipe, item.score) for item in scored]

    async def get_by_id(self, recipe_id: str) -> Optional[Recipe]:
        return await self.source.get_by_id(recipe_id)
