"""Recipe source selection.

Resolved once at startup and injected into request handlers. External
providers are always wrapped so their failures fall back to the local dataset.
"""

from typing import Optional

from src.recipes.edamam import EdamamRecipeSource
from src.recipes.sources import FallbackRecipeSource, LocalRecipeSource, RecipeSource
from src.recipes.spoonacular import SpoonacularRecipeSource
from src.utils.config import Config
from src.utils.logger import logger


def build_recipe_source(config: Config, local: Optional[LocalRecipeSource] = None) -> RecipeSource:
    """Pick the active recipe source from the configured credentials.

    The priority order lives in Config.active_provider: Spoonacular API key,
    then Edamam app id + key, then the local dataset alone.

    Args:
        config: Application configuration.
        local: Preloaded local source (tests); the bundled dataset otherwise.

    Returns:
        The source every search and detail lookup goes through.
    """
    local = local if local is not None else LocalRecipeSource()
    provider = config.active_provider

    if provider == "spoonacular":
        primary: RecipeSource = SpoonacularRecipeSource(
            api_key=config.SPOONACULAR_API_KEY,
            timeout_seconds=config.HTTP_TIMEOUT_SECONDS,
            max_results=config.MAX_RESULTS,
        )
    elif provider == "edamam":
        primary = EdamamRecipeSource(
            app_id=config.EDAMAM_APP_ID,
            app_key=config.EDAMAM_APP_KEY,
            timeout_seconds=config.HTTP_TIMEOUT_SECONDS,
        )
    else:
        logger.info(f"Recipe source: local dataset ({len(local)} recipes)")
        return local

    logger.info(f"Recipe source: {primary.name} (local dataset fallback, {len(local)} recipes)")
    return FallbackRecipeSource(primary, local)
