"""Supper Club API - recipe search and dinner conversation service.

Single entry point for the HTTP service:
- Resolves the recipe source once (Spoonacular, Edamam or local dataset)
- Wires topic generation (Gemini with local template fallback)
- Creates the per-client rate limiters
- Serves the REST API with FastAPI/uvicorn

Run with: python app.py
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI

from src.api.routes import register_exception_handlers, router
from src.recipes.registry import build_recipe_source
from src.recipes.search import RecipeSearchService
from src.recipes.sources import RecipeSource
from src.recipes.substitutions import SubstitutionService
from src.topics.generator import TopicService, build_topic_service
from src.utils.config import Config, config
from src.utils.logger import logger
from src.utils.rate_limit import FixedWindowRateLimiter, MinIntervalRateLimiter


def create_app(
    app_config: Config = config,
    recipe_source: Optional[RecipeSource] = None,
    topic_service: Optional[TopicService] = None,
    substitution_service: Optional[SubstitutionService] = None,
) -> FastAPI:
    """Build the FastAPI application and its process-wide services.

    Args:
        app_config: Configuration to wire from.
        recipe_source: Source override (tests); resolved from credentials otherwise.
        topic_service: Topic service override (tests).
        substitution_service: Substitution service override (tests).

    Returns:
        Configured FastAPI application.
    """
    logger.info("=== Initializing Supper Club API ===")

    source = recipe_source if recipe_source is not None else build_recipe_source(app_config)
    topics = topic_service if topic_service is not None else build_topic_service(app_config)
    substitutions = (
        substitution_service
        if substitution_service is not None
        else SubstitutionService(client=topics.client, policy=topics.policy)
    )

    app = FastAPI(
        title="Supper Club API",
        description="Recipe search with scored results and dinner conversation starters",
        version="1.0.0",
    )
    app.state.config = app_config
    app.state.search_service = RecipeSearchService(source)
    app.state.topic_service = topics
    app.state.substitution_service = substitutions
    app.state.rate_limiter = FixedWindowRateLimiter(
        limit=app_config.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=app_config.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.generation_limiter = MinIntervalRateLimiter(min_interval=app_config.GENERATION_MIN_INTERVAL_SECONDS)

    app.include_router(router)
    register_exception_handlers(app)

    logger.info(
        f"Recipe source: {source.name} | generation: {'gemini' if topics.configured else 'local templates'}"
    )
    logger.info("=== Initialization complete ===")
    return app


if __name__ == "__main__":
    logger.info(f"Starting Supper Club API on port {config.PORT}")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(create_app(), host="0.0.0.0", port=config.PORT)
