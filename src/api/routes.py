"""HTTP routes for recipe search, conversation topics and substitutions.

Services are built once at startup and read from ``app.state``:
- search_service: RecipeSearchService
- topic_service: TopicService
- substitution_service: SubstitutionService
- rate_limiter: FixedWindowRateLimiter (every /api route)
- generation_limiter: MinIntervalRateLimiter (topic generation only)

Error bodies are fixed strings; internal details only go to the log.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.models.models import (
    ErrorResponse,
    OffTableRequest,
    OffTableResponse,
    QuickTopicRequest,
    RecipeDetailResponse,
    RecipeSearchResponse,
    SearchQuery,
    SubstitutionOptionsResponse,
    SubstitutionRequest,
    SubstitutionResponse,
    TopicRequest,
    TopicsResponse,
)
from src.topics.offtable import build_off_table_items
from src.utils.errors import DenylistError, RateLimitExceeded
from src.utils.logger import logger

CACHE_CONTROL = "s-maxage=86400, stale-while-revalidate=86400"
MAX_RECIPE_ID_LENGTH = 120

RATE_LIMIT_MESSAGE = "Easy there. Try again in a moment."
INVALID_INPUT_MESSAGE = "Invalid input"
NOT_FOUND_MESSAGE = "Not found"
INTERNAL_ERROR_MESSAGE = "Something went wrong"


def get_client_identifier(request: Request) -> str:
    """First X-Forwarded-For entry, else X-Real-IP, else the shared "unknown" bucket."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    return real_ip or "unknown"


def enforce_rate_limit(request: Request) -> str:
    """Count the request against the caller's window. Returns the caller identifier."""
    identifier = get_client_identifier(request)
    limiter = request.app.state.rate_limiter
    if not limiter.allow(identifier):
        logger.warning(f"Rate limit exceeded on {request.url.path}", extra={"identifier": identifier})
        raise RateLimitExceeded(limiter.hint())
    return identifier


def enforce_generation_limit(request: Request, identifier: str = Depends(enforce_rate_limit)) -> str:
    """Bucket limit plus minimum spacing between generation calls of one caller."""
    limiter = request.app.state.generation_limiter
    if not limiter.allow(identifier):
        logger.warning(f"Generation interval not respected on {request.url.path}", extra={"identifier": identifier})
        raise RateLimitExceeded(limiter.hint())
    return identifier


def _error(status_code: int, message: str, hint: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, hint=hint).model_dump(exclude_none=True),
    )


router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:
    state = request.app.state
    return {
        "status": "ok",
        "recipe_source": state.search_service.source.name,
        "generation_configured": state.topic_service.configured,
    }


@router.get("/api/recipes/search", response_model=RecipeSearchResponse)
async def search_recipes(
    request: Request,
    q: Optional[str] = None,
    diet: List[str] = Query([]),
    have: List[str] = Query([]),
    exclude: List[str] = Query([]),
    people: int = 2,
    identifier: str = Depends(enforce_rate_limit),
) -> JSONResponse:
    query = SearchQuery(q=q, diet=diet, have=have, exclude=exclude, people=people)
    results = await request.app.state.search_service.search(query)
    logger.info(f"Search returned {len(results)} recipes", extra={"identifier": identifier})
    body = RecipeSearchResponse(results=results)
    return JSONResponse(content=body.model_dump(mode="json"), headers={"Cache-Control": CACHE_CONTROL})


@router.get("/api/recipes/{recipe_id:path}", response_model=RecipeDetailResponse)
async def get_recipe(
    request: Request,
    recipe_id: str,
    identifier: str = Depends(enforce_rate_limit),
) -> JSONResponse:
    recipe_id = recipe_id.strip()
    if not recipe_id or len(recipe_id) > MAX_RECIPE_ID_LENGTH:
        return _error(400, INVALID_INPUT_MESSAGE)

    recipe = await request.app.state.search_service.get_by_id(recipe_id)
    if recipe is None:
        logger.debug(f"Recipe {recipe_id!r} not found", extra={"identifier": identifier})
        return _error(404, NOT_FOUND_MESSAGE)

    body = RecipeDetailResponse(recipe=recipe)
    return JSONResponse(content=body.model_dump(mode="json"), headers={"Cache-Control": CACHE_CONTROL})


@router.post("/api/topics", response_model=TopicsResponse)
async def create_topics(
    request: Request,
    body: TopicRequest,
    identifier: str = Depends(enforce_generation_limit),
) -> TopicsResponse:
    return await request.app.state.topic_service.generate(body, identifier=identifier)


@router.post("/api/topics/quick", response_model=TopicsResponse)
async def create_quick_topics(
    request: Request,
    body: QuickTopicRequest,
    identifier: str = Depends(enforce_generation_limit),
) -> TopicsResponse:
    return await request.app.state.topic_service.generate(body.to_topic_request(), identifier=identifier)


@router.post("/api/substitutions/explain", response_model=SubstitutionResponse)
async def explain_substitution(
    request: Request,
    body: SubstitutionRequest,
    identifier: str = Depends(enforce_rate_limit),
) -> SubstitutionResponse:
    delta = await request.app.state.substitution_service.explain(body, identifier=identifier)
    return SubstitutionResponse(delta=delta)


@router.get(
    "/api/substitutions/options",
    response_model=SubstitutionOptionsResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def substitution_options(
    request: Request,
    ingredient: str = Query(..., min_length=1, max_length=60),
    diet: List[str] = Query([]),
) -> SubstitutionOptionsResponse:
    query = SearchQuery(diet=diet)
    options = request.app.state.substitution_service.get_options(ingredient, query.diet)
    return SubstitutionOptionsResponse(options=options)


@router.post("/api/offtable", response_model=OffTableResponse, dependencies=[Depends(enforce_rate_limit)])
async def off_table(body: OffTableRequest) -> OffTableResponse:
    return OffTableResponse(items=build_off_table_items(body.recipes))


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy to status codes and fixed response bodies."""

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug(f"Invalid request to {request.url.path}: {exc.errors()}")
        return _error(400, INVALID_INPUT_MESSAGE)

    @app.exception_handler(ValidationError)
    async def _model_validation(request: Request, exc: ValidationError) -> JSONResponse:
        logger.debug(f"Invalid input to {request.url.path}: {exc.error_count()} errors")
        return _error(400, INVALID_INPUT_MESSAGE)

    @app.exception_handler(DenylistError)
    async def _denylisted(request: Request, exc: DenylistError) -> JSONResponse:
        logger.warning(f"Rejected denylisted input in {exc.field}", extra={"identifier": get_client_identifier(request)})
        return _error(400, INVALID_INPUT_MESSAGE)

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        return _error(429, RATE_LIMIT_MESSAGE, hint=exc.hint)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error on {request.url.path}: {type(exc).__name__}",
            exc_info=exc,
            extra={"identifier": get_client_identifier(request)},
        )
        return _error(500, INTERNAL_ERROR_MESSAGE)
