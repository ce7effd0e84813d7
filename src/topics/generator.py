"""Topic generation with cache, model retries and local fallback.

Per request:
    validate (denylist) -> cache lookup -> hit: done
                                       -> miss: attempt models in order
                                            success -> cache, done
                                            transient failure -> next attempt
                                            permanent failure / exhausted -> local fallback

Fallback results are returned directly and never cached. Upstream failures
are logged and never reach the caller.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from src.models.models import TopicRequest, TopicsPayload, TopicsResponse
from src.prompts.prompts import TOPICS_SYSTEM_INSTRUCTION, build_topics_prompt
from src.topics.fallback import build_fallback_topics
from src.topics.parsing import parse_topics_payload
from src.utils.cache import TTLCache, build_topic_cache_key, hash_string
from src.utils.config import Config
from src.utils.errors import (
    DenylistError,
    UpstreamPermanentError,
    UpstreamTransientError,
    is_retryable_status,
)
from src.utils.logger import logger, truncate_for_log

T = TypeVar("T")

TRANSIENT_KEYWORDS = (
    "insufficient quota",
    "insufficient_quota",
    "resource exhausted",
    "resource_exhausted",
    "rate limit",
    "rate_limit",
    "timeout",
    "timed out",
    "connection",
    "unavailable",
)

PREVIEW_STARTERS = 2


class GeminiClient:
    """Thin async wrapper around the synchronous google-genai client."""

    def __init__(self, api_key: str, temperature: float = 0.9, timeout_seconds: float = 12) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required")
        self._client = genai.Client(api_key=api_key)
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        """Run one generate_content call in a worker thread under a total timeout.

        Raises:
            asyncio.TimeoutError: The call exceeded timeout_seconds.
            google.genai.errors.APIError: The service rejected the call.
        """
        generation_config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self.temperature,
            response_mime_type="application/json" if json_output else None,
        )
        response = await asyncio.wait_for(
            asyncio.to_thread(
                self._client.models.generate_content,
                model=model,
                contents=prompt,
                config=generation_config,
            ),
            timeout=self.timeout_seconds,
        )
        return response.text or ""


def classify_generation_error(error: BaseException) -> bool:
    """True when another attempt may succeed.

    Transient: timeouts, connection errors, HTTP 429, any 5xx, quota and
    rate-limit messages, malformed payloads. Everything else is permanent.
    """
    if isinstance(error, UpstreamTransientError):
        return True
    if isinstance(error, UpstreamPermanentError):
        return False
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError, httpx.TransportError)):
        return True
    if isinstance(error, genai_errors.APIError) and is_retryable_status(error.code):
        return True

    message = str(error).lower()
    return any(keyword in message for keyword in TRANSIENT_KEYWORDS)


@dataclass(frozen=True)
class RetryPolicy:
    """Ordered model list, attempt cap and failure classifier.

    Attempts walk the model list in order, wrapping around when max_attempts
    exceeds the number of models. A failure the classifier calls permanent
    ends the sequence immediately.
    """

    models: Tuple[str, ...]
    max_attempts: int = 2
    classifier: Callable[[BaseException], bool] = field(default=classify_generation_error)

    def plan(self) -> List[str]:
        if not self.models:
            return []
        return [self.models[i % len(self.models)] for i in range(self.max_attempts)]

    async def execute(
        self,
        attempt: Callable[[str], Awaitable[T]],
        operation: str,
        identifier: Optional[str] = None,
        prompt_preview: str = "",
    ) -> Optional[T]:
        """Run attempt(model) for each planned model until one succeeds.

        Returns:
            The first successful result, or None when every attempt failed or a
            permanent failure short-circuited the sequence.
        """
        plan = self.plan()
        for number, model in enumerate(plan, start=1):
            try:
                return await attempt(model)
            except Exception as e:
                retryable = self.classifier(e)
                context = {"identifier": identifier or "unknown", "model": model}
                message = (
                    f"{operation} attempt {number}/{len(plan)} failed "
                    f"({'transient' if retryable else 'permanent'}): {type(e).__name__}: {e} "
                    f"| prompt: {truncate_for_log(prompt_preview)}"
                )
                if not retryable:
                    logger.error(message, extra=context)
                    return None
                logger.warning(message, extra=context)
        return None

    @classmethod
    def from_config(cls, config: Config) -> "RetryPolicy":
        models = tuple(dict.fromkeys(m for m in (config.GEMINI_MODEL, config.GEMINI_FALLBACK_MODEL) if m))
        return cls(models=models, max_attempts=config.GENERATION_MAX_ATTEMPTS)


def find_denylisted_field(request: TopicRequest, denylist: Iterable[str]) -> Optional[str]:
    """Name of the first free-text field containing a denylisted term, if any."""
    terms = [term for term in denylist if term]
    if not terms:
        return None
    fields: List[Tuple[str, Optional[str]]] = [
        ("dietary_or_ingredient", request.dietary_or_ingredient),
        ("vibe", request.vibe),
    ]
    if request.recipe is not None:
        fields.append(("recipe.title", request.recipe.title))
        fields.append(("recipe.cuisine", request.recipe.cuisine))
    for name, value in fields:
        if value and any(term in value.lower() for term in terms):
            return name
    return None


def _to_response(payload: TopicsPayload, source: str) -> TopicsResponse:
    return TopicsResponse(
        starters=payload.starters,
        fact=payload.fact,
        hashes=[hash_string(text) for text in [*payload.starters, payload.fact]],
        source=source,
    )


def _apply_preview(response: TopicsResponse, preview: bool) -> TopicsResponse:
    if not preview:
        return response
    hashes = response.hashes[:PREVIEW_STARTERS] + response.hashes[-1:] if response.hashes else []
    return response.model_copy(update={"starters": response.starters[:PREVIEW_STARTERS], "hashes": hashes})


class TopicService:
    """Generates conversation starters and a fun fact for a topic request."""

    def __init__(
        self,
        client: Optional[GeminiClient],
        policy: RetryPolicy,
        cache: TTLCache,
        max_words: int = 28,
        denylist: Sequence[str] = (),
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the service.

        Args:
            client: Generation client; None serves every request from the fallback.
            policy: Model order, attempt cap and failure classifier.
            cache: Cache of successful (non-fallback) results.
            max_words: Word cap per generated sentence.
            denylist: Lowercase terms rejected in free-text fields.
            rng: Random source for fallback template selection.
        """
        self.client = client
        self.policy = policy
        self.cache = cache
        self.max_words = max_words
        self.denylist = [term.lower() for term in denylist]
        self.rng = rng or random.Random()

    @property
    def configured(self) -> bool:
        return self.client is not None

    def check_denylist(self, request: TopicRequest) -> None:
        """Raises DenylistError when any free-text field contains a denylisted term."""
        field_name = find_denylisted_field(request, self.denylist)
        if field_name is not None:
            raise DenylistError(field_name)

    async def generate(self, request: TopicRequest, identifier: Optional[str] = None) -> TopicsResponse:
        """Return 3 starters (2 in preview mode) and a fact for the request.

        Raises:
            DenylistError: A free-text field contains a denylisted term.
        """
        self.check_denylist(request)

        key = build_topic_cache_key(request.vibe, request.people, request.theme, request.dietary_or_ingredient)
        cached: Optional[TopicsResponse] = self.cache.get(key)
        if cached is not None:
            if set(cached.hashes) & set(request.previous_hashes):
                logger.debug("Cached topics already seen by caller, regenerating", extra={"identifier": identifier})
            else:
                logger.debug(f"Topic cache hit for {request.theme!r}", extra={"identifier": identifier})
                return _apply_preview(cached.model_copy(update={"source": "cache"}), request.preview)

        payload = await self._generate_payload(request, identifier)
        if payload is None:
            logger.info(f"Serving fallback topics for {request.theme!r}", extra={"identifier": identifier})
            fallback = build_fallback_topics(request, self.rng, self.max_words)
            return _apply_preview(fallback, request.preview)

        response = _to_response(payload, source="model")
        self.cache.put(key, response)
        return _apply_preview(response, request.preview)

    async def _generate_payload(self, request: TopicRequest, identifier: Optional[str]) -> Optional[TopicsPayload]:
        if self.client is None:
            return None

        prompt = build_topics_prompt(request, self.max_words)
        client = self.client

        async def _attempt(model: str) -> TopicsPayload:
            text = await client.generate(model, prompt, TOPICS_SYSTEM_INSTRUCTION, json_output=True)
            payload = parse_topics_payload(text, self.max_words)
            if payload is None:
                raise UpstreamTransientError("Generated topics did not match the expected shape", source=model)
            return payload

        return await self.policy.execute(_attempt, "Topic generation", identifier, prompt)


def build_topic_service(config: Config, rng: Optional[random.Random] = None) -> TopicService:
    """Wire the topic service from configuration. No API key means fallback only."""
    client: Optional[GeminiClient] = None
    if config.GEMINI_API_KEY:
        client = GeminiClient(
            api_key=config.GEMINI_API_KEY,
            temperature=config.TEMPERATURE,
            timeout_seconds=config.GENERATION_TIMEOUT_SECONDS,
        )
    else:
        logger.warning("GEMINI_API_KEY not set; topics will be served from local templates")

    return TopicService(
        client=client,
        policy=RetryPolicy.from_config(config),
        cache=TTLCache(ttl_seconds=config.TOPIC_CACHE_TTL_SECONDS, max_entries=config.TOPIC_CACHE_MAX_ENTRIES),
        max_words=config.TOPIC_MAX_WORDS,
        denylist=config.DENYLIST_TERMS,
        rng=rng,
    )
