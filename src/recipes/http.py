"""HTTP helper for external recipe providers.

One request per call with an explicit total timeout. Every failure is raised
as an UpstreamError subclass so the fallback decorator can absorb it.
"""

import asyncio
from typing import Any, Sequence

import aiohttp

from src.utils.errors import UpstreamPermanentError, UpstreamTransientError, is_retryable_status
from src.utils.logger import logger


async def fetch_json(
    url: str,
    params: Sequence[tuple[str, str]],
    timeout_seconds: float,
    source: str,
) -> Any:
    """GET a URL and decode its JSON body.

    Args:
        url: Endpoint URL.
        params: Query parameters as (key, value) pairs; repeated keys allowed.
        timeout_seconds: Total timeout for the request.
        source: Provider name used in errors and logs.

    Returns:
        Decoded JSON payload.

    Raises:
        UpstreamTransientError: Timeout, connection error, 429 or 5xx.
        UpstreamPermanentError: Other non-2xx status or a body that is not JSON.
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                params=list(params),
                timeout=aiohttp.ClientTimeout(total=timeout_seconds),
            ) as response:
                if response.status < 200 or response.status >= 300:
                    message = f"{source} request failed with {response.status}"
                    if is_retryable_status(response.status):
                        raise UpstreamTransientError(message, status=response.status, source=source)
                    raise UpstreamPermanentError(message, status=response.status, source=source)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise UpstreamPermanentError(
                        f"{source} returned a body that is not JSON: {e}", status=response.status, source=source
                    ) from e
    except asyncio.TimeoutError as e:
        raise UpstreamTransientError(f"{source} request timed out after {timeout_seconds}s", source=source) from e
    except aiohttp.ClientError as e:
        logger.debug(f"{source} connection error: {e}")
        raise UpstreamTransientError(f"{source} connection error: {e}", source=source) from e
