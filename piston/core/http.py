"""
Typed document loading.

Every metadata document (manifest, version descriptor, asset index) is
fetched the same way: GET the URL, stream the body, validate it straight
from bytes into a pydantic model.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from piston.errors import NetworkError, ParseError, PartialParseError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_TIMEOUT = 30.0


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yields the caller's client untouched, or a short-lived one that is closed on exit."""
    if client is not None:
        yield client
        return
    # Large runs queue many requests on the pool; only the wire timeouts apply.
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, pool=None), follow_redirects=True) as owned:
        yield owned


def _is_truncated(exc: ValidationError) -> bool:
    for error in exc.errors():
        if error.get("type") == "json_invalid" and "EOF while parsing" in error.get("msg", ""):
            return True
    return False


async def fetch_bytes(client: httpx.AsyncClient, url: str, stage: str) -> bytes:
    """GETs a URL and returns the whole body, streamed chunk by chunk."""
    body = bytearray()
    try:
        async with client.stream("GET", url) as resp:
            resp.raise_for_status()
            async for chunk in resp.aiter_bytes():
                body.extend(chunk)
    except httpx.HTTPStatusError as e:
        logger.warning(f"{stage}: {url} answered HTTP {e.response.status_code}")
        raise NetworkError(
            f"HTTP {e.response.status_code} fetching {url}", stage=stage, url=url
        ) from e
    except httpx.HTTPError as e:
        logger.warning(f"{stage}: could not fetch {url}: {e}")
        raise NetworkError(f"Error fetching {url}: {e}", stage=stage, url=url) from e
    return bytes(body)


def decode_document(body: bytes, model: Type[T], stage: str, url: Optional[str] = None) -> T:
    """Validates a JSON body into `model`, mapping failures onto ParseError."""
    if not body.strip():
        raise ParseError("Empty response body", stage=stage, url=url)
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        if _is_truncated(e):
            raise PartialParseError(
                f"Truncated {model.__name__} document ({len(body)} bytes received)",
                stage=stage,
                url=url,
            ) from e
        raise ParseError(f"Invalid {model.__name__} document: {e}", stage=stage, url=url) from e


async def fetch_document(client: httpx.AsyncClient, url: str, model: Type[T], stage: str) -> T:
    """
    Fetches `url` and decodes it as `model`.

    Args:
        client: HTTP client used for the request
        url: Document URL
        model: Pydantic model describing the document
        stage: Pipeline stage name attached to any raised error

    Returns:
        The validated model instance
    """
    logger.info(f"Fetching {model.__name__} from {url}")
    body = await fetch_bytes(client, url, stage)
    return decode_document(body, model, stage, url)
