import asyncio
import logging
import re
import unicodedata
from typing import Any, Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# --- Corpus API Communication ---

async def get_from_corpus(
    client: httpx.AsyncClient,
    endpoint: str,
    api_url: str,
    api_key: str | None,
    params: dict | None = None,
    timeout: float = 20.0,
) -> dict | list | None:
    """
    Performs a GET request to a corpus API endpoint.

    Transport and HTTP errors propagate so the caller's retry policy can see them.
    """
    url = f"{api_url.rstrip('/')}/{endpoint}"
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
    try:
        response = await client.get(url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            logger.info(f"Corpus API HTTP error for {url}: {e.response.status_code}")
        else:
            logger.error(f"Corpus API HTTP error for {url}: {e.response.status_code} {e.response.text}")
        raise
    except httpx.RequestError as e:
        logger.error(f"Corpus API request error for {url}: {e}")
        raise
    if not response.content:
        return None
    return response.json()


async def with_retries(
    coro_factory: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 0.5,
    should_retry: Callable[[Exception], bool] | None = None,
) -> T:
    delay = base_delay
    for i in range(attempts):
        try:
            return await coro_factory()
        except Exception as e:
            if i == attempts - 1 or (should_retry is not None and not should_retry(e)):
                raise
            await asyncio.sleep(delay)
            delay *= 2
    raise RuntimeError("with_retries requires at least one attempt")


# --- Reference text normalization ---

_SANITIZE_TRANSLATION = str.maketrans({
    "’": "'", "‘": "'", "ʼ": "'", "ʻ": "'", "´": "'",
    "–": "-", "—": "-",
})


def normalize_ref_text(text: Any) -> str:
    """Clean up a human-typed reference before parsing."""
    if not isinstance(text, str):
        return ""

    s = unicodedata.normalize("NFKC", text)
    s = s.replace("\u200f", "").replace("\u200e", "")
    s = s.translate(_SANITIZE_TRANSLATION)
    s = re.sub(r"\s+", " ", s.strip())
    s = re.sub(r"\s*:\s*", ":", s)
    return s
