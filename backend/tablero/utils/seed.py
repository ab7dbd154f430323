from __future__ import annotations
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# always refetch, never serve the seed from an HTTP cache
NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


async def fetch_seed(url: str, timeout: float = 10.0,
                     transport: httpx.AsyncBaseTransport | None = None) -> Any | None:
    """GET the seed document once. Any failure is logged and gives None."""
    if not url:
        return None
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(url, headers=NO_STORE_HEADERS)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPError as e:
        logger.warning("Could not load seed projects from %s: %s", url, e)
    except ValueError as e:
        logger.warning("Seed document at %s is not valid JSON: %s", url, e)
    return None
