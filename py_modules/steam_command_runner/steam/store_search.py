"""
Steam store search, used to look up app ids for games by name.
"""
import logging
from dataclasses import dataclass
from typing import List

import requests

from ..errors import StoreSearchError

logger = logging.getLogger(__name__)

STORE_SEARCH_URL = "https://store.steampowered.com/api/storesearch/"
USER_AGENT = "steam-command-runner"
DEFAULT_TIMEOUT = 10


@dataclass
class StoreSearchResult:
    app_id: int
    name: str


def search_store(query: str, limit: int = 10, timeout: float = DEFAULT_TIMEOUT) -> List[StoreSearchResult]:
    """
    Search the Steam store for games matching query.

    Args:
        query: Search term
        limit: Maximum number of results returned
        timeout: Request timeout in seconds

    Returns:
        Up to `limit` results in store relevance order

    Raises:
        StoreSearchError: request failed or the response was not understood
    """
    params = {"term": query, "l": "english", "cc": "US"}
    logger.debug(f"Searching Steam store for '{query}'")
    try:
        resp = requests.get(
            STORE_SEARCH_URL,
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        raise StoreSearchError(str(e)) from e
    except ValueError as e:
        raise StoreSearchError(f"invalid JSON response: {e}") from e

    results = []
    for item in data.get("items", []):
        try:
            results.append(StoreSearchResult(app_id=int(item["id"]), name=str(item["name"])))
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Skipping malformed search result: {item}")
            continue
        if len(results) >= limit:
            break
    logger.info(f"Store search for '{query}' returned {len(results)} results")
    return results
