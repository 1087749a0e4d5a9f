"""
catalog_client.py
=================
Thin wrapper around the public Studio Ghibli film endpoint:

    GET https://ghibliapi.vercel.app/films

The endpoint answers with a JSON array of film objects.  The client issues
exactly one request per :meth:`CatalogClient.fetch_catalog` call and decodes
the array into :class:`app.models.Film` records.  There is no retry, cache
or pagination: a failure is raised to the caller, who owns any retry policy.

Usage
-----
::

    from catalog_client import CatalogClient

    client = CatalogClient()
    films = client.fetch_catalog()
    # [Film(id='2baf70d1-...', title='Castle in the Sky', ...), ...]
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, List, Optional

import requests

from app.errors import DecodeError, NetworkError
from app.models import Film

logger = logging.getLogger('ghibli.catalog')

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_API_URL = "https://ghibliapi.vercel.app/films"
_DEFAULT_TIMEOUT = 10  # seconds


def decode_catalog(payload: Any) -> List[Film]:
    """Decode a parsed JSON payload into an ordered list of films.

    Order is preserved and duplicate ids are kept; duplicates are only
    reported in the log.

    Raises:
        DecodeError: *payload* is not a list or one of its elements is not a
            valid film object.
    """
    if not isinstance(payload, list):
        raise DecodeError(f"expected a JSON array, got {type(payload).__name__}")

    films: List[Film] = []
    for index, raw in enumerate(payload):
        try:
            films.append(Film.from_dict(raw))
        except DecodeError as e:
            raise DecodeError(f"film #{index}: {e}") from e

    duplicates = [fid for fid, n in Counter(f.id for f in films).items() if n > 1]
    if duplicates:
        logger.warning("Catalog contains duplicate film ids: %s", ', '.join(duplicates))
    return films


class CatalogClient:
    """Minimal client for the film catalog endpoint."""

    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: float = _DEFAULT_TIMEOUT) -> None:
        """
        Args:
            api_url: Endpoint returning the film array.
            timeout: Default HTTP timeout in seconds for each fetch.
        """
        if not api_url:
            raise ValueError("api_url must not be empty")
        self.api_url = api_url
        self.timeout = timeout
        self.session = requests.Session()

    def fetch_catalog(self, timeout: Optional[float] = None) -> List[Film]:
        """Fetch and decode the whole catalog.

        Args:
            timeout: Per-call override of the HTTP timeout in seconds.

        Returns:
            Films in the order the server returned them.

        Raises:
            NetworkError: Connection failure, timeout or non-2xx status.
            DecodeError:  Body is not JSON or does not match the film schema.
        """
        timeout = self.timeout if timeout is None else timeout
        logger.debug("Fetching catalog from %s (timeout=%ss)", self.api_url, timeout)
        try:
            response = self.session.get(self.api_url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Error fetching catalog from %s: %s", self.api_url, e)
            raise NetworkError(f"could not fetch catalog from {self.api_url}: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Catalog response from %s is not valid JSON: %s", self.api_url, e)
            raise DecodeError(f"catalog response is not valid JSON: {e}") from e

        try:
            films = decode_catalog(payload)
        except DecodeError as e:
            logger.error("Catalog payload from %s rejected: %s", self.api_url, e)
            raise

        logger.info("Fetched %d films from %s", len(films), self.api_url)
        return films

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.session.close()
