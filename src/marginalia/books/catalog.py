"""Book catalog lookup.

Finds book metadata by title, author or ISBN through the Google Books API.

API docs: https://developers.google.com/books/docs/v1/using
"""

import logging
import os
from typing import Any, Protocol

import httpx

from .models import BookSummary

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_API_URL = "https://www.googleapis.com/books/v1/volumes"
GOOGLE_BOOKS_TIMEOUT = 10.0  # seconds
UNKNOWN_AUTHOR = "Unknown author"


class CatalogError(Exception):
    """Raised when the catalog cannot be reached or returns unusable data."""

    pass


class BookCatalog(Protocol):
    """Interface for book metadata lookup."""

    def search_by_title_or_author(self, query: str) -> list[BookSummary]:
        """Search books by free text.

        Raises:
            CatalogError: On network or decoding failure
        """
        ...

    def search_by_isbn(self, isbn: str) -> BookSummary | None:
        """Look up a single book by ISBN (None if not found).

        Raises:
            CatalogError: On network or decoding failure
        """
        ...


def parse_volume(item: dict[str, Any]) -> BookSummary | None:
    """Convert a Google Books volume to a BookSummary (None without a title)."""
    info = item.get("volumeInfo") or {}
    title = info.get("title")
    if not title:
        return None

    identifiers = {
        ident.get("type"): ident.get("identifier")
        for ident in info.get("industryIdentifiers") or []
    }
    isbn = identifiers.get("ISBN_13") or identifiers.get("ISBN_10")

    links = info.get("imageLinks") or {}
    cover_url = links.get("thumbnail") or links.get("smallThumbnail")
    if cover_url:
        cover_url = cover_url.replace("http://", "https://")

    published_year = None
    published = info.get("publishedDate") or ""
    if published[:4].isdigit():
        published_year = int(published[:4])

    return BookSummary(
        title=title,
        author=", ".join(info.get("authors") or []) or UNKNOWN_AUTHOR,
        isbn=isbn,
        cover_url=cover_url,
        summary=info.get("description"),
        publisher=info.get("publisher"),
        published_year=published_year,
        page_count=info.get("pageCount"),
        genres=list(info.get("categories") or []),
        language=info.get("language") or "en",
    )


class GoogleBooksCatalog:
    """BookCatalog backed by the Google Books volumes API."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = GOOGLE_BOOKS_TIMEOUT,
        max_results: int = 20,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the catalog client.

        Args:
            api_key: Google Books API key. If not provided, will look for
                    GOOGLE_BOOKS_API_KEY; the API also works without one.
            timeout: Request timeout in seconds.
            max_results: Maximum results of a free text search.
            client: Optional preconfigured httpx client.
        """
        self._api_key = api_key or os.environ.get("GOOGLE_BOOKS_API_KEY")
        self._timeout = timeout
        self._max_results = max_results
        self._client = client

    def _get(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Query the volumes endpoint and return its items."""
        if self._api_key:
            params = {**params, "key": self._api_key}

        try:
            if self._client is not None:
                response = self._client.get(GOOGLE_BOOKS_API_URL, params=params)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.get(GOOGLE_BOOKS_API_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(f"Catalog returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CatalogError(f"Catalog request failed: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Could not decode catalog response: {e}") from e

        if not isinstance(data, dict):
            raise CatalogError("Unexpected catalog response shape")
        return data.get("items") or []

    def search_by_title_or_author(self, query: str) -> list[BookSummary]:
        """Search by free text."""
        if not query.strip():
            return []

        items = self._get({"q": query, "maxResults": self._max_results})
        results = [s for s in (parse_volume(item) for item in items) if s is not None]
        logger.debug(f"Catalog search '{query}': {len(results)} results")
        return results

    def search_by_isbn(self, isbn: str) -> BookSummary | None:
        """Look up by ISBN; dashes and spaces are ignored."""
        clean = isbn.replace("-", "").replace(" ", "")
        items = self._get({"q": f"isbn:{clean}"})
        if not items:
            logger.debug(f"No catalog entry for ISBN {clean}")
            return None
        return parse_volume(items[0])


__all__ = [
    "BookCatalog",
    "CatalogError",
    "GoogleBooksCatalog",
    "parse_volume",
]
