from __future__ import annotations

import logging

import httpx

from bookswap.errors import BookNotFoundError, CatalogError, ValidationError
from bookswap.models.book import BookDetails

log = logging.getLogger(__name__)


class BookCatalog:
    """ISBN lookups against the Google Books volumes-search endpoint."""

    def __init__(self, http: httpx.AsyncClient, base_url: str):
        self.http = http
        self.base_url = base_url

    async def lookup(self, isbn: str) -> BookDetails:
        isbn = (isbn or "").strip()
        if not isbn:
            raise ValidationError("ISBN is required")
        try:
            r = await self.http.get(self.base_url, params={"q": f"isbn:{isbn}"})
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.error("book lookup for %s failed: %s", isbn, exc)
            raise CatalogError("Failed to fetch book details") from exc

        if not isinstance(data, dict) or not data.get("totalItems") or not data.get("items"):
            raise BookNotFoundError("Book not found")
        items = data["items"]

        info = items[0].get("volumeInfo") or {}
        return BookDetails(
            title=info.get("title") or "",
            authors=info.get("authors") or [],
            description=info.get("description") or "",
            thumbnail=(info.get("imageLinks") or {}).get("thumbnail") or "",
        )
