from __future__ import annotations

from pydantic import Field

from bookswap.models.camel_case import CamelCase


class BookDetails(CamelCase):
    title: str
    authors: list[str] = Field(default_factory=list)
    description: str = ""
    thumbnail: str = ""
