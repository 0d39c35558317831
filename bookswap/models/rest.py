from __future__ import annotations

from typing import Optional

from pydantic import Field

from bookswap.models.camel_case import CamelCase
from bookswap.models.participant import Group


class RegistrationRequest(CamelCase):
    """Check-in form payload. ``manual_entry`` skips the catalog lookup."""

    id: Optional[str] = None
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    group: Optional[Group] = None
    book_isbn: str = ""
    book_title: str = ""
    book_authors: list[str] = Field(default_factory=list)
    book_description: str = ""
    book_thumbnail: str = ""
    wishlist: str = ""
    manual_entry: bool = False


class MatchRequest(CamelCase):
    api_key: Optional[str] = None
    grouped: bool = False
