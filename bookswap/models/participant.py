from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from bookswap.models.camel_case import CamelCase

Group = Literal["red", "brown"]


def _stringify(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


class Participant(CamelCase):
    """A registered attendee, the book they brought and their wishlist.

    Spreadsheet rows come back loosely typed (numeric ids, empty strings for
    unset cells, comma-joined authors), so validators normalize them here.
    """

    id: str
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
    assigned_book_id: Optional[str] = None
    assigned_reason: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("id", "book_isbn", mode="before")
    @classmethod
    def coerce_numeric_ids(cls, value: Any) -> Any:
        return _stringify(value)

    @field_validator("name", "first_name", "last_name", "email", "book_title",
                     "book_description", "book_thumbnail", "wishlist", mode="before")
    @classmethod
    def blank_for_none(cls, value: Any) -> Any:
        # sheet cells that look numeric (a title like 1984) arrive as numbers
        return "" if value is None else _stringify(value)

    @field_validator("group", "assigned_book_id", "assigned_reason", "timestamp", mode="before")
    @classmethod
    def none_for_blank(cls, value: Any) -> Any:
        if value == "":
            return None
        return _stringify(value)

    @field_validator("book_authors", mode="before")
    @classmethod
    def split_authors(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [a.strip() for a in value.split(",") if a.strip()]
        if isinstance(value, list):
            return [_stringify(a) for a in value]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return [_stringify(value)]
        return value

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.first_name} {self.last_name}".strip()
