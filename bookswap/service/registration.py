from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
import logging
import secrets

from bookswap.errors import (
    CatalogError,
    DuplicateParticipantError,
    ParticipantNotFoundError,
    ValidationError,
)
from bookswap.models.book import BookDetails
from bookswap.models.participant import Participant
from bookswap.models.rest import RegistrationRequest
from bookswap.persistence.roster_repository import RosterRepository
from bookswap.service.book_catalog import BookCatalog

log = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"


def new_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_urlsafe(8)}"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RegistrationService:
    """Check-in desk: validates the form, enriches the book and writes the record."""

    def __init__(self, roster: RosterRepository, catalog: BookCatalog):
        self._roster = roster
        self._catalog = catalog

    async def lookup_book(self, isbn: str) -> BookDetails:
        return await self._catalog.lookup(isbn)

    def _validate(self, req: RegistrationRequest) -> None:
        missing = []
        if not (req.name.strip() or req.first_name.strip() or req.last_name.strip()):
            missing.append("name")
        if not req.book_isbn.strip():
            missing.append("bookIsbn")
        if not req.wishlist.strip():
            missing.append("wishlist")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    async def _book_for(self, req: RegistrationRequest) -> Optional[BookDetails]:
        if req.manual_entry:
            return None
        try:
            return await self._catalog.lookup(req.book_isbn)
        except CatalogError as exc:
            # manual fields (if any) are used instead
            log.info("catalog lookup for %s failed, using submitted fields: %s", req.book_isbn, exc)
            return None

    def _build(self, participant_id: str, req: RegistrationRequest,
               book: Optional[BookDetails], existing: Optional[Participant] = None) -> Participant:
        data = req.model_dump(exclude={"id", "manual_entry"})
        if book is not None:
            data.update(
                book_title=book.title or req.book_title,
                book_authors=book.authors or req.book_authors,
                book_description=book.description or req.book_description,
                book_thumbnail=book.thumbnail or req.book_thumbnail,
            )
        data["book_title"] = data["book_title"] or UNKNOWN_TITLE
        data["book_isbn"] = req.book_isbn.strip()
        if existing is not None:
            data.update(
                group=req.group or existing.group,
                assigned_book_id=existing.assigned_book_id,
                assigned_reason=existing.assigned_reason,
            )
        return Participant(id=participant_id, timestamp=now_iso(), **data)

    async def register(self, req: RegistrationRequest) -> Participant:
        self._validate(req)
        participant_id = (req.id or "").strip()
        if participant_id:
            # fresh read; the caller's view of the roster may be stale
            roster = await self._roster.list()
            if any(p.id == participant_id for p in roster):
                raise DuplicateParticipantError(f"Participant ID {participant_id} is already registered")
        else:
            participant_id = new_id("p")

        participant = self._build(participant_id, req, await self._book_for(req))
        await self._roster.upsert(participant)
        log.info("registered participant %s (%s)", participant.id, participant.display_name)
        return participant

    async def check_in(self, participant_id: str, req: RegistrationRequest) -> Participant:
        """Re-check-in: overwrite an existing record, keeping its assignment."""
        self._validate(req)
        roster = await self._roster.list()
        existing = next((p for p in roster if p.id == participant_id), None)
        if existing is None:
            raise ParticipantNotFoundError(f"Participant {participant_id} not found")

        participant = self._build(participant_id, req, await self._book_for(req), existing)
        await self._roster.upsert(participant)
        log.info("updated participant %s", participant.id)
        return participant

    async def remove(self, participant_id: str) -> None:
        await self._roster.delete(participant_id)
        log.info("deleted participant %s", participant_id)

    async def reset(self) -> None:
        await self._roster.clear()
        log.info("cleared roster")
