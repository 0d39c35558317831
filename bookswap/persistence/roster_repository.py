from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable
import json
import logging
import os
import tempfile

from pydantic import TypeAdapter, ValidationError

from bookswap.models.participant import Participant

log = logging.getLogger(__name__)

_roster_adapter = TypeAdapter(list[Participant])


def parse_roster(data: object) -> list[Participant]:
    """Validate decoded JSON into participants. Raises pydantic ValidationError."""
    return _roster_adapter.validate_python(data)


def dump_roster(participants: Iterable[Participant]) -> list[dict]:
    return [p.dump() for p in participants]


def upsert_into(roster: list[Participant], participant: Participant) -> list[Participant]:
    """Replace the record with the same id, or append it."""
    updated = [participant if p.id == participant.id else p for p in roster]
    if not any(p.id == participant.id for p in roster):
        updated.append(participant)
    return updated


class RosterRepository(ABC):
    @abstractmethod
    async def list(self) -> list[Participant]:
        """Returns the full roster."""
        ...

    @abstractmethod
    async def upsert(self, participant: Participant) -> Participant:
        """Adds a Participant, or replaces the one with the same ID."""
        ...

    @abstractmethod
    async def delete(self, participant_id: str) -> None:
        """Removes the Participant with exactly this ID. Unknown IDs are ignored."""
        ...

    @abstractmethod
    async def replace_all(self, participants: list[Participant]) -> None:
        """Overwrites the roster (used to write matching results)."""
        ...

    async def clear(self) -> None:
        """Empties the roster."""
        await self.replace_all([])


class KeyValueRosterRepository(RosterRepository):
    """Keeps the whole roster as one JSON document; subclasses read/write the raw text."""

    @abstractmethod
    async def _read_raw(self) -> str | None:
        ...

    @abstractmethod
    async def _write_raw(self, payload: str) -> None:
        ...

    async def list(self) -> list[Participant]:
        raw = await self._read_raw()
        if not raw:
            return []
        try:
            return parse_roster(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            log.error("failed to parse stored roster, treating as empty: %s", exc)
            return []

    async def _save(self, participants: list[Participant]) -> None:
        await self._write_raw(json.dumps(dump_roster(participants), ensure_ascii=False))

    async def upsert(self, participant: Participant) -> Participant:
        roster = await self.list()
        await self._save(upsert_into(roster, participant))
        return participant

    async def delete(self, participant_id: str) -> None:
        roster = await self.list()
        await self._save([p for p in roster if p.id != participant_id])

    async def replace_all(self, participants: list[Participant]) -> None:
        await self._save(list(participants))


class FileRosterRepository(KeyValueRosterRepository):
    def __init__(self, path: Path | str):
        self._path = Path(path)

    async def _read_raw(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            log.error("could not read %s: %s", self._path, exc)
            return None

    async def _write_raw(self, payload: str) -> None:
        # write-then-rename so a crash never leaves half a roster on disk
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        log.debug("wrote roster to %s", self._path)
