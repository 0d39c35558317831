from __future__ import annotations

from typing import Any
import logging

import httpx
from pydantic import ValidationError

from bookswap.errors import RemoteStoreError
from bookswap.models.participant import Participant
from bookswap.persistence.roster_repository import RosterRepository, dump_roster, parse_roster

log = logging.getLogger(__name__)


class SheetRosterRepository(RosterRepository):
    """Roster kept in a spreadsheet behind a single web-app URL.

    GET returns the roster as a JSON array. POST takes one participant (upsert),
    an array (bulk replace) or ``{"action": "delete", "id": ...}``. Write
    responses are not inspected; only transport errors and HTTP error statuses
    count as failures.
    """

    def __init__(self, http: httpx.AsyncClient, url: str):
        self.http = http
        self.url = url

    async def _post(self, payload: Any) -> None:
        try:
            r = await self.http.post(self.url, json=payload)
            r.raise_for_status()
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"sheet endpoint write failed: {exc}") from exc

    async def list(self) -> list[Participant]:
        try:
            r = await self.http.get(self.url)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteStoreError(f"sheet endpoint read failed: {exc}") from exc
        if not isinstance(data, list):
            raise RemoteStoreError("sheet endpoint did not return a JSON array")
        try:
            return parse_roster(data)
        except ValidationError as exc:
            raise RemoteStoreError(f"sheet endpoint returned bad rows: {exc}") from exc

    async def upsert(self, participant: Participant) -> Participant:
        await self._post(participant.dump())
        return participant

    async def delete(self, participant_id: str) -> None:
        await self._post({"action": "delete", "id": participant_id})

    async def replace_all(self, participants: list[Participant]) -> None:
        await self._post(dump_roster(participants))

    async def clear(self) -> None:
        # an array POST only updates rows it finds, so rows are deleted one by one
        for participant in await self.list():
            await self.delete(participant.id)
