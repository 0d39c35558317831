from __future__ import annotations

from typing import Optional
import logging

from bookswap.errors import RemoteStoreError
from bookswap.models.participant import Participant
from bookswap.persistence.roster_repository import RosterRepository

log = logging.getLogger(__name__)


class FallbackRosterRepository(RosterRepository):
    """Remote store first, local store as the fallback and write-through mirror.

    - Writes hit ``local`` first, then ``remote``. Remote failures are logged
      and remembered as pending, never raised.
    - Reads replay pending writes, then read ``remote`` and copy the result
      into ``local``. Writes that still have not reached ``remote`` are laid
      over the remote roster, so a record written here is never lost to an
      older remote copy. A RemoteStoreError on read degrades to ``local``.
    """

    def __init__(self, local: RosterRepository, remote: Optional[RosterRepository] = None):
        self.local = local
        self.remote = remote
        # writes that have not reached the remote yet
        self._dirty: set[str] = set()
        self._deleted: set[str] = set()
        self._bulk_pending = False

    def _has_pending(self) -> bool:
        return bool(self._dirty or self._deleted or self._bulk_pending)

    async def _replay(self, local_roster: list[Participant]) -> None:
        if self._bulk_pending:
            if local_roster:
                await self.remote.replace_all(local_roster)
            else:
                await self.remote.clear()
            self._bulk_pending = False
        by_id = {p.id: p for p in local_roster}
        for pid in sorted(self._dirty):
            if pid in by_id:
                await self.remote.upsert(by_id[pid])
            self._dirty.discard(pid)
        for pid in sorted(self._deleted):
            await self.remote.delete(pid)
            self._deleted.discard(pid)

    def _overlay(self, remote_roster: list[Participant], local_roster: list[Participant]) -> list[Participant]:
        local_by_id = {p.id: p for p in local_roster}
        merged = []
        for p in remote_roster:
            if p.id in self._deleted:
                continue
            merged.append(local_by_id[p.id] if p.id in self._dirty and p.id in local_by_id else p)
        seen = {p.id for p in merged}
        merged.extend(p for p in local_roster if p.id in self._dirty and p.id not in seen)
        return merged

    async def list(self) -> list[Participant]:
        if self.remote is None:
            return await self.local.list()

        if self._has_pending():
            try:
                await self._replay(await self.local.list())
            except RemoteStoreError as exc:
                log.warning("could not replay pending writes to remote roster: %s", exc)

        try:
            roster = await self.remote.list()
        except RemoteStoreError as exc:
            log.warning("remote roster unavailable, reading local copy: %s", exc)
            return await self.local.list()

        if self._has_pending():
            local_roster = await self.local.list()
            if self._bulk_pending:
                # a whole-roster write is still unsynced; local wins outright
                return local_roster
            roster = self._overlay(roster, local_roster)
        await self.local.replace_all(roster)
        return roster

    async def upsert(self, participant: Participant) -> Participant:
        await self.local.upsert(participant)
        self._deleted.discard(participant.id)
        if self.remote is not None:
            try:
                await self.remote.upsert(participant)
            except RemoteStoreError as exc:
                self._dirty.add(participant.id)
                log.warning("remote upsert of %s failed, kept locally: %s", participant.id, exc)
            else:
                self._dirty.discard(participant.id)
        return participant

    async def delete(self, participant_id: str) -> None:
        await self.local.delete(participant_id)
        self._dirty.discard(participant_id)
        if self.remote is not None:
            try:
                await self.remote.delete(participant_id)
            except RemoteStoreError as exc:
                self._deleted.add(participant_id)
                log.warning("remote delete of %s failed: %s", participant_id, exc)
            else:
                self._deleted.discard(participant_id)

    async def replace_all(self, participants: list[Participant]) -> None:
        await self.local.replace_all(participants)
        if self.remote is not None:
            try:
                await self.remote.replace_all(participants)
            except RemoteStoreError as exc:
                self._bulk_pending = True
                log.warning("remote bulk write failed, kept locally: %s", exc)
            else:
                self._bulk_pending = False

    async def clear(self) -> None:
        await self.local.clear()
        if self.remote is not None:
            try:
                await self.remote.clear()
            except RemoteStoreError as exc:
                self._bulk_pending = True
                self._dirty.clear()
                self._deleted.clear()
                log.warning("remote clear failed: %s", exc)
            else:
                self._bulk_pending = False
                self._dirty.clear()
                self._deleted.clear()
