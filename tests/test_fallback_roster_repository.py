from __future__ import annotations

import asyncio

import httpx

from bookswap.persistence.fallback_roster_repository import FallbackRosterRepository
from bookswap.persistence.roster_repository import FileRosterRepository
from bookswap.persistence.sheet_roster_repository import SheetRosterRepository

from conftest import FakeSheet, make_participant, mock_http

SHEET_URL = "https://sheet.example/exec"


def _down(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("down", request=request)


def _ids(roster):
    return [p.id for p in roster]


def test_without_remote_uses_local_only(roster_path):
    repo = FallbackRosterRepository(FileRosterRepository(roster_path))

    async def scenario():
        await repo.upsert(make_participant("1"))
        return await repo.list()

    assert _ids(asyncio.run(scenario())) == ["1"]


def test_remote_failure_degrades_to_local(roster_path):
    local = FileRosterRepository(roster_path)

    async def scenario():
        async with mock_http(_down) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            await repo.upsert(make_participant("1"))
            await repo.upsert(make_participant("2"))
            await repo.delete("1")
            return await repo.list()

    assert _ids(asyncio.run(scenario())) == ["2"]
    assert _ids(asyncio.run(local.list())) == ["2"]


def test_remote_read_wins_and_is_mirrored_locally(roster_path):
    local = FileRosterRepository(roster_path)
    asyncio.run(local.replace_all([make_participant("stale")]))
    sheet = FakeSheet(make_participant("1"), make_participant("2"))

    async def scenario():
        async with mock_http(sheet) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            return await repo.list()

    assert _ids(asyncio.run(scenario())) == ["1", "2"]
    assert _ids(asyncio.run(local.list())) == ["1", "2"]


def test_unsynced_upsert_survives_remote_read_and_is_replayed(roster_path):
    local = FileRosterRepository(roster_path)
    sheet = FakeSheet(make_participant("1"))
    sheet.down = True

    async def scenario():
        async with mock_http(sheet) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            await repo.upsert(make_participant("2"))
            while_down = await repo.list()
            sheet.down = False
            after_recovery = await repo.list()
            return while_down, after_recovery

    while_down, after_recovery = asyncio.run(scenario())
    assert _ids(while_down) == ["1", "2"]
    assert _ids(asyncio.run(local.list())) == ["1", "2"]
    assert _ids(after_recovery) == ["1", "2"]
    assert set(sheet.rows) == {"1", "2"}


def test_unsynced_delete_is_not_resurrected(roster_path):
    local = FileRosterRepository(roster_path)
    sheet = FakeSheet(make_participant("1"), make_participant("2"))

    async def scenario():
        async with mock_http(sheet) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            await repo.list()
            sheet.down = True
            await repo.delete("1")
            while_down = await repo.list()
            sheet.down = False
            return while_down, await repo.list()

    while_down, after_recovery = asyncio.run(scenario())
    assert _ids(while_down) == ["2"]
    assert _ids(after_recovery) == ["2"]
    assert set(sheet.rows) == {"2"}


def test_unsynced_bulk_write_keeps_local_roster(roster_path):
    local = FileRosterRepository(roster_path)
    sheet = FakeSheet(make_participant("1"), make_participant("2"))
    matched = [make_participant("1", assigned_book_id="2"), make_participant("2", assigned_book_id="1")]

    async def scenario():
        async with mock_http(sheet) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            sheet.down = True
            await repo.replace_all(matched)
            while_down = await repo.list()
            sheet.down = False
            return while_down, await repo.list()

    while_down, after_recovery = asyncio.run(scenario())
    assert [p.assigned_book_id for p in while_down] == ["2", "1"]
    assert [p.assigned_book_id for p in after_recovery] == ["2", "1"]
    assert sheet.rows["1"]["assignedBookId"] == "2"


def test_clear_empties_both_backends(roster_path):
    local = FileRosterRepository(roster_path)
    sheet = FakeSheet()

    async def scenario():
        async with mock_http(sheet) as http:
            repo = FallbackRosterRepository(local, SheetRosterRepository(http, SHEET_URL))
            await repo.upsert(make_participant("1"))
            await repo.upsert(make_participant("2"))
            await repo.clear()
            return await repo.list()

    assert asyncio.run(scenario()) == []
    assert sheet.rows == {}
    assert asyncio.run(local.list()) == []
