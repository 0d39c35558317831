from __future__ import annotations

import json

import httpx
import pytest

from bookswap.errors import BookNotFoundError
from bookswap.models.book import BookDetails
from bookswap.models.participant import Participant
from bookswap.persistence.roster_repository import FileRosterRepository


def make_participant(pid: str, **fields) -> Participant:
    data = {
        "name": f"Person {pid}",
        "book_isbn": f"978000000{pid}",
        "book_title": f"Book {pid}",
        "book_authors": ["Some Author"],
        "wishlist": "mystery novels",
    }
    data.update(fields)
    return Participant(id=pid, **data)


def mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the roster repository."""

    def __init__(self):
        self.data: dict[str, bytes] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value.encode() if isinstance(value, str) else value

    async def delete(self, key):
        self.data.pop(key, None)


class FakeSheet:
    """In-memory spreadsheet web app, served through httpx.MockTransport.

    Array POSTs only touch group/assignment columns of rows that already
    exist, and ``down`` makes every POST fail to connect.
    """

    def __init__(self, *participants: Participant):
        self.rows: dict[str, dict] = {p.id: p.dump() for p in participants}
        self.down = False
        self.posts: list = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=list(self.rows.values()))
        if self.down:
            raise httpx.ConnectError("sheet down", request=request)
        body = json.loads(request.content)
        self.posts.append(body)
        if isinstance(body, list):
            for p in body:
                if p["id"] in self.rows:
                    for column in ("group", "assignedBookId", "assignedReason"):
                        self.rows[p["id"]][column] = p.get(column) or ""
        elif body.get("action") == "delete":
            self.rows.pop(body["id"], None)
        else:
            self.rows[body["id"]] = body
        return httpx.Response(200, json={"status": "success"})


class FakeAI:
    def __init__(self, response: str = "[]", error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str, api_key: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeCatalog:
    def __init__(self, books: dict[str, BookDetails] | None = None):
        self.books = books or {}
        self.lookups: list[str] = []

    async def lookup(self, isbn: str) -> BookDetails:
        self.lookups.append(isbn)
        if isbn not in self.books:
            raise BookNotFoundError("Book not found")
        return self.books[isbn]


class SpyRoster(FileRosterRepository):
    def __init__(self, path):
        super().__init__(path)
        self.upserts: list[Participant] = []
        self.replaced = 0

    async def upsert(self, participant):
        self.upserts.append(participant)
        return await super().upsert(participant)

    async def replace_all(self, participants):
        self.replaced += 1
        await super().replace_all(participants)


@pytest.fixture()
def roster_path(tmp_path):
    return tmp_path / "participants.json"


@pytest.fixture()
def spy_roster(roster_path):
    return SpyRoster(roster_path)
