from __future__ import annotations

from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import from_url

from bookswap.persistence.fallback_roster_repository import FallbackRosterRepository
from bookswap.persistence.redis_roster_repository import RedisRosterRepository
from bookswap.persistence.roster_repository import FileRosterRepository, RosterRepository
from bookswap.persistence.sheet_roster_repository import SheetRosterRepository
from bookswap.routes.book import router as book_router
from bookswap.routes.match import router as match_router
from bookswap.routes.participants import router as participants_router
from bookswap.service.ai_client import GeminiClient
from bookswap.service.book_catalog import BookCatalog
from bookswap.service.matching import MatchingService
from bookswap.service.registration import RegistrationService
from bookswap.settings import AppSettings, configure_logging, settings

log = logging.getLogger(__name__)


def build_roster_repo(app_settings: AppSettings, http: httpx.AsyncClient, redis=None) -> RosterRepository:
    if redis is not None:
        local: RosterRepository = RedisRosterRepository(redis, app_settings.storage_key)
    else:
        local = FileRosterRepository(app_settings.data_file)
    remote = SheetRosterRepository(http, app_settings.sheet_url) if app_settings.sheet_url else None
    return FallbackRosterRepository(local, remote)


def create_app(app_settings: AppSettings | None = None) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(app_settings.log_level)

        # Initialize shared resources
        http = httpx.AsyncClient(follow_redirects=True)
        redis = from_url(app_settings.redis_url) if app_settings.store_backend == "redis" else None
        roster_repo = build_roster_repo(app_settings, http, redis)
        catalog = BookCatalog(http, app_settings.books_api_url)
        ai = GeminiClient(http, app_settings.gemini_api_url, app_settings.gemini_model, app_settings.google_api_key)

        # Expose via app.state for dependency access
        app.state.http = http
        app.state.redis = redis
        app.state.roster_repo = roster_repo
        app.state.registration = RegistrationService(roster_repo, catalog)
        app.state.matching = MatchingService(roster_repo, ai, strict=app_settings.strict_matching)

        log.info("roster store: %s%s", app_settings.store_backend,
                 " + sheet endpoint" if app_settings.sheet_url else "")
        try:
            yield # App runs here
        finally:
            await http.aclose()
            if redis is not None:
                await redis.aclose()

    app = FastAPI(title="Book Swap Backend",
                  version="0.1.0",
                  lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=app_settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(book_router)
    app.include_router(participants_router)
    app.include_router(match_router)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    return app


app = create_app()
