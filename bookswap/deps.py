from __future__ import annotations
from fastapi import Request

from bookswap.persistence.roster_repository import RosterRepository
from bookswap.service.matching import MatchingService
from bookswap.service.registration import RegistrationService

def get_roster_repo(req: Request) -> RosterRepository:
    return req.app.state.roster_repo

def get_registration(req: Request) -> RegistrationService:
    return req.app.state.registration

def get_matching(req: Request) -> MatchingService:
    return req.app.state.matching
