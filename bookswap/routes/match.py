from fastapi import APIRouter, Depends, HTTPException

from bookswap.deps import get_matching, get_roster_repo
from bookswap.errors import (
    AIServiceError,
    InvalidAssignmentError,
    MissingCredentialError,
    NotEnoughParticipantsError,
)
from bookswap.models.matching import MatchOutcome, Pair
from bookswap.models.rest import MatchRequest
from bookswap.persistence.roster_repository import RosterRepository
from bookswap.service.matching import MatchingService
from bookswap.service.results import build_pairs

router = APIRouter(prefix="/api")


@router.post("/match", response_model=MatchOutcome)
async def run_matching(
    body: MatchRequest | None = None,
    matching: MatchingService = Depends(get_matching),
) -> MatchOutcome:
    body = body or MatchRequest()
    try:
        return await matching.run(grouped=body.grouped, api_key=body.api_key)
    except MissingCredentialError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except NotEnoughParticipantsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except InvalidAssignmentError as exc:
        raise HTTPException(status_code=502, detail={
            "error": str(exc),
            "violations": [v.dump() for v in exc.violations],
        })
    except AIServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.get("/match", response_model=list[Pair])
async def match_results(
    roster_repo: RosterRepository = Depends(get_roster_repo),
) -> list[Pair]:
    return build_pairs(await roster_repo.list())
