from fastapi import APIRouter, Depends, HTTPException, Response

from bookswap.deps import get_registration, get_roster_repo
from bookswap.errors import DuplicateParticipantError, ParticipantNotFoundError, ValidationError
from bookswap.models.participant import Participant
from bookswap.models.rest import RegistrationRequest
from bookswap.persistence.roster_repository import RosterRepository
from bookswap.service.registration import RegistrationService

router = APIRouter(prefix="/api")


@router.get("/participants", response_model=list[Participant])
async def list_participants(
    roster_repo: RosterRepository = Depends(get_roster_repo),
) -> list[Participant]:
    return await roster_repo.list()


@router.post("/participants", response_model=Participant, status_code=201)
async def register_participant(
    body: RegistrationRequest,
    registration: RegistrationService = Depends(get_registration),
) -> Participant:
    try:
        return await registration.register(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except DuplicateParticipantError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.put("/participants/{participant_id}", response_model=Participant)
async def check_in_participant(
    participant_id: str,
    body: RegistrationRequest,
    registration: RegistrationService = Depends(get_registration),
) -> Participant:
    try:
        return await registration.check_in(participant_id, body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ParticipantNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.delete("/participants/{participant_id}", status_code=204)
async def delete_participant(
    participant_id: str,
    registration: RegistrationService = Depends(get_registration),
) -> Response:
    await registration.remove(participant_id)
    return Response(status_code=204)


@router.delete("/participants", status_code=204)
async def clear_participants(
    registration: RegistrationService = Depends(get_registration),
) -> Response:
    await registration.reset()
    return Response(status_code=204)
