from fastapi import APIRouter, Depends, HTTPException

from bookswap.deps import get_registration
from bookswap.errors import BookNotFoundError, CatalogError, ValidationError
from bookswap.models.book import BookDetails
from bookswap.service.registration import RegistrationService

router = APIRouter(prefix="/api")


@router.get("/book", response_model=BookDetails)
async def lookup_book(
    isbn: str | None = None,
    registration: RegistrationService = Depends(get_registration),
) -> BookDetails:
    try:
        return await registration.lookup_book(isbn or "")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except BookNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
