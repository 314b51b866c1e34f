from fastapi import APIRouter, Depends, Path

from app.api.dependencies import current_user, require_db
from app.cqrs.commands import claims
from app.models.schemas import ClaimCreate, ClaimResponse
from app.services.auth import AuthUser

router = APIRouter(prefix="/v2/raffles", tags=["claims"])


@router.post("/{raffle_id}/claims", response_model=ClaimResponse, status_code=201)
def submit_claim(
    payload: ClaimCreate,
    raffle_id: int = Path(..., gt=0),
    user: AuthUser = Depends(current_user),
):
    require_db()
    return claims.submit_claim(raffle_id, user.id, payload.delivery_info)
