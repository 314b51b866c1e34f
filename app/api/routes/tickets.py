import uuid

from fastapi import APIRouter, Depends

from app.api.dependencies import require_db, require_self, wallet_session
from app.core.session import WalletSession
from app.models.schemas import TicketListResponse
from app.services import tickets
from app.services.auth import AuthUser

router = APIRouter(prefix="/v2/users", tags=["tickets"])


@router.get("/{user_id}/tickets", response_model=TicketListResponse)
def list_user_tickets(
    user_id: uuid.UUID,
    _: AuthUser = Depends(require_self),
    session: WalletSession = Depends(wallet_session),
):
    require_db()
    return tickets.list_user_tickets(user_id, session)
