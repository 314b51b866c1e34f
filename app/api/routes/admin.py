from typing import Callable, Optional, Type

from fastapi import APIRouter, Header, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.config import db_configured
from app.cqrs.commands import raffles as raffles_commands
from app.cqrs.queries import roles
from app.models.schemas import (
    RaffleCreateRequest,
    RaffleStatusCheckRequest,
    TicketSyncRequest,
    WinnerUpdateRequest,
)
from app.services import admin_gate, auth, raffle_status, ticket_sync

router = APIRouter(prefix="/v2/admin/raffles", tags=["admin"])


def _preflight() -> Response:
    return Response(status_code=200, headers=admin_gate.CORS_HEADERS)


def _respond(outcome) -> JSONResponse:
    if isinstance(outcome, admin_gate.Rejected):
        status_code, body = outcome.status_code, outcome.body()
    else:
        status_code, body = outcome.status_code, outcome.body
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=admin_gate.CORS_HEADERS,
    )


async def _run(
    request: Request,
    authorization: Optional[str],
    schema: Type,
    action: Callable[..., dict],
    failure_message: str,
) -> JSONResponse:
    raw_body = await request.body()
    outcome = await run_in_threadpool(
        admin_gate.run_admin_pipeline,
        authorization,
        raw_body,
        schema=schema,
        action=action,
        failure_message=failure_message,
        resolve_user=auth.resolve_user,
        has_role=roles.has_role,
        db_ready=db_configured,
    )
    return _respond(outcome)


def _record_winner(payload: WinnerUpdateRequest) -> dict:
    return {"raffle": raffles_commands.record_winner(payload)}


def _create_raffle(payload: RaffleCreateRequest) -> dict:
    return {"raffle": raffles_commands.create_raffle(payload)}


@router.options("/winner", include_in_schema=False)
def winner_preflight():
    return _preflight()


@router.post("/winner")
async def update_raffle_winner(request: Request, authorization: Optional[str] = Header(None)):
    return await _run(
        request, authorization, WinnerUpdateRequest, _record_winner, "Failed to update raffle"
    )


@router.options("", include_in_schema=False)
def create_preflight():
    return _preflight()


@router.post("")
async def create_raffle(request: Request, authorization: Optional[str] = Header(None)):
    return await _run(
        request, authorization, RaffleCreateRequest, _create_raffle, "Failed to create raffle"
    )


@router.options("/status-check", include_in_schema=False)
def status_check_preflight():
    return _preflight()


@router.post("/status-check")
async def check_raffle_status(request: Request, authorization: Optional[str] = Header(None)):
    return await _run(
        request,
        authorization,
        RaffleStatusCheckRequest,
        raffle_status.check_raffle_status,
        "Failed to check raffle status",
    )


@router.options("/sync-tickets", include_in_schema=False)
def sync_tickets_preflight():
    return _preflight()


@router.post("/sync-tickets")
async def sync_raffle_tickets(request: Request, authorization: Optional[str] = Header(None)):
    return await _run(
        request,
        authorization,
        TicketSyncRequest,
        ticket_sync.sync_raffle_tickets,
        "Failed to sync raffle tickets",
    )
