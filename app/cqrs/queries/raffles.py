from __future__ import annotations

from typing import Optional

from app.db.connection import fetch_all, fetch_one

OPEN_STATUSES = ("active", "live")


def list_open_raffles_with_draw_date() -> list[dict]:
    return fetch_all(
        """
        SELECT id, name, status, draw_date, tickets_sold, max_tickets
        FROM raffles
        WHERE status = ANY(%s) AND draw_date IS NOT NULL
        ORDER BY draw_date ASC
        """,
        (list(OPEN_STATUSES),),
    )


def list_chain_raffles(network: str) -> list[dict]:
    return fetch_all(
        """
        SELECT id, name, status, prize_description, ticket_price, contract_raffle_id,
               winner_address, created_at
        FROM raffles
        WHERE contract_raffle_id IS NOT NULL AND network = %s
        ORDER BY created_at DESC
        """,
        (network,),
    )


def get_raffle_for_sync(raffle_id: int) -> Optional[dict]:
    return fetch_one(
        """
        SELECT id, contract_raffle_id, network, ticket_price, created_at
        FROM raffles
        WHERE id = %s
        """,
        (raffle_id,),
    )
