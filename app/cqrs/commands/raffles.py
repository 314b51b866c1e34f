from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from app.db.connection import row_to_dict, run_transaction
from app.models.schemas import RaffleCreateRequest, RaffleStatus, WinnerUpdateRequest

logger = logging.getLogger("chainraffle.raffles")

RAFFLE_COLUMNS = """
    id, name, description, detailed_description, rules, prize_description,
    ticket_price, max_tickets, tickets_sold, nft_collection_address,
    contract_raffle_id, network, image_url, gallery_images, status, draw_date,
    winner_address, draw_tx_hash, completed_at, created_at
"""


class RaffleNotFoundError(LookupError):
    def __init__(self, raffle_id: int):
        super().__init__(f"No raffle found with id {raffle_id}")
        self.raffle_id = raffle_id


def record_winner(payload: WinnerUpdateRequest, completed_at: Optional[datetime] = None) -> dict:
    completed_at = completed_at or datetime.now(timezone.utc)
    status = payload.status.value if payload.status else None

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            "SELECT status FROM raffles WHERE id = %s FOR UPDATE",
            (payload.raffle_id,),
        )
        current = cur.fetchone()
        if current is None:
            cur.close()
            raise RaffleNotFoundError(payload.raffle_id)
        if current[0] == RaffleStatus.completed.value:
            logger.warning(
                "Raffle %s is already completed; overwriting winner data", payload.raffle_id
            )
        cur.execute(
            f"""
            UPDATE raffles
            SET winner_address = %s,
                draw_tx_hash = %s,
                completed_at = %s,
                status = COALESCE(%s, status)
            WHERE id = %s
            RETURNING {RAFFLE_COLUMNS}
            """,
            (
                payload.winner_address,
                payload.draw_tx_hash,
                completed_at,
                status,
                payload.raffle_id,
            ),
        )
        row = row_to_dict(cur, cur.fetchone())
        cur.close()
        return row

    return run_transaction(_handler)


def create_raffle(payload: RaffleCreateRequest) -> dict:
    data = payload.raffle_data
    gallery = [str(url) for url in data.gallery_images] if data.gallery_images else None

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            f"""
            INSERT INTO raffles (
                name, description, prize_description, ticket_price, max_tickets,
                nft_collection_address, draw_date, image_url, detailed_description,
                rules, gallery_images, contract_raffle_id, status
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {RAFFLE_COLUMNS}
            """,
            (
                data.name,
                data.description,
                data.prize_description,
                data.ticket_price,
                data.max_tickets,
                data.nft_collection_address,
                data.draw_date,
                str(data.image_url) if data.image_url else None,
                data.detailed_description,
                data.rules,
                gallery,
                payload.contract_raffle_id,
                RaffleStatus.active.value,
            ),
        )
        row = row_to_dict(cur, cur.fetchone())
        cur.close()
        return row

    return run_transaction(_handler)


def mark_refunding(raffle_ids: list[int]) -> list[dict]:
    if not raffle_ids:
        return []

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            f"""
            UPDATE raffles
            SET status = %s
            WHERE id = ANY(%s)
            RETURNING {RAFFLE_COLUMNS}
            """,
            (RaffleStatus.refunding.value, raffle_ids),
        )
        rows = [row_to_dict(cur, row) for row in cur.fetchall()]
        cur.close()
        return rows

    return run_transaction(_handler)
