from __future__ import annotations

import uuid

from app.db.connection import fetch_all


def list_user_tickets(user_id: uuid.UUID) -> list[dict]:
    return fetch_all(
        """
        SELECT t.id, t.raffle_id, t.ticket_number, t.quantity, t.purchase_price,
               t.purchased_at, t.tx_hash, t.wallet_address,
               r.name AS raffle_name, r.status AS raffle_status,
               r.prize_description AS raffle_prize_description,
               r.contract_raffle_id AS raffle_contract_raffle_id,
               r.winner_address AS raffle_winner_address
        FROM tickets t
        JOIN raffles r ON r.id = t.raffle_id
        WHERE t.user_id = %s
        ORDER BY t.purchased_at DESC
        """,
        (user_id,),
    )
