from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from app.db.connection import run_transaction

logger = logging.getLogger("chainraffle.tickets")


def record_ticket_sync(raffle_id: int, tickets_sold: int, purchases: Iterable[dict]) -> int:
    """Store the on-chain sold count and any purchases not yet in ``tickets``.

    Each purchase dict carries ``user_id``, ``wallet_address``, ``ticket_number``,
    ``quantity``, ``purchase_price``, ``tx_hash`` and ``purchased_at``. A pending
    refund row is opened per wallet that has none for this raffle. Returns the
    number of ticket rows created.
    """
    purchases = list(purchases)

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            "UPDATE raffles SET tickets_sold = %s WHERE id = %s",
            (tickets_sold, raffle_id),
        )

        created = 0
        for purchase in purchases:
            cur.execute(
                """
                SELECT 1 FROM tickets
                WHERE raffle_id = %s AND ticket_number = %s AND tx_hash = %s
                """,
                (raffle_id, purchase["ticket_number"], purchase["tx_hash"]),
            )
            if cur.fetchone() is not None:
                continue
            cur.execute(
                """
                INSERT INTO tickets (
                    user_id, wallet_address, raffle_id, ticket_number, tx_hash,
                    purchase_price, quantity, purchased_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    purchase["user_id"],
                    purchase["wallet_address"],
                    raffle_id,
                    purchase["ticket_number"],
                    purchase["tx_hash"],
                    purchase["purchase_price"],
                    purchase["quantity"],
                    purchase["purchased_at"],
                ),
            )
            created += 1

        refunds: dict[str, dict] = {}
        for purchase in purchases:
            refund = refunds.setdefault(
                purchase["wallet_address"],
                {"user_id": purchase["user_id"], "amount": Decimal(0)},
            )
            refund["amount"] += Decimal(purchase["purchase_price"]) * purchase["quantity"]

        if refunds:
            cur.execute("SELECT wallet_address FROM refunds WHERE raffle_id = %s", (raffle_id,))
            existing = {row[0] for row in cur.fetchall()}
            for wallet, refund in refunds.items():
                if wallet in existing:
                    continue
                cur.execute(
                    """
                    INSERT INTO refunds (raffle_id, user_id, wallet_address, amount, status)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (raffle_id, refund["user_id"], wallet, refund["amount"], "pending"),
                )
            logger.info(
                "Raffle %s: %d refund record(s) opened",
                raffle_id,
                len([wallet for wallet in refunds if wallet not in existing]),
            )
        cur.close()
        return created

    return run_transaction(_handler)
