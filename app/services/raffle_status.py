from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from app.cqrs.commands import raffles as raffles_commands
from app.cqrs.queries import raffles as raffles_queries
from app.models.schemas import RaffleStatusCheckRequest

logger = logging.getLogger("chainraffle.raffle_status")


def sold_percentage(raffle: dict) -> float:
    max_tickets = raffle.get("max_tickets") or 0
    if max_tickets <= 0:
        return 0.0
    return (raffle.get("tickets_sold") or 0) / max_tickets * 100


def raffles_needing_refund(
    raffles: Iterable[dict], now: datetime, threshold_percent: float = 99.0
) -> list[int]:
    """Raffles past their draw date that did not sell enough tickets."""
    selected: list[int] = []
    for raffle in raffles:
        draw_date = raffle.get("draw_date")
        if draw_date is None or draw_date >= now:
            continue
        if sold_percentage(raffle) < threshold_percent:
            selected.append(raffle["id"])
    return selected


def check_raffle_status(
    payload: RaffleStatusCheckRequest, now: Optional[datetime] = None
) -> dict:
    now = now or datetime.now(timezone.utc)
    candidates = raffles_queries.list_open_raffles_with_draw_date()
    if not candidates:
        return {"message": "No active raffles to check", "raffleIds": [], "updatedRaffles": []}

    raffle_ids = raffles_needing_refund(candidates, now, payload.threshold_percent)
    if not raffle_ids:
        return {
            "message": "No raffles require refunding at this time",
            "raffleIds": [],
            "updatedRaffles": [],
        }

    updated = raffles_commands.mark_refunding(raffle_ids)
    logger.info("Marked %d raffle(s) for refunding: %s", len(raffle_ids), raffle_ids)
    return {
        "message": f"Marked {len(raffle_ids)} raffle(s) for refunding",
        "raffleIds": raffle_ids,
        "updatedRaffles": updated,
    }
