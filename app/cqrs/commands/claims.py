from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException

from app.db.connection import fetch_one

logger = logging.getLogger("chainraffle.claims")

CLAIM_SUBMITTED_MESSAGE = "Claim request submitted! Admin will contact you soon."


def submit_claim(raffle_id: int, user_id: str, delivery_info: str) -> dict:
    """Insert one pending claim; ``delivery_info`` is already trimmed and non-empty."""
    try:
        row = fetch_one(
            """
            INSERT INTO prize_claims (raffle_id, user_id, delivery_info, status)
            VALUES (%s, %s, %s, %s)
            RETURNING id, raffle_id, user_id, delivery_info, status, created_at
            """,
            (raffle_id, uuid.UUID(user_id), delivery_info, "pending"),
        )
    except Exception as exc:
        logger.error("Error submitting claim for raffle %s: %s", raffle_id, exc)
        raise HTTPException(
            status_code=500, detail=str(exc) or "Failed to submit claim request"
        ) from exc
    if row is None:
        raise HTTPException(status_code=500, detail="Failed to submit claim request")
    logger.info("Claim %s submitted for raffle %s", row["id"], raffle_id)
    return {
        "message": CLAIM_SUBMITTED_MESSAGE,
        "claim": {
            "id": str(row["id"]),
            "raffle_id": row["raffle_id"],
            "user_id": str(row["user_id"]),
            "delivery_info": row["delivery_info"],
            "status": row["status"],
            "created_at": row["created_at"],
        },
    }
