from __future__ import annotations

import uuid
from decimal import Decimal

from app.db.connection import fetch_all, fetch_one


def list_tiers() -> list[dict]:
    return fetch_all(
        """
        SELECT tier_name, tier_level, required_points, icon, benefits
        FROM referral_tiers
        ORDER BY required_points ASC
        """
    )


def total_points(user_id: uuid.UUID) -> Decimal:
    row = fetch_one(
        """
        SELECT COALESCE(SUM(points_earned), 0) AS total_points
        FROM referral_points
        WHERE user_id = %s
        """,
        (user_id,),
    )
    if not row:
        return Decimal(0)
    return Decimal(row["total_points"])
