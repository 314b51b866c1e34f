from __future__ import annotations

from app.db.connection import fetch_one

ADMIN_ROLE = "admin"


def has_role(user_id: str, role: str) -> bool:
    row = fetch_one(
        "SELECT has_role(%s::uuid, %s::app_role) AS has_role",
        (user_id, role),
    )
    return bool(row and row["has_role"])
