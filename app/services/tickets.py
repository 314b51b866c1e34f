from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Callable

from app.contracts.client import RaffleContract, connect
from app.core.networks import NetworkConfig
from app.core.session import WalletSession
from app.cqrs.queries import raffles as raffles_queries
from app.cqrs.queries import tickets as tickets_queries

logger = logging.getLogger("chainraffle.tickets")

EMPTY_WALLET_MESSAGE = "No tickets found for this wallet"
EMPTY_ACCOUNT_MESSAGE = "You haven't purchased any tickets yet"


def _raffle_summary(row: dict) -> dict:
    return {
        "id": row["raffle_id"],
        "name": row["raffle_name"],
        "status": row.get("raffle_status") or "active",
        "prize_description": row["raffle_prize_description"],
        "contract_raffle_id": row.get("raffle_contract_raffle_id"),
        "winner_address": row.get("raffle_winner_address"),
    }


def _ticket_card(row: dict, session: WalletSession) -> dict:
    tx_hash = row.get("tx_hash") or None
    return {
        "id": str(row["id"]),
        "ticket_number": row["ticket_number"],
        "quantity": row["quantity"],
        "purchase_price": row["purchase_price"],
        "purchased_at": row["purchased_at"],
        "tx_hash": tx_hash,
        "tx_url": session.tx_url(tx_hash) if tx_hash else None,
        "source": row.get("source", "database"),
        "raffle": _raffle_summary(row),
    }


def group_by_raffle(cards: list[dict], session: WalletSession) -> list[dict]:
    groups: dict[int, dict] = {}
    for card in cards:
        raffle = card["raffle"]
        group = groups.setdefault(
            raffle["id"],
            {
                "raffle": raffle,
                "ticket_ids": [],
                "total_tickets": 0,
                "total_spent": Decimal(0),
                "is_winner": raffle["status"] == "completed"
                and session.owns(raffle.get("winner_address")),
            },
        )
        group["ticket_ids"].append(card["id"])
        group["total_tickets"] += card["quantity"]
        group["total_spent"] += Decimal(card["purchase_price"]) * card["quantity"]
    # active raffles first, otherwise keep the most-recent-purchase order
    return sorted(groups.values(), key=lambda group: group["raffle"]["status"] != "active")


def build_ticket_list(user_id: uuid.UUID, rows: list[dict], session: WalletSession) -> dict:
    cards = [_ticket_card(row, session) for row in rows]
    empty = not cards
    message = None
    if empty:
        message = EMPTY_WALLET_MESSAGE if session.connected else EMPTY_ACCOUNT_MESSAGE
    return {
        "user_id": str(user_id),
        "empty": empty,
        "message": message,
        "tickets": cards,
        "groups": group_by_raffle(cards, session),
    }


def _entries_reader(network: NetworkConfig) -> Callable[[int, str], list[int]]:
    return RaffleContract(connect(network), network).user_entries


def _chain_ticket_rows(raffle: dict, entries: list[int], account: str) -> list[dict]:
    return [
        {
            "id": f"blockchain-{raffle['id']}-{entry}",
            "ticket_number": entry,
            "quantity": 1,
            "purchase_price": raffle["ticket_price"],
            "purchased_at": raffle["created_at"],
            "tx_hash": "",
            "wallet_address": account,
            "source": "chain",
            "raffle_id": raffle["id"],
            "raffle_name": raffle["name"],
            "raffle_status": raffle.get("status"),
            "raffle_prize_description": raffle["prize_description"],
            "raffle_contract_raffle_id": raffle["contract_raffle_id"],
            "raffle_winner_address": raffle.get("winner_address"),
        }
        for entry in entries
    ]


def list_chain_tickets(session: WalletSession) -> list[dict]:
    """Build ticket rows from the contract's entry lists for the connected wallet.

    Used when the database has no purchases recorded for the user yet, e.g. before
    an admin ran the ticket sync for a raffle.
    """
    network = session.network
    if not session.connected or network is None or not network.raffle_deployed:
        return []
    raffles = raffles_queries.list_chain_raffles(network.key)
    if not raffles:
        return []
    read_entries = _entries_reader(network)
    rows: list[dict] = []
    for raffle in raffles:
        entries = read_entries(raffle["contract_raffle_id"], session.account)
        rows.extend(_chain_ticket_rows(raffle, entries, session.account))
    return rows


def list_user_tickets(user_id: uuid.UUID, session: WalletSession) -> dict:
    try:
        rows = tickets_queries.list_user_tickets(user_id)
    except Exception:
        logger.exception("Error fetching tickets for user %s", user_id)
        raise
    if not rows and session.connected:
        try:
            rows = list_chain_tickets(session)
        except Exception:
            logger.exception("Error fetching on-chain tickets for wallet %s", session.account)
            rows = []
    return build_ticket_list(user_id, rows, session)
