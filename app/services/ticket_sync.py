"""Backfill ``tickets`` from the raffle contract's ``TicketPurchased`` events."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional

from web3 import Web3

from app.contracts.client import RaffleContract, connect
from app.core.networks import NetworkConfig, find_network
from app.cqrs.commands import tickets as tickets_commands
from app.cqrs.queries import raffles as raffles_queries
from app.models.schemas import TicketSyncRequest

logger = logging.getLogger("chainraffle.sync")

AVERAGE_BLOCK_SECONDS = 12
MIN_SCAN_BLOCKS = 10_000
SCAN_CHUNK_BLOCKS = 2_000


def wallet_user_id(wallet_address: str) -> uuid.UUID:
    """Deterministic user id for buyers that never signed in: keccak of the address."""
    digest = Web3.to_hex(Web3.keccak(text=wallet_address.lower()))[2:]
    return uuid.UUID(hex=digest[:32])


def scan_start_block(created_at: datetime, current_block: int, now: datetime) -> int:
    elapsed = max((now - created_at).total_seconds(), 0)
    estimated = math.ceil(elapsed / AVERAGE_BLOCK_SECONDS)
    # scan a fifth past the estimate, never fewer than MIN_SCAN_BLOCKS
    blocks = max(estimated * 6 // 5, MIN_SCAN_BLOCKS)
    return max(0, current_block - blocks)


def block_chunks(from_block: int, to_block: int, size: int = SCAN_CHUNK_BLOCKS) -> Iterator[tuple[int, int]]:
    for start in range(from_block, to_block + 1, size):
        yield start, min(start + size - 1, to_block)


def _raffle_contract(network: NetworkConfig) -> RaffleContract:
    return RaffleContract(connect(network), network)


def _scan_events(contract: RaffleContract, contract_raffle_id: int, from_block: int, to_block: int) -> list:
    events = []
    for start, end in block_chunks(from_block, to_block):
        try:
            events.extend(contract.ticket_purchases(contract_raffle_id, start, end))
        except Exception as exc:
            # provider range limits; skip the chunk and keep scanning
            logger.warning("Failed to scan blocks %d-%d: %s", start, end, exc)
    return sorted(events, key=lambda event: (event["blockNumber"], event["logIndex"]))


def purchases_from_events(events: list, ticket_price: Decimal, block_time) -> list[dict]:
    """Turn purchase events into ticket rows numbered in chain order."""
    purchases = []
    next_number = 1
    for event in events:
        buyer = event["args"]["buyer"]
        quantity = int(event["args"]["quantity"])
        purchases.append(
            {
                "user_id": wallet_user_id(buyer),
                "wallet_address": buyer,
                "ticket_number": next_number,
                "quantity": quantity,
                "purchase_price": ticket_price,
                "tx_hash": Web3.to_hex(event["transactionHash"]),
                "purchased_at": block_time(event["blockNumber"]),
            }
        )
        next_number += quantity
    return purchases


def sync_raffle_tickets(payload: TicketSyncRequest, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    raffle = raffles_queries.get_raffle_for_sync(payload.raffle_id)
    if raffle is None:
        raise LookupError(f"Raffle not found: {payload.raffle_id}")
    contract_raffle_id = raffle.get("contract_raffle_id")
    if contract_raffle_id is None:
        raise ValueError("Raffle does not have a contract raffle ID")
    network = find_network(raffle.get("network") or "mainnet")
    contract = _raffle_contract(network)

    tickets_sold = contract.raffle_info(contract_raffle_id).tickets_sold
    logger.info("Raffle %s: contract reports %d tickets sold", payload.raffle_id, tickets_sold)

    purchases: list[dict] = []
    event_scan_error = None
    try:
        current_block = contract.w3.eth.block_number
        from_block = scan_start_block(raffle["created_at"], current_block, now)
        events = _scan_events(contract, contract_raffle_id, from_block, current_block)
        timestamps: dict[int, datetime] = {}

        def block_time(number: int) -> datetime:
            if number not in timestamps:
                block = contract.w3.eth.get_block(number)
                timestamps[number] = datetime.fromtimestamp(block["timestamp"], tz=timezone.utc)
            return timestamps[number]

        purchases = purchases_from_events(events, Decimal(raffle["ticket_price"]), block_time)
    except Exception as exc:
        logger.error("Failed to scan purchase events for raffle %s: %s", payload.raffle_id, exc)
        event_scan_error = str(exc) or exc.__class__.__name__

    created = tickets_commands.record_ticket_sync(payload.raffle_id, tickets_sold, purchases)

    if event_scan_error:
        message = (
            f"Synced {tickets_sold} tickets from blockchain. Note: Could not scan individual "
            f"purchase events - {event_scan_error}. Ticket count updated but detailed records "
            "not created."
        )
    else:
        message = (
            f"Synced {tickets_sold} tickets from blockchain ({created} new records created). "
            "Refund records initialized and ready for processing."
        )
    return {
        "raffleId": payload.raffle_id,
        "ticketsSold": tickets_sold,
        "ticketRecordsCreated": created,
        "eventScanError": event_scan_error,
        "message": message,
    }
