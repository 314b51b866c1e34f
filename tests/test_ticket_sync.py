from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

import app.cqrs.commands.tickets as tickets_commands
import app.cqrs.queries.raffles as raffles_queries
import app.cqrs.queries.roles as roles
from app.models.schemas import TicketSyncRequest
from app.services import ticket_sync

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)
BUYER_A = "0x" + "Aa" * 20
BUYER_B = "0x" + "bB" * 20
RAFFLE = {
    "id": 9,
    "contract_raffle_id": 2,
    "network": "sepolia",
    "ticket_price": Decimal("5"),
    "created_at": NOW - timedelta(days=1),
}


def _event(buyer, quantity, block, log_index=0, tx_byte="aa"):
    return {
        "args": {"raffleId": 2, "buyer": buyer, "quantity": quantity},
        "transactionHash": bytes.fromhex(tx_byte * 32),
        "blockNumber": block,
        "logIndex": log_index,
    }


class FakeEth:
    def __init__(self, block_number=50_000, fail=None):
        self._block_number = block_number
        self.fail = fail

    @property
    def block_number(self):
        if self.fail:
            raise self.fail
        return self._block_number

    def get_block(self, number):
        return {"timestamp": int(NOW.timestamp()) - (50_000 - number) * 12}


class FakeContract:
    def __init__(self, events, tickets_sold=3, failing_chunks=(), eth=None):
        self.events = events
        self.tickets_sold = tickets_sold
        self.failing_chunks = set(failing_chunks)
        self.scanned = []
        self.w3 = SimpleNamespace(eth=eth or FakeEth())

    def raffle_info(self, raffle_id):
        assert raffle_id == 2
        return SimpleNamespace(tickets_sold=self.tickets_sold)

    def ticket_purchases(self, raffle_id, from_block, to_block):
        self.scanned.append((from_block, to_block))
        if from_block in self.failing_chunks:
            raise ValueError("query returned more than 10000 results")
        return [event for event in self.events if from_block <= event["blockNumber"] <= to_block]


@pytest.fixture
def recorded(monkeypatch):
    calls = []

    def fake_record(raffle_id, tickets_sold, purchases):
        calls.append((raffle_id, tickets_sold, list(purchases)))
        return len(calls[-1][2])

    monkeypatch.setattr(raffles_queries, "get_raffle_for_sync", lambda raffle_id: dict(RAFFLE))
    monkeypatch.setattr(tickets_commands, "record_ticket_sync", fake_record)
    return calls


def _use_contract(monkeypatch, contract):
    networks = []

    def factory(network):
        networks.append(network.key)
        return contract

    monkeypatch.setattr(ticket_sync, "_raffle_contract", factory)
    return networks


def test_wallet_user_id_is_stable_and_case_insensitive():
    assert ticket_sync.wallet_user_id(BUYER_A) == ticket_sync.wallet_user_id(BUYER_A.lower())
    assert ticket_sync.wallet_user_id(BUYER_A) != ticket_sync.wallet_user_id(BUYER_B)


def test_scan_start_block_covers_raffle_lifetime():
    created = NOW - timedelta(days=2)
    # two days of 12s blocks plus a fifth of margin
    assert ticket_sync.scan_start_block(created, 100_000, NOW) == 100_000 - 17_280
    assert ticket_sync.scan_start_block(NOW, 100_000, NOW) == 90_000
    assert ticket_sync.scan_start_block(created, 500, NOW) == 0


def test_block_chunks():
    assert list(ticket_sync.block_chunks(0, 4_500)) == [(0, 1_999), (2_000, 3_999), (4_000, 4_500)]


def test_sync_numbers_tickets_in_chain_order(monkeypatch, recorded):
    events = [
        _event(BUYER_B, 1, 49_990, tx_byte="bb"),
        _event(BUYER_A, 2, 45_000, tx_byte="aa"),
    ]
    networks = _use_contract(monkeypatch, FakeContract(events))

    result = ticket_sync.sync_raffle_tickets(TicketSyncRequest(raffleId=9), now=NOW)

    assert networks == ["sepolia"]
    raffle_id, tickets_sold, purchases = recorded[0]
    assert (raffle_id, tickets_sold) == (9, 3)
    assert [(p["wallet_address"], p["ticket_number"], p["quantity"]) for p in purchases] == [
        (BUYER_A, 1, 2),
        (BUYER_B, 3, 1),
    ]
    assert purchases[0]["tx_hash"] == "0x" + "aa" * 32
    assert purchases[0]["purchase_price"] == Decimal("5")
    assert purchases[0]["user_id"] == ticket_sync.wallet_user_id(BUYER_A)
    assert purchases[0]["purchased_at"].tzinfo is not None
    assert result["ticketsSold"] == 3
    assert result["ticketRecordsCreated"] == 2
    assert result["eventScanError"] is None
    assert result["message"].startswith("Synced 3 tickets from blockchain (2 new records created)")


def test_failing_chunk_does_not_abort_scan(monkeypatch, recorded):
    contract = FakeContract([_event(BUYER_A, 1, 49_000)], failing_chunks={40_000})
    _use_contract(monkeypatch, contract)

    result = ticket_sync.sync_raffle_tickets(TicketSyncRequest(raffleId=9), now=NOW)

    assert len(contract.scanned) > 1
    assert result["eventScanError"] is None
    assert len(recorded[0][2]) == 1


def test_event_scan_failure_still_updates_count(monkeypatch, recorded):
    contract = FakeContract([], tickets_sold=4, eth=FakeEth(fail=ConnectionError("rpc timeout")))
    _use_contract(monkeypatch, contract)

    result = ticket_sync.sync_raffle_tickets(TicketSyncRequest(raffleId=9), now=NOW)

    assert recorded == [(9, 4, [])]
    assert result["eventScanError"] == "rpc timeout"
    assert "Ticket count updated but detailed records not created" in result["message"]


def test_sync_requires_contract_raffle_id(monkeypatch, recorded):
    monkeypatch.setattr(
        raffles_queries, "get_raffle_for_sync", lambda raffle_id: {**RAFFLE, "contract_raffle_id": None}
    )
    with pytest.raises(ValueError, match="contract raffle ID"):
        ticket_sync.sync_raffle_tickets(TicketSyncRequest(raffleId=9), now=NOW)
    assert recorded == []


def test_sync_unknown_raffle(monkeypatch, recorded):
    monkeypatch.setattr(raffles_queries, "get_raffle_for_sync", lambda raffle_id: None)
    with pytest.raises(LookupError, match="Raffle not found: 9"):
        ticket_sync.sync_raffle_tickets(TicketSyncRequest(raffleId=9), now=NOW)


def test_sync_route_requires_admin(client, as_user, monkeypatch, recorded):
    monkeypatch.setattr(roles, "has_role", lambda user_id, role: False)
    response = client.post(
        "/chainraffle/v2/admin/raffles/sync-tickets", json={"raffleId": 9}, headers=as_user()
    )
    assert response.status_code == 403
    assert recorded == []


def test_sync_route_reports_failures(client, as_user, monkeypatch, recorded):
    monkeypatch.setattr(roles, "has_role", lambda user_id, role: True)
    monkeypatch.setattr(raffles_queries, "get_raffle_for_sync", lambda raffle_id: None)
    response = client.post(
        "/chainraffle/v2/admin/raffles/sync-tickets", json={"raffleId": 9}, headers=as_user()
    )
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to sync raffle tickets",
        "details": "Raffle not found: 9",
    }


def test_sync_route(client, as_user, monkeypatch, recorded):
    monkeypatch.setattr(roles, "has_role", lambda user_id, role: True)
    _use_contract(monkeypatch, FakeContract([_event(BUYER_A, 1, 49_000)], tickets_sold=1))
    response = client.post(
        "/chainraffle/v2/admin/raffles/sync-tickets", json={"raffleId": 9}, headers=as_user()
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["raffleId"] == 9
    assert body["ticketRecordsCreated"] == 1
