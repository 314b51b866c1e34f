from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.contracts import client as contracts
from app.contracts.abi import RAFFLE_ABI, USDT_ABI, function_names
from app.core.networks import MAINNET, SEPOLIA


def test_abis_expose_the_called_functions():
    assert {"buyTickets", "getUserEntries", "raffles", "selectWinner", "claimPrize"} <= function_names(
        RAFFLE_ABI
    )
    assert {"mintWithDecimals", "approve", "balanceOf", "decimals"} <= function_names(USDT_ABI)
    buy = next(entry for entry in RAFFLE_ABI if entry.get("name") == "buyTickets")
    assert buy["stateMutability"] == "payable"


class _Call:
    def __init__(self, value):
        self.value = value

    def call(self):
        return self.value


def _fake_w3(functions):
    contract = SimpleNamespace(functions=SimpleNamespace(**functions))
    return SimpleNamespace(eth=SimpleNamespace(contract=lambda address, abi: contract))


def test_user_entries_are_plain_ints():
    w3 = _fake_w3({"getUserEntries": lambda raffle_id, user: _Call([3, 4])})
    raffle = contracts.RaffleContract(w3, SEPOLIA)
    assert raffle.user_entries(1, "0x" + "ab" * 20) == [3, 4]


def test_buy_tickets_pays_price_times_quantity(monkeypatch):
    info = ("Genesis", "", 10**16, 100, 5, 1_900_000_000, "0x" + "0" * 40, True, False, "0x" + "0" * 40)
    w3 = _fake_w3(
        {
            "raffles": lambda raffle_id: _Call(info),
            "buyTickets": lambda raffle_id, quantity: ("buyTickets", raffle_id, quantity),
        }
    )
    sent = []
    monkeypatch.setattr(
        contracts,
        "send_transaction",
        lambda w3, fn, account, value=0: sent.append((fn, value)) or {"status": 1},
    )
    raffle = contracts.RaffleContract(w3, SEPOLIA)
    raffle.buy_tickets(2, 3, account=SimpleNamespace(address="0x" + "1" * 40))
    assert sent == [(("buyTickets", 2, 3), 3 * 10**16)]
    with pytest.raises(ValueError):
        raffle.buy_tickets(2, 0, account=None)


def test_raffle_contract_requires_deployment():
    with pytest.raises(contracts.ContractNotDeployedError):
        contracts.RaffleContract(_fake_w3({}), MAINNET)


def test_usdt_unit_conversion():
    w3 = _fake_w3({"decimals": lambda: _Call(6)})
    usdt = contracts.UsdtContract(w3, SEPOLIA)
    assert usdt.to_units(Decimal("12.5")) == 12_500_000
    assert usdt.from_units(1_000_000) == Decimal(1)


def test_wallet_cli_parses_subcommands():
    from chainraffle_cli.wallet import _buy_tickets, build_parser

    args = build_parser().parse_args(["--network", "11155111", "buy-tickets", "3", "--quantity", "2"])
    assert args.raffle_id == 3
    assert args.quantity == 2
    assert args.handler is _buy_tickets


class _FakeRaffle:
    def __init__(self, w3, network, owner="0x" + "1" * 40):
        self._owner = owner
        self.sent = []

    def owner(self):
        return self._owner

    def select_winner(self, raffle_id, account):
        self.sent.append(("selectWinner", raffle_id))
        return {"transactionHash": b"\x01" * 32}

    def claim_prize(self, raffle_id, account):
        self.sent.append(("claimPrize", raffle_id))
        return {"transactionHash": b"\x02" * 32}


def _run_wallet(monkeypatch, argv, raffle=None, usdt=None):
    from chainraffle_cli import wallet

    account = SimpleNamespace(address="0x" + "1" * 40)
    networks = []
    monkeypatch.setattr(wallet, "load_environment", lambda env_file: {"WALLET_PRIVATE_KEY": "0xkey"})
    monkeypatch.setattr(wallet, "_account", lambda env: account)
    monkeypatch.setattr(wallet, "connect", lambda network, rpc_url: networks.append(network) or "w3")
    if raffle is not None:
        monkeypatch.setattr(wallet, "RaffleContract", lambda w3, network: raffle)
    if usdt is not None:
        monkeypatch.setattr(wallet, "UsdtContract", lambda w3, network: usdt)
    assert wallet.main(argv) == 0
    return networks


def test_wallet_select_winner_as_owner(monkeypatch, capsys):
    raffle = _FakeRaffle(None, None)
    _run_wallet(monkeypatch, ["select-winner", "4"], raffle=raffle)
    assert raffle.sent == [("selectWinner", 4)]
    assert "https://sepolia.etherscan.io/tx/0x0101" in capsys.readouterr().out


def test_wallet_select_winner_requires_owner(monkeypatch):
    raffle = _FakeRaffle(None, None, owner="0x" + "9" * 40)
    with pytest.raises(SystemExit, match="contract owner"):
        _run_wallet(monkeypatch, ["select-winner", "4"], raffle=raffle)
    assert raffle.sent == []


def test_wallet_claim_prize(monkeypatch):
    raffle = _FakeRaffle(None, None)
    _run_wallet(monkeypatch, ["--network", "sepolia", "claim-prize", "2"], raffle=raffle)
    assert raffle.sent == [("claimPrize", 2)]


def test_wallet_approve_defaults_to_raffle_spender(monkeypatch, capsys):
    calls = []
    usdt = SimpleNamespace(
        approve=lambda spender, amount, account: calls.append((spender, amount)) or {"transactionHash": b"\x03" * 32},
        allowance=lambda owner, spender: Decimal("25"),
    )
    _run_wallet(monkeypatch, ["approve", "25"], usdt=usdt)
    assert calls == [(SEPOLIA.contracts.raffle, Decimal("25"))]
    assert "Allowance: 25 USDT" in capsys.readouterr().out


def test_wallet_uses_configured_default_chain(monkeypatch):
    from app.core import networks as networks_module

    monkeypatch.setattr(networks_module, "settings", SimpleNamespace(default_chain_id=1))
    raffle = _FakeRaffle(None, None)
    used = _run_wallet(monkeypatch, ["claim-prize", "2"], raffle=raffle)
    assert used == [MAINNET]


def test_approve_converts_to_token_units(monkeypatch):
    approved = []
    w3 = _fake_w3(
        {
            "decimals": lambda: _Call(6),
            "approve": lambda spender, amount: approved.append((spender, amount)) or "approve-fn",
        }
    )
    sent = []
    monkeypatch.setattr(
        contracts, "send_transaction", lambda w3, fn, account, value=0: sent.append(fn) or {"status": 1}
    )
    usdt = contracts.UsdtContract(w3, SEPOLIA)
    usdt.approve(SEPOLIA.contracts.raffle, Decimal("1.5"), account=None)
    assert approved[0][1] == 1_500_000
    assert sent == ["approve-fn"]
