from __future__ import annotations

import argparse
import sys
from decimal import Decimal

from eth_account import Account
from web3 import Web3

from app.contracts.client import DEFAULT_TEST_MINT_AMOUNT, RaffleContract, UsdtContract, connect
from app.core.networks import default_network, find_network
from chainraffle_cli.env import load_environment, require


def _account(env: dict):
    return Account.from_key(require(env, "WALLET_PRIVATE_KEY"))


def _print_tx(label: str, network, receipt) -> None:
    print(label, network.explorer_url("tx", Web3.to_hex(receipt["transactionHash"])))


def _mint_usdt(args, env, w3, network) -> None:
    account = _account(env)
    usdt = UsdtContract(w3, network)
    print(f"Minting {args.amount} test USDT to {account.address}...")
    _print_tx("Minted in tx:", network, usdt.mint_test_tokens(account, args.amount))
    print("Balance:", usdt.balance_of(account.address), "USDT")


def _approve(args, env, w3, network) -> None:
    account = _account(env)
    usdt = UsdtContract(w3, network)
    spender = args.spender or network.contracts.raffle
    print(f"Approving {spender} to spend {args.amount} USDT...")
    _print_tx("Approved in tx:", network, usdt.approve(spender, args.amount, account))
    print("Allowance:", usdt.allowance(account.address, spender), "USDT")


def _buy_tickets(args, env, w3, network) -> None:
    account = _account(env)
    raffle = RaffleContract(w3, network)
    print(f"Purchasing {args.quantity} ticket(s) for raffle {args.raffle_id}...")
    _print_tx("Purchased in tx:", network, raffle.buy_tickets(args.raffle_id, args.quantity, account))


def _select_winner(args, env, w3, network) -> None:
    account = _account(env)
    raffle = RaffleContract(w3, network)
    owner = raffle.owner()
    if owner.lower() != account.address.lower():
        raise SystemExit(f"Only the contract owner ({owner}) can request a winner")
    print(f"Requesting a random winner for raffle {args.raffle_id}...")
    _print_tx("Requested in tx:", network, raffle.select_winner(args.raffle_id, account))


def _claim_prize(args, env, w3, network) -> None:
    account = _account(env)
    raffle = RaffleContract(w3, network)
    print(f"Claiming the prize of raffle {args.raffle_id}...")
    _print_tx("Claimed in tx:", network, raffle.claim_prize(args.raffle_id, account))


def _entries(args, env, w3, network) -> None:
    raffle = RaffleContract(w3, network)
    address = args.address or _account(env).address
    entries = raffle.user_entries(args.raffle_id, address)
    if not entries:
        print("No tickets found for this wallet")
        return
    print(f"{len(entries)} entr{'y' if len(entries) == 1 else 'ies'}:", ", ".join(map(str, entries)))


def _info(args, env, w3, network) -> None:
    raffle = RaffleContract(w3, network)
    info = raffle.raffle_info(args.raffle_id)
    print("Contract owner:", raffle.owner())
    print("Name:", info.name)
    print("Ticket price:", info.ticket_price_eth, network.native_currency.symbol)
    print(f"Sold: {info.tickets_sold}/{info.max_tickets}")
    print("Ends:", info.end_time.isoformat())
    print("Active:", info.is_active)
    print("Winner:", info.winner)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interact with the Raffle contract")
    parser.add_argument(
        "--network", default=None, help="Network key or chain id (default: DEFAULT_CHAIN_ID)"
    )
    parser.add_argument("--rpc-url", default=None)
    parser.add_argument("--env-file", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    mint = sub.add_parser("mint-usdt", help="Mint test USDT to the wallet")
    mint.add_argument("--amount", type=int, default=DEFAULT_TEST_MINT_AMOUNT)
    mint.set_defaults(handler=_mint_usdt)

    approve = sub.add_parser("approve", help="Approve USDT spending")
    approve.add_argument("amount", type=Decimal)
    approve.add_argument("--spender", default=None, help="Defaults to the raffle contract")
    approve.set_defaults(handler=_approve)

    buy = sub.add_parser("buy-tickets", help="Buy raffle tickets")
    buy.add_argument("raffle_id", type=int)
    buy.add_argument("--quantity", type=int, default=1)
    buy.set_defaults(handler=_buy_tickets)

    select = sub.add_parser("select-winner", help="Request the VRF winner draw (owner only)")
    select.add_argument("raffle_id", type=int)
    select.set_defaults(handler=_select_winner)

    claim = sub.add_parser("claim-prize", help="Claim the prize of a won raffle")
    claim.add_argument("raffle_id", type=int)
    claim.set_defaults(handler=_claim_prize)

    entries = sub.add_parser("entries", help="List a wallet's entries in a raffle")
    entries.add_argument("raffle_id", type=int)
    entries.add_argument("--address", default=None)
    entries.set_defaults(handler=_entries)

    info = sub.add_parser("info", help="Show on-chain raffle state")
    info.add_argument("raffle_id", type=int)
    info.set_defaults(handler=_info)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    env = load_environment(args.env_file)
    network = find_network(args.network) if args.network else default_network()
    w3 = connect(network, args.rpc_url or env.get("RPC_URL"))
    args.handler(args, env, w3, network)
    return 0


if __name__ == "__main__":
    sys.exit(main())
