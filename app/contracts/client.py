from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from app.contracts.abi import RAFFLE_ABI, USDT_ABI
from app.core.networks import NetworkConfig

logger = logging.getLogger("chainraffle.contracts")

DEFAULT_TEST_MINT_AMOUNT = 1000
RECEIPT_TIMEOUT_SECONDS = 300


class ContractNotDeployedError(RuntimeError):
    pass


@dataclass(frozen=True)
class RaffleInfo:
    name: str
    description: str
    ticket_price_wei: int
    max_tickets: int
    tickets_sold: int
    end_time: datetime
    winner: str
    is_active: bool
    vrf_requested: bool
    nft_contract: str

    @property
    def ticket_price_eth(self) -> Decimal:
        return Web3.from_wei(self.ticket_price_wei, "ether")


def connect(network: NetworkConfig, rpc_url: Optional[str] = None) -> Web3:
    w3 = Web3(Web3.HTTPProvider(rpc_url or network.rpc_url))
    if not w3.is_connected():
        raise ConnectionError(f"Failed to connect to {network.name} at {rpc_url or network.rpc_url}")
    return w3


def send_transaction(w3: Web3, contract_function, account: LocalAccount, value: int = 0) -> Any:
    tx = contract_function.build_transaction(
        {
            "from": account.address,
            "chainId": w3.eth.chain_id,
            "nonce": w3.eth.get_transaction_count(account.address, "pending"),
            "value": value,
        }
    )
    signed = account.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info("Submitted transaction %s", Web3.to_hex(tx_hash))
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT_SECONDS)
    if receipt["status"] != 1:
        raise RuntimeError(f"Transaction {Web3.to_hex(tx_hash)} reverted")
    return receipt


class RaffleContract:
    def __init__(self, w3: Web3, network: NetworkConfig):
        if not network.raffle_deployed:
            raise ContractNotDeployedError(f"Raffle contract is not deployed on {network.name}")
        self.w3 = w3
        self.network = network
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(network.contracts.raffle), abi=RAFFLE_ABI
        )

    def owner(self) -> str:
        return self.contract.functions.owner().call()

    def raffle_info(self, raffle_id: int) -> RaffleInfo:
        (
            name,
            description,
            ticket_price,
            max_tickets,
            tickets_sold,
            end_time,
            winner,
            is_active,
            vrf_requested,
            nft_contract,
        ) = self.contract.functions.raffles(raffle_id).call()
        return RaffleInfo(
            name=name,
            description=description,
            ticket_price_wei=ticket_price,
            max_tickets=max_tickets,
            tickets_sold=tickets_sold,
            end_time=datetime.fromtimestamp(end_time, tz=timezone.utc),
            winner=winner,
            is_active=is_active,
            vrf_requested=vrf_requested,
            nft_contract=nft_contract,
        )

    def user_entries(self, raffle_id: int, user_address: str) -> list[int]:
        entries = self.contract.functions.getUserEntries(
            raffle_id, Web3.to_checksum_address(user_address)
        ).call()
        return [int(entry) for entry in entries]

    def ticket_purchases(self, raffle_id: int, from_block: int, to_block: int) -> list:
        return self.contract.events.TicketPurchased.get_logs(
            from_block=from_block,
            to_block=to_block,
            argument_filters={"raffleId": raffle_id},
        )

    def buy_tickets(self, raffle_id: int, quantity: int, account: LocalAccount):
        if quantity <= 0:
            raise ValueError("quantity must be positive")
        info = self.raffle_info(raffle_id)
        total_price = info.ticket_price_wei * quantity
        logger.info(
            "Buying %d ticket(s) for raffle %d (%s wei)", quantity, raffle_id, total_price
        )
        return send_transaction(
            self.w3, self.contract.functions.buyTickets(raffle_id, quantity), account, total_price
        )

    def select_winner(self, raffle_id: int, account: LocalAccount):
        return send_transaction(self.w3, self.contract.functions.selectWinner(raffle_id), account)

    def claim_prize(self, raffle_id: int, account: LocalAccount):
        return send_transaction(self.w3, self.contract.functions.claimPrize(raffle_id), account)


class UsdtContract:
    def __init__(self, w3: Web3, network: NetworkConfig):
        if not network.contracts.usdt:
            raise ContractNotDeployedError(f"No USDT contract configured for {network.name}")
        self.w3 = w3
        self.network = network
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(network.contracts.usdt), abi=USDT_ABI
        )

    def decimals(self) -> int:
        return self.contract.functions.decimals().call()

    def to_units(self, amount: Decimal) -> int:
        return int(Decimal(amount) * (Decimal(10) ** self.decimals()))

    def from_units(self, value: int) -> Decimal:
        return Decimal(value) / (Decimal(10) ** self.decimals())

    def balance_of(self, owner: str) -> Decimal:
        raw = self.contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()
        return self.from_units(raw)

    def allowance(self, owner: str, spender: str) -> Decimal:
        raw = self.contract.functions.allowance(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
        ).call()
        return self.from_units(raw)

    def approve(self, spender: str, amount: Decimal, account: LocalAccount):
        return send_transaction(
            self.w3,
            self.contract.functions.approve(Web3.to_checksum_address(spender), self.to_units(amount)),
            account,
        )

    def mint_test_tokens(self, account: LocalAccount, amount: int = DEFAULT_TEST_MINT_AMOUNT):
        """Mint whole test USDT to ``account``; only the Sepolia mock exposes this."""
        return send_transaction(
            self.w3, self.contract.functions.mintWithDecimals(account.address, amount), account
        )
