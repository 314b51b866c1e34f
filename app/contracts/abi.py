"""JSON ABIs of the deployed Raffle contract and the (test) USDT token.

Only the entries the application calls or listens to are listed.
"""

from __future__ import annotations


def _param(name: str, type_: str, indexed: bool = False) -> dict:
    param = {"name": name, "type": type_, "internalType": type_}
    if indexed:
        param["indexed"] = True
    return param


def _function(name, inputs=(), outputs=(), mutability="nonpayable") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [_param(*item) for item in inputs],
        "outputs": [_param(*item) for item in outputs],
        "stateMutability": mutability,
    }


def _event(name, inputs) -> dict:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [_param(*item) for item in inputs],
    }


RAFFLE_ABI = [
    _function("owner", outputs=[("", "address")], mutability="view"),
    _function("transferOwnership", inputs=[("newOwner", "address")]),
    _function(
        "createRaffle",
        inputs=[
            ("name", "string"),
            ("description", "string"),
            ("ticketPrice", "uint256"),
            ("maxTickets", "uint256"),
            ("duration", "uint256"),
            ("nftContract", "address"),
        ],
        outputs=[("", "uint256")],
    ),
    _function(
        "buyTickets",
        inputs=[("raffleId", "uint256"), ("quantity", "uint256")],
        mutability="payable",
    ),
    _function("selectWinner", inputs=[("raffleId", "uint256")]),
    _function("claimPrize", inputs=[("raffleId", "uint256")]),
    _function("withdrawFees"),
    _function(
        "getUserEntries",
        inputs=[("raffleId", "uint256"), ("user", "address")],
        outputs=[("", "uint256[]")],
        mutability="view",
    ),
    _function(
        "getRaffleEntries",
        inputs=[("raffleId", "uint256")],
        outputs=[("", "uint256[]")],
        mutability="view",
    ),
    _function(
        "raffles",
        inputs=[("", "uint256")],
        outputs=[
            ("name", "string"),
            ("description", "string"),
            ("ticketPrice", "uint256"),
            ("maxTickets", "uint256"),
            ("ticketsSold", "uint256"),
            ("endTime", "uint256"),
            ("winner", "address"),
            ("isActive", "bool"),
            ("vrfRequested", "bool"),
            ("nftContract", "address"),
        ],
        mutability="view",
    ),
    _function("raffleCounter", outputs=[("", "uint256")], mutability="view"),
    _function("platformFee", outputs=[("", "uint256")], mutability="view"),
    _function("usdtToken", outputs=[("", "address")], mutability="view"),
    _event(
        "RaffleCreated",
        [
            ("raffleId", "uint256", True),
            ("name", "string"),
            ("ticketPrice", "uint256"),
            ("maxTickets", "uint256"),
        ],
    ),
    _event(
        "TicketPurchased",
        [("raffleId", "uint256", True), ("buyer", "address", True), ("quantity", "uint256")],
    ),
    _event("WinnerRequested", [("raffleId", "uint256", True), ("requestId", "uint256")]),
    _event(
        "WinnerSelected",
        [
            ("raffleId", "uint256", True),
            ("winner", "address", True),
            ("winningEntry", "uint256"),
        ],
    ),
    _event("PrizeClaimed", [("raffleId", "uint256", True), ("winner", "address", True)]),
]

USDT_ABI = [
    _function("balanceOf", inputs=[("owner", "address")], outputs=[("", "uint256")], mutability="view"),
    _function("decimals", outputs=[("", "uint8")], mutability="view"),
    _function(
        "approve",
        inputs=[("spender", "address"), ("amount", "uint256")],
        outputs=[("", "bool")],
    ),
    _function(
        "allowance",
        inputs=[("owner", "address"), ("spender", "address")],
        outputs=[("", "uint256")],
        mutability="view",
    ),
    _function("mint", inputs=[("to", "address"), ("amount", "uint256")]),
    _function("mintWithDecimals", inputs=[("to", "address"), ("amount", "uint256")]),
    _function(
        "transfer",
        inputs=[("to", "address"), ("amount", "uint256")],
        outputs=[("", "bool")],
    ),
    _function("name", outputs=[("", "string")], mutability="view"),
    _function("symbol", outputs=[("", "string")], mutability="view"),
]


def function_names(abi: list[dict]) -> set[str]:
    return {entry["name"] for entry in abi if entry["type"] == "function"}
