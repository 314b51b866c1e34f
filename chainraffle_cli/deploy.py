from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from eth_account import Account
from web3 import Web3

from app.contracts.client import connect, send_transaction
from app.core.networks import NetworkConfig, default_network, find_network
from chainraffle_cli.env import load_environment, require

CALLBACK_GAS_LIMIT = 500_000
DEFAULT_ARTIFACT = Path("artifacts/contracts/Raffle.sol/Raffle.json")
DEFAULT_OUTPUT = Path("deployment-info.json")


@dataclass(frozen=True)
class DeployConfig:
    network: NetworkConfig
    subscription_id: int
    callback_gas_limit: int

    def constructor_args(self) -> tuple:
        return (
            Web3.to_checksum_address(self.network.vrf.coordinator),
            self.subscription_id,
            bytes.fromhex(self.network.vrf.gas_lane[2:]),
            self.callback_gas_limit,
        )


def _subscription_id(env: dict, override: str | None) -> int:
    raw = (override or env.get("VRF_SUBSCRIPTION_ID") or "0").strip()
    try:
        subscription_id = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"VRF_SUBSCRIPTION_ID must be an integer, got {raw!r}") from exc
    if subscription_id == 0:
        raise RuntimeError(
            "Please set VRF_SUBSCRIPTION_ID in your .env.local file. "
            "Visit https://vrf.chain.link/ to create a subscription"
        )
    return subscription_id


def load_artifact(path: Path) -> tuple[list, str]:
    if not path.exists():
        raise RuntimeError(f"Contract artifact not found: {path}. Compile the contract first.")
    artifact = json.loads(path.read_text())
    abi = artifact.get("abi")
    bytecode = artifact.get("bytecode")
    if not abi or not bytecode or bytecode == "0x":
        raise RuntimeError(f"Artifact {path} has no ABI or bytecode")
    return abi, bytecode


def deployment_info(config: DeployConfig, contract_address: str, deployer: str) -> dict:
    return {
        "network": config.network.key,
        "chainId": config.network.chain_id,
        "contractAddress": contract_address,
        "deployer": deployer,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "vrfConfig": {
            "coordinator": config.network.vrf.coordinator,
            "subscriptionId": str(config.subscription_id),
            "gasLane": config.network.vrf.gas_lane,
            "callbackGasLimit": config.callback_gas_limit,
        },
    }


def _print_config(config: DeployConfig) -> None:
    print("Deployment Configuration:")
    print("========================")
    print("Network:", config.network.name)
    print("VRF Coordinator:", config.network.vrf.coordinator)
    print("Subscription ID:", config.subscription_id)
    print("Gas Lane:", config.network.vrf.gas_lane)
    print("Callback Gas Limit:", config.callback_gas_limit)
    print()


def _print_next_steps(config: DeployConfig, address: str) -> None:
    network = config.network
    print("Next Steps:")
    print("===========")
    print("1. Add contract as VRF consumer at https://vrf.chain.link/")
    print(f"   subscription {config.subscription_id}, consumer {address}")
    print("2. Verify contract on the block explorer:")
    print(
        "   npx hardhat verify --network",
        network.key,
        address,
        network.vrf.coordinator,
        config.subscription_id,
        network.vrf.gas_lane,
        config.callback_gas_limit,
    )
    print(f"3. Update the raffle address for {network.name} in app/core/networks.py")
    print(f"   Explorer: {network.explorer_url('address', address)}")
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Deploy the Raffle contract")
    parser.add_argument(
        "--network", default=None, help="Network key or chain id (default: DEFAULT_CHAIN_ID)"
    )
    parser.add_argument("--artifact", type=Path, default=DEFAULT_ARTIFACT)
    parser.add_argument("--subscription-id", default=None)
    parser.add_argument("--callback-gas-limit", type=int, default=CALLBACK_GAS_LIMIT)
    parser.add_argument("--rpc-url", default=None)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    env = load_environment(args.env_file)
    config = DeployConfig(
        network=find_network(args.network) if args.network else default_network(),
        subscription_id=_subscription_id(env, args.subscription_id),
        callback_gas_limit=args.callback_gas_limit,
    )
    _print_config(config)
    if args.dry_run:
        return 0

    abi, bytecode = load_artifact(args.artifact)
    account = Account.from_key(require(env, "DEPLOYER_PRIVATE_KEY"))
    w3 = connect(config.network, args.rpc_url or env.get("RPC_URL"))

    print("Deploying from account:", account.address)
    print("Account balance:", w3.from_wei(w3.eth.get_balance(account.address), "ether"), "ETH")
    print()

    factory = w3.eth.contract(abi=abi, bytecode=bytecode)
    receipt = send_transaction(w3, factory.constructor(*config.constructor_args()), account)
    address = receipt["contractAddress"]
    print("Raffle contract deployed:", address)
    print()

    _print_next_steps(config, address)

    args.output.write_text(json.dumps(deployment_info(config, address, account.address), indent=2))
    print("Deployment info saved to:", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
