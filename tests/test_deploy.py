import json

import pytest

import chainraffle_cli.deploy as deploy
from app.core.networks import SEPOLIA
from chainraffle_cli.env import load_env_file, require


def test_load_env_file_keeps_existing_values(tmp_path):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "# comment\nVRF_SUBSCRIPTION_ID='1234'\nRPC_URL=\"https://rpc.example\"\nBROKEN_LINE\n"
    )
    env = {"RPC_URL": "https://already.set"}
    load_env_file(env, env_path)
    assert env == {"RPC_URL": "https://already.set", "VRF_SUBSCRIPTION_ID": "1234"}


def test_require_reports_missing_key():
    with pytest.raises(RuntimeError, match="DEPLOYER_PRIVATE_KEY is required"):
        require({}, "DEPLOYER_PRIVATE_KEY")


def test_subscription_id_is_mandatory():
    with pytest.raises(RuntimeError, match="VRF_SUBSCRIPTION_ID"):
        deploy._subscription_id({}, None)
    with pytest.raises(RuntimeError, match="must be an integer"):
        deploy._subscription_id({"VRF_SUBSCRIPTION_ID": "abc"}, None)
    assert deploy._subscription_id({"VRF_SUBSCRIPTION_ID": "0"}, "77") == 77


def test_constructor_args_come_from_network_table():
    config = deploy.DeployConfig(network=SEPOLIA, subscription_id=42, callback_gas_limit=500_000)
    coordinator, subscription_id, gas_lane, gas_limit = config.constructor_args()
    assert coordinator.lower() == SEPOLIA.vrf.coordinator.lower()
    assert subscription_id == 42
    assert gas_lane == bytes.fromhex(SEPOLIA.vrf.gas_lane[2:])
    assert len(gas_lane) == 32
    assert gas_limit == 500_000


def test_deployment_info_shape():
    config = deploy.DeployConfig(network=SEPOLIA, subscription_id=42, callback_gas_limit=500_000)
    info = deploy.deployment_info(config, "0x" + "1" * 40, "0x" + "2" * 40)
    assert info["network"] == "sepolia"
    assert info["contractAddress"] == "0x" + "1" * 40
    assert info["vrfConfig"]["subscriptionId"] == "42"
    assert info["vrfConfig"]["callbackGasLimit"] == 500_000


def test_load_artifact_requires_bytecode(tmp_path):
    artifact = tmp_path / "Raffle.json"
    artifact.write_text(json.dumps({"abi": [{"type": "constructor"}], "bytecode": "0x"}))
    with pytest.raises(RuntimeError, match="no ABI or bytecode"):
        deploy.load_artifact(artifact)
    with pytest.raises(RuntimeError, match="not found"):
        deploy.load_artifact(tmp_path / "missing.json")


def test_dry_run_does_not_touch_the_chain(monkeypatch, capsys):
    monkeypatch.setattr(deploy, "load_environment", lambda env_file: {"VRF_SUBSCRIPTION_ID": "9"})

    def no_connect(*args, **kwargs):
        raise AssertionError("dry run must not connect")

    monkeypatch.setattr(deploy, "connect", no_connect)
    assert deploy.main(["--network", "sepolia", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "Subscription ID: 9" in out
    assert SEPOLIA.vrf.coordinator in out
