import pytest

from app.core.networks import (
    MAINNET,
    NETWORKS,
    SEPOLIA,
    UnsupportedNetworkError,
    block_explorer_url,
    build_network_table,
    find_network,
    is_supported_network,
    require_network_config,
)


def test_each_chain_id_maps_to_its_own_config():
    assert set(NETWORKS) == {1, 11155111}
    for chain_id, config in NETWORKS.items():
        assert config.chain_id == chain_id


def test_duplicate_chain_ids_are_rejected():
    with pytest.raises(ValueError):
        build_network_table([SEPOLIA, SEPOLIA])


def test_supported_networks():
    assert is_supported_network(11155111)
    assert not is_supported_network(137)
    with pytest.raises(UnsupportedNetworkError):
        require_network_config(137)


def test_find_network_by_key_or_id():
    assert find_network("Sepolia") is SEPOLIA
    assert find_network("1") is MAINNET
    with pytest.raises(ValueError):
        find_network("polygon")


def test_block_explorer_url_falls_back_to_etherscan():
    assert block_explorer_url(11155111, "tx", "0xabc") == "https://sepolia.etherscan.io/tx/0xabc"
    assert block_explorer_url(None, "address", "0xabc") == "https://etherscan.io/address/0xabc"
    assert block_explorer_url(137, "tx", "0xabc") == "https://etherscan.io/tx/0xabc"


def test_mainnet_raffle_is_not_deployed_yet():
    assert SEPOLIA.raffle_deployed
    assert not MAINNET.raffle_deployed


def test_network_routes(client):
    listed = client.get("/chainraffle/v2/networks").json()
    assert {network["chain_id"] for network in listed} == {1, 11155111}
    sepolia = client.get("/chainraffle/v2/networks/11155111").json()
    assert sepolia["native_currency"]["symbol"] == "SepoliaETH"
    assert sepolia["contracts"]["usdt"] == SEPOLIA.contracts.usdt
    assert client.get("/chainraffle/v2/networks/137").status_code == 404


def test_health(client):
    assert client.get("/chainraffle/health").json()["status"] == "ok"


def test_default_network_follows_settings(monkeypatch):
    from types import SimpleNamespace

    import app.core.networks as networks_module

    assert networks_module.default_network() is SEPOLIA
    monkeypatch.setattr(networks_module, "settings", SimpleNamespace(default_chain_id=1))
    assert networks_module.default_network() is MAINNET
    monkeypatch.setattr(networks_module, "settings", SimpleNamespace(default_chain_id=137))
    with pytest.raises(UnsupportedNetworkError):
        networks_module.default_network()
