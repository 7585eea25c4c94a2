from pathlib import Path

import pytest

from wasm_tx.config import (
    DEFAULT_SIGNER_ENDPOINT,
    ClientConfig,
    ConfigurationError,
    load_client_config,
    set_default_config_path,
)


def test_load_client_config_prefers_environment_over_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
        chain:
          chain_id: file-chain
          bech32_prefix: file
          signer_endpoint: http://filehost:1111
          from: file-key
        """
    )

    env_map = {
        "WASM_TX_CHAIN_ID": "env-chain",
        "WASM_TX_BECH32_PREFIX": "wasm",
        "WASM_TX_SIGNER_ENDPOINT": "https://envhost:3333/",
        "WASM_TX_FROM": "env-key",
    }

    config = load_client_config(config_path=config_path, env=env_map)

    assert isinstance(config, ClientConfig)
    assert config.chain_id == "env-chain"
    assert config.bech32_prefix == "wasm"
    assert config.signer_endpoint == "https://envhost:3333"
    assert config.from_key == "env-key"


def test_load_client_config_reads_yaml_when_env_missing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, make_address
) -> None:
    config_path = tmp_path / ".wasm-tx.yaml"
    monkeypatch.setattr("wasm_tx.config.DEFAULT_CONFIG_PATH", config_path)
    config_path.write_text(
        f"""
        chain:
          chain_id: testing
          signer_endpoint: http://yamlhost:4545
          from: alice
        keys:
          alice: {make_address(1)}
        """
    )

    config = load_client_config(env={})

    assert config.chain_id == "testing"
    assert config.bech32_prefix == "wasm"
    assert config.signer_endpoint == "http://yamlhost:4545"
    assert config.from_key == "alice"
    assert str(config.keyring().resolve("alice")) == make_address(1)


def test_overrides_beat_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("wasm_tx.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    config = load_client_config(
        env={"WASM_TX_CHAIN_ID": "env-chain", "WASM_TX_FROM": "env-key"},
        overrides={"chain_id": "flag-chain", "from_key": None},
    )

    assert config.chain_id == "flag-chain"
    assert config.from_key == "env-key"


def test_missing_default_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("wasm_tx.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    config = load_client_config(env={})

    assert config.chain_id is None
    assert config.signer_endpoint == DEFAULT_SIGNER_ENDPOINT
    assert config.keys == {}


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    set_default_config_path(tmp_path / "missing.yaml")

    with pytest.raises(ConfigurationError, match="Config file not found"):
        load_client_config(env={})


def test_invalid_endpoint_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("chain:\n  signer_endpoint: ftp://example.org\n")

    with pytest.raises(ConfigurationError, match="Invalid signer endpoint"):
        load_client_config(config_path=config_path, env={})


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "chain: nope\n",
        "keys:\n  alice: 5\n",
    ],
)
def test_malformed_config_sections(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_client_config(config_path=config_path, env={})
