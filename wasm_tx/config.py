"""Shared configuration loader for wasm-tx."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

from .address import DEFAULT_BECH32_PREFIX
from .keys import StaticKeyring


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".wasm-tx.yaml"
DEFAULT_SIGNER_ENDPOINT = "http://127.0.0.1:26659"
_CONFIG_PATH_OVERRIDE: Path | None = None


@dataclass
class ClientConfig:
    """Chain and signer settings shared by all commands."""

    chain_id: str | None = None
    bech32_prefix: str = DEFAULT_BECH32_PREFIX
    signer_endpoint: str = DEFAULT_SIGNER_ENDPOINT
    from_key: str | None = None
    keys: dict[str, str] = field(default_factory=dict)

    def keyring(self) -> StaticKeyring:
        return StaticKeyring(self.keys, prefix=self.bech32_prefix)


def set_default_config_path(path: str | Path | None) -> None:
    """Remember a user-supplied config path for future loads."""

    global _CONFIG_PATH_OVERRIDE
    _CONFIG_PATH_OVERRIDE = Path(path).expanduser() if path else None


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'chain' section")
    return loaded


def _section(file_config: dict[str, Any], name: str, path: Path) -> dict[str, Any]:
    section = file_config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Expected '{name}' to be a mapping in {path}")
    return section


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _check_endpoint(raw: str) -> str:
    parsed = urlparse(raw)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ConfigurationError(f"Invalid signer endpoint URL: {raw}")
    return raw.rstrip("/")


def _check_keys(raw: dict[str, Any], path: Path) -> dict[str, str]:
    keys: dict[str, str] = {}
    for name, address in raw.items():
        if not isinstance(address, str) or not address:
            raise ConfigurationError(f"Key {name!r} in {path} must map to an address string")
        keys[str(name)] = address
    return keys


def load_client_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ClientConfig:
    """Load client configuration from overrides, environment variables and YAML.

    Precedence is overrides, then ``WASM_TX_*`` environment variables, then
    the ``chain:`` section of the config file, then built-in defaults. Key
    names always come from the ``keys:`` section.
    """

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None or _CONFIG_PATH_OVERRIDE is not None
    path = (
        Path(config_path).expanduser()
        if config_path is not None
        else _CONFIG_PATH_OVERRIDE or DEFAULT_CONFIG_PATH
    )

    file_config = _load_config_file(path, required=explicit_path)
    chain_section = _section(file_config, "chain", path)
    keys_section = _section(file_config, "keys", path)

    override_map = {k: v for k, v in dict(overrides or {}).items() if v is not None}

    chain_id = _first_value(
        override_map.get("chain_id"),
        env_map.get("WASM_TX_CHAIN_ID") or None,
        chain_section.get("chain_id"),
    )
    prefix = _first_value(
        override_map.get("bech32_prefix"),
        env_map.get("WASM_TX_BECH32_PREFIX") or None,
        chain_section.get("bech32_prefix"),
        default=DEFAULT_BECH32_PREFIX,
    )
    if not isinstance(prefix, str) or not prefix:
        raise ConfigurationError(f"Invalid bech32 prefix: {prefix!r}")
    endpoint = _first_value(
        override_map.get("signer_endpoint"),
        env_map.get("WASM_TX_SIGNER_ENDPOINT") or None,
        chain_section.get("signer_endpoint"),
        default=DEFAULT_SIGNER_ENDPOINT,
    )
    from_key = _first_value(
        override_map.get("from_key"),
        env_map.get("WASM_TX_FROM") or None,
        chain_section.get("from"),
    )

    return ClientConfig(
        chain_id=str(chain_id) if chain_id is not None else None,
        bech32_prefix=prefix,
        signer_endpoint=_check_endpoint(str(endpoint)),
        from_key=from_key,
        keys=_check_keys(keys_section, path),
    )
