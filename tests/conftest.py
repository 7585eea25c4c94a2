from __future__ import annotations

from typing import Callable

import pytest

from wasm_tx.address import Address
from wasm_tx.config import set_default_config_path
from wasm_tx.keys import StaticKeyring


@pytest.fixture
def make_address() -> Callable[..., str]:
    def _make(seed: int, prefix: str = "wasm") -> str:
        return str(Address.from_bytes(bytes([seed]) * 20, prefix))

    return _make


@pytest.fixture
def sender(make_address) -> str:
    return make_address(1)


@pytest.fixture
def keyring(make_address) -> StaticKeyring:
    return StaticKeyring({"admin-key": make_address(9)})


@pytest.fixture(autouse=True)
def reset_config_path():
    yield
    set_default_config_path(None)
