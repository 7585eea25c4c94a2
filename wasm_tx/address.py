"""Bech32 account addresses and identity resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bech32 import bech32_decode, bech32_encode, convertbits

from .errors import MalformedInputError

if TYPE_CHECKING:
    from .keys import KeyLookup

logger = logging.getLogger(__name__)

DEFAULT_BECH32_PREFIX = "wasm"
MAX_ADDRESS_LENGTH = 255


@dataclass(frozen=True)
class Address:
    """Validated account or contract address.

    Once parsed (or resolved from a key name) an address is a plain value;
    ``str(address)`` yields the canonical lower-case bech32 form.
    """

    hrp: str
    data: bytes

    def __str__(self) -> str:
        return bech32_encode(self.hrp, convertbits(self.data, 8, 5))

    @classmethod
    def from_bytes(cls, data: bytes, prefix: str = DEFAULT_BECH32_PREFIX) -> "Address":
        _check_length(data)
        return cls(hrp=prefix, data=bytes(data))

    @classmethod
    def parse(cls, text: str, prefix: str | None = None) -> "Address":
        """Decode ``text`` as bech32, optionally requiring the HRP ``prefix``."""

        if not text or not text.strip():
            raise MalformedInputError("empty address string is not allowed")
        hrp, words = bech32_decode(text)
        if hrp is None or words is None:
            raise MalformedInputError(f"decoding bech32 failed: invalid address {text!r}")
        if prefix is not None and hrp != prefix:
            raise MalformedInputError(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
        raw = convertbits(words, 5, 8, False)
        if raw is None:
            raise MalformedInputError(f"decoding bech32 failed: invalid padding in {text!r}")
        data = bytes(raw)
        _check_length(data)
        return cls(hrp=hrp, data=data)


def _check_length(data: bytes) -> None:
    if not data:
        raise MalformedInputError("addresses cannot be empty")
    if len(data) > MAX_ADDRESS_LENGTH:
        raise MalformedInputError(
            f"address max length is {MAX_ADDRESS_LENGTH}, got {len(data)}"
        )


def is_valid_address(text: str, prefix: str | None = None) -> bool:
    try:
        Address.parse(text, prefix)
    except MalformedInputError:
        return False
    return True


def resolve_identity(value: str, keyring: KeyLookup, prefix: str | None = None) -> Address:
    """Return the address named by ``value``.

    ``value`` is first parsed as a bech32 address; only when that fails is it
    treated as a key name and looked up in ``keyring``. Lookup failures
    propagate unchanged.
    """

    try:
        return Address.parse(value, prefix)
    except MalformedInputError:
        logger.debug("%r is not a bech32 address, resolving it as a key name", value)
    return keyring.resolve(value)
