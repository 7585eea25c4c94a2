"""Instantiate permissions attached to uploaded code.

A permission says who may instantiate contracts from a code upload: nobody
(governance only), everybody, or any of an explicit address set. The flag
parser below turns the CLI permission flags into one of these, or ``None``
when no flag was given and the chain default applies.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from .address import Address
from .errors import (
    MalformedInputError,
    StructuralValidationError,
    UnsupportedValueError,
)
from .flags import parse_tristate

logger = logging.getLogger(__name__)

FLAG_INSTANTIATE_EVERYBODY = "instantiate-everybody"
FLAG_INSTANTIATE_NOBODY = "instantiate-nobody"
FLAG_INSTANTIATE_ONLY_ADDRESS = "instantiate-only-address"
FLAG_INSTANTIATE_ANY_OF_ADDRESSES = "instantiate-anyof-addresses"


class AccessType(enum.Enum):
    NOBODY = "ACCESS_TYPE_NOBODY"
    EVERYBODY = "ACCESS_TYPE_EVERYBODY"
    ANY_OF_ADDRESSES = "ACCESS_TYPE_ANY_OF_ADDRESSES"


@dataclass(frozen=True)
class AccessConfig:
    permission: AccessType
    addresses: tuple[str, ...] = ()

    @classmethod
    def nobody(cls) -> "AccessConfig":
        return cls(AccessType.NOBODY)

    @classmethod
    def everybody(cls) -> "AccessConfig":
        return cls(AccessType.EVERYBODY)

    @classmethod
    def any_of(cls, addresses: Sequence[Address | str]) -> "AccessConfig":
        return cls(AccessType.ANY_OF_ADDRESSES, tuple(str(addr) for addr in addresses))

    def validate_basic(self) -> None:
        if self.permission in (AccessType.NOBODY, AccessType.EVERYBODY):
            if self.addresses:
                raise StructuralValidationError(
                    f"{self.permission.value} must not carry addresses"
                )
            return
        if not self.addresses:
            raise StructuralValidationError("addresses must not be empty")
        seen: set[str] = set()
        for addr in self.addresses:
            try:
                Address.parse(addr)
            except MalformedInputError as exc:
                raise StructuralValidationError(f"address {addr!r}: {exc}") from exc
            if addr in seen:
                raise StructuralValidationError(f"duplicate address: {addr}")
            seen.add(addr)

    def to_dict(self) -> dict[str, Any]:
        return {"permission": self.permission.value, "addresses": list(self.addresses)}


@dataclass(frozen=True)
class AccessConfigFlags:
    """Decoded instantiate permission flags.

    ``everybody`` and ``nobody`` are tri-state: ``None`` when the flag was not
    given, otherwise the boolean value passed on the command line.
    """

    any_of_addresses: tuple[str, ...] = ()
    everybody: bool | None = None
    nobody: bool | None = None
    only_address: str = ""

    @classmethod
    def from_raw(
        cls,
        any_of_addresses: Sequence[str] | None = None,
        everybody: str | None = None,
        nobody: str | None = None,
        only_address: str | None = None,
    ) -> "AccessConfigFlags":
        return cls(
            any_of_addresses=tuple(any_of_addresses or ()),
            everybody=parse_tristate(everybody, f"--{FLAG_INSTANTIATE_EVERYBODY}"),
            nobody=parse_tristate(nobody, f"--{FLAG_INSTANTIATE_NOBODY}"),
            only_address=only_address or "",
        )


def parse_access_config_flags(
    flags: AccessConfigFlags, prefix: str | None = None
) -> AccessConfig | None:
    """Resolve permission flags in precedence order.

    Any-of addresses win over everything else; the removed single-address flag
    always fails; then ``everybody`` and ``nobody`` are consulted. ``None``
    means no explicit permission was requested.
    """

    if flags.any_of_addresses:
        accepted: list[Address] = []
        for value in flags.any_of_addresses:
            try:
                accepted.append(Address.parse(value, prefix))
            except MalformedInputError as exc:
                raise MalformedInputError(f'parse "{value}": {exc}') from exc
        return AccessConfig.any_of(accepted)

    if flags.only_address:
        raise UnsupportedValueError(
            f"not supported anymore. Use: --{FLAG_INSTANTIATE_ANY_OF_ADDRESSES}"
        )
    if flags.everybody:
        return AccessConfig.everybody()
    if flags.nobody:
        return AccessConfig.nobody()
    return None


def parse_access_config(raw: str, prefix: str | None = None) -> AccessConfig:
    """Parse a single permission token: ``nobody``, ``everybody`` or addresses.

    The address form is a comma separated list of bech32 addresses. Empty
    entries and repeated addresses are rejected.
    """

    if raw == "nobody":
        return AccessConfig.nobody()
    if raw == "everybody":
        return AccessConfig.everybody()

    addresses: list[Address] = []
    for value in raw.split(","):
        try:
            addresses.append(Address.parse(value, prefix))
        except MalformedInputError as exc:
            raise MalformedInputError(f"unable to parse address {value!r}: {exc}") from exc
    config = AccessConfig.any_of(addresses)
    if len(set(config.addresses)) != len(config.addresses):
        raise MalformedInputError(f"duplicate address in permission {raw!r}")
    logger.debug("Parsed any-of permission with %d addresses", len(config.addresses))
    return config
