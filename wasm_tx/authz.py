"""Authz authorizations for delegated contract and code upload access.

A contract grant combines exactly one limit (how often or how much) with
exactly one filter (which messages). Grants are wrapped into an execution or
a migration authorization. Code upload delegation uses a list of per code
hash grants instead.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Union

from .access import AccessConfig
from .address import Address
from .coins import Coins
from .errors import MalformedInputError, StructuralValidationError
from .messages import b64, require_address

CODE_HASH_WILDCARD = "*"


@dataclass(frozen=True)
class MaxCallsLimit:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MaxCallsLimit"

    remaining: int

    def validate_basic(self) -> None:
        if self.remaining == 0:
            raise StructuralValidationError("remaining calls must not be zero")

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "remaining": str(self.remaining)}


@dataclass(frozen=True)
class MaxFundsLimit:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MaxFundsLimit"

    amounts: Coins

    def validate_basic(self) -> None:
        _validate_amounts(self.amounts)

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "amounts": self.amounts.to_list()}


@dataclass(frozen=True)
class CombinedLimit:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.CombinedLimit"

    calls_remaining: int
    amounts: Coins

    def validate_basic(self) -> None:
        if self.calls_remaining == 0:
            raise StructuralValidationError("remaining calls must not be zero")
        _validate_amounts(self.amounts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "@type": self.type_url,
            "calls_remaining": str(self.calls_remaining),
            "amounts": self.amounts.to_list(),
        }


def _validate_amounts(amounts: Coins) -> None:
    if not amounts:
        raise StructuralValidationError("amounts must not be empty")
    if not amounts.is_valid():
        raise StructuralValidationError(f"invalid amounts: {amounts}")


ContractAuthzLimit = Union[MaxCallsLimit, MaxFundsLimit, CombinedLimit]


@dataclass(frozen=True)
class AllowAllMessagesFilter:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.AllowAllMessagesFilter"

    def validate_basic(self) -> None:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url}


@dataclass(frozen=True)
class AcceptedMessageKeysFilter:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.AcceptedMessageKeysFilter"

    keys: tuple[str, ...]

    def validate_basic(self) -> None:
        if not self.keys:
            raise StructuralValidationError("keys must not be empty")
        seen: set[str] = set()
        for key in self.keys:
            if not key.strip():
                raise StructuralValidationError("key must not be empty")
            if key in seen:
                raise StructuralValidationError(f"duplicate key: {key}")
            seen.add(key)

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "keys": list(self.keys)}


@dataclass(frozen=True)
class AcceptedMessagesFilter:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.AcceptedMessagesFilter"

    messages: tuple[bytes, ...]

    def validate_basic(self) -> None:
        if not self.messages:
            raise StructuralValidationError("messages must not be empty")
        seen: set[bytes] = set()
        for message in self.messages:
            try:
                json.loads(message)
            except ValueError as exc:
                raise StructuralValidationError(f"invalid raw message {message!r}: {exc}") from exc
            if message in seen:
                raise StructuralValidationError("duplicate message")
            seen.add(message)

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "messages": [b64(message) for message in self.messages]}


ContractAuthzFilter = Union[AllowAllMessagesFilter, AcceptedMessageKeysFilter, AcceptedMessagesFilter]


@dataclass(frozen=True)
class ContractGrant:
    contract: str
    limit: ContractAuthzLimit
    filter: ContractAuthzFilter

    @classmethod
    def new(
        cls, contract: Address | str, limit: ContractAuthzLimit, filter: ContractAuthzFilter
    ) -> "ContractGrant":
        """Build and validate a grant; invalid limit or filter settings raise."""

        grant = cls(contract=str(contract), limit=limit, filter=filter)
        grant.validate_basic()
        return grant

    def validate_basic(self) -> None:
        require_address(self.contract, "contract")
        try:
            self.limit.validate_basic()
        except StructuralValidationError as exc:
            raise StructuralValidationError(f"limit: {exc}") from exc
        try:
            self.filter.validate_basic()
        except StructuralValidationError as exc:
            raise StructuralValidationError(f"filter: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "contract": self.contract,
            "limit": self.limit.to_dict(),
            "filter": self.filter.to_dict(),
        }


@dataclass(frozen=True)
class ContractExecutionAuthorization:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.ContractExecutionAuthorization"

    grants: tuple[ContractGrant, ...]

    def validate_basic(self) -> None:
        _validate_contract_grants(self.grants)

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "grants": [grant.to_dict() for grant in self.grants]}


@dataclass(frozen=True)
class ContractMigrationAuthorization:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.ContractMigrationAuthorization"

    grants: tuple[ContractGrant, ...]

    def validate_basic(self) -> None:
        _validate_contract_grants(self.grants)

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "grants": [grant.to_dict() for grant in self.grants]}


def _validate_contract_grants(grants: tuple[ContractGrant, ...]) -> None:
    if not grants:
        raise StructuralValidationError("grants must not be empty")
    for index, grant in enumerate(grants):
        try:
            grant.validate_basic()
        except StructuralValidationError as exc:
            raise StructuralValidationError(f"position {index}: {exc}") from exc


@dataclass(frozen=True)
class CodeGrant:
    """Permission to upload code with a given hash.

    ``instantiate_permission`` of ``None`` means the uploaded code carries no
    restriction from this grant.
    """

    code_hash: bytes
    instantiate_permission: AccessConfig | None = None

    def validate_basic(self) -> None:
        if not self.code_hash:
            raise StructuralValidationError("code hash must not be empty")
        if self.instantiate_permission is not None:
            self.instantiate_permission.validate_basic()

    def to_dict(self) -> dict[str, Any]:
        return {
            "code_hash": b64(self.code_hash),
            "instantiate_permission": (
                self.instantiate_permission.to_dict() if self.instantiate_permission else None
            ),
        }


@dataclass(frozen=True)
class StoreCodeAuthorization:
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.StoreCodeAuthorization"

    grants: tuple[CodeGrant, ...]

    def validate_basic(self) -> None:
        if not self.grants:
            raise StructuralValidationError("grants must not be empty")
        if len(self.grants) > 1:
            seen: set[bytes] = set()
            for grant in self.grants:
                if grant.code_hash.decode("utf-8", "replace").lower() == CODE_HASH_WILDCARD:
                    raise StructuralValidationError(
                        "cannot have multiple grants when wildcard grant is one of them"
                    )
                if grant.code_hash in seen:
                    raise StructuralValidationError("duplicate grant")
                seen.add(grant.code_hash)
        for grant in self.grants:
            grant.validate_basic()

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, "grants": [grant.to_dict() for grant in self.grants]}


Authorization = Union[
    ContractExecutionAuthorization, ContractMigrationAuthorization, StoreCodeAuthorization
]


def expiration_from_unix(seconds: int) -> datetime | None:
    """Convert a Unix timestamp to an aware UTC time; ``0`` means no expiration."""

    if seconds == 0:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedInputError(f"expiration {seconds} out of range") from exc


@dataclass(frozen=True)
class MsgGrant:
    type_url: ClassVar[str] = "/cosmos.authz.v1beta1.MsgGrant"

    granter: str
    grantee: str
    authorization: Authorization
    expiration: datetime | None = None

    def validate_basic(self) -> None:
        require_address(self.granter, "granter")
        require_address(self.grantee, "grantee")
        if self.granter == self.grantee:
            raise StructuralValidationError("granter and grantee cannot be same")
        self.authorization.validate_basic()

    def to_dict(self) -> dict[str, Any]:
        expiration = None
        if self.expiration is not None:
            expiration = self.expiration.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return {
            "@type": self.type_url,
            "granter": self.granter,
            "grantee": self.grantee,
            "grant": {"authorization": self.authorization.to_dict(), "expiration": expiration},
        }
