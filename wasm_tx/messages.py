"""Wasm module messages and their structural validation.

Each request type mirrors a ``cosmwasm.wasm.v1`` transaction message. The
objects are immutable and are handed to the signer as-is; ``to_dict`` renders
the protobuf JSON form (bytes as base64, 64-bit integers as strings).
Instantiate and execute payloads are carried as opaque bytes and never parsed
here.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Protocol

from .access import AccessConfig
from .address import Address
from .coins import Coins
from .errors import MalformedInputError, StructuralValidationError
from .wasm_code import MAX_WASM_SIZE

MAX_LABEL_SIZE = 128
MAX_SALT_SIZE = 64


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def require_address(value: str, what: str) -> None:
    try:
        Address.parse(value)
    except MalformedInputError as exc:
        raise StructuralValidationError(f"{what}: {exc}") from exc


def validate_label(label: str) -> None:
    if label == "":
        raise StructuralValidationError("label is required")
    if len(label) > MAX_LABEL_SIZE:
        raise StructuralValidationError(f"label cannot be longer than {MAX_LABEL_SIZE} characters")
    if label != label.strip():
        raise StructuralValidationError("label must not start/end with whitespaces")


def _require_code_id(code_id: int) -> None:
    if code_id == 0:
        raise StructuralValidationError("code id is required")


def _require_funds(funds: Coins) -> None:
    if not funds.is_valid():
        raise StructuralValidationError(f"invalid coins: {funds}")


class WasmMsg:
    """Common behaviour of the wasm messages in this module."""

    type_url: ClassVar[str] = ""

    def validate_basic(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def body(self) -> dict[str, Any]:  # pragma: no cover - overridden
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type_url, **self.body()}


@dataclass(frozen=True)
class StoreCodeRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgStoreCode"

    sender: str
    wasm_byte_code: bytes
    instantiate_permission: AccessConfig | None = None

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        if not self.wasm_byte_code:
            raise StructuralValidationError("wasm byte code is required")
        if len(self.wasm_byte_code) > MAX_WASM_SIZE:
            raise StructuralValidationError(
                f"wasm byte code cannot be longer than {MAX_WASM_SIZE} bytes"
            )
        if self.instantiate_permission is not None:
            self.instantiate_permission.validate_basic()

    def body(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "wasm_byte_code": b64(self.wasm_byte_code),
            "instantiate_permission": (
                self.instantiate_permission.to_dict() if self.instantiate_permission else None
            ),
        }


@dataclass(frozen=True)
class InstantiateRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgInstantiateContract"

    sender: str
    code_id: int
    label: str
    funds: Coins
    msg: bytes
    admin: str = ""

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        _require_code_id(self.code_id)
        validate_label(self.label)
        _require_funds(self.funds)
        if self.admin:
            require_address(self.admin, "admin")

    def body(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "admin": self.admin,
            "code_id": str(self.code_id),
            "label": self.label,
            "msg": b64(self.msg),
            "funds": self.funds.to_list(),
        }


@dataclass(frozen=True)
class Instantiate2Request(InstantiateRequest):
    """Instantiate request whose contract address is derived from ``salt``.

    With ``fix_msg`` the instantiate payload is folded into the address
    derivation as well.
    """

    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgInstantiateContract2"

    salt: bytes = b""
    fix_msg: bool = False

    @classmethod
    def from_instantiate(
        cls, request: InstantiateRequest, salt: bytes, fix_msg: bool
    ) -> "Instantiate2Request":
        shared = {f.name: getattr(request, f.name) for f in fields(InstantiateRequest)}
        return cls(**shared, salt=salt, fix_msg=fix_msg)

    def validate_basic(self) -> None:
        super().validate_basic()
        if not self.salt:
            raise StructuralValidationError("salt is required")
        if len(self.salt) > MAX_SALT_SIZE:
            raise StructuralValidationError(f"salt cannot be longer than {MAX_SALT_SIZE} bytes")

    def body(self) -> dict[str, Any]:
        data = super().body()
        data["salt"] = b64(self.salt)
        data["fix_msg"] = self.fix_msg
        return data


@dataclass(frozen=True)
class ExecuteRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgExecuteContract"

    sender: str
    contract: str
    funds: Coins
    msg: bytes

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        require_address(self.contract, "contract")
        _require_funds(self.funds)

    def body(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "contract": self.contract,
            "msg": b64(self.msg),
            "funds": self.funds.to_list(),
        }


@dataclass(frozen=True)
class MigrateRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgMigrateContract"

    sender: str
    contract: str
    code_id: int
    msg: bytes

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        require_address(self.contract, "contract")
        _require_code_id(self.code_id)

    def body(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "contract": self.contract,
            "code_id": str(self.code_id),
            "msg": b64(self.msg),
        }


@dataclass(frozen=True)
class UpdateAdminRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgUpdateAdmin"

    sender: str
    new_admin: str
    contract: str

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        require_address(self.new_admin, "new admin")
        require_address(self.contract, "contract")

    def body(self) -> dict[str, Any]:
        return {"sender": self.sender, "new_admin": self.new_admin, "contract": self.contract}


@dataclass(frozen=True)
class ClearAdminRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgClearAdmin"

    sender: str
    contract: str

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        require_address(self.contract, "contract")

    def body(self) -> dict[str, Any]:
        return {"sender": self.sender, "contract": self.contract}


@dataclass(frozen=True)
class UpdateInstantiateConfigRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgUpdateInstantiateConfig"

    sender: str
    code_id: int
    new_instantiate_permission: AccessConfig

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        _require_code_id(self.code_id)
        self.new_instantiate_permission.validate_basic()

    def body(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "code_id": str(self.code_id),
            "new_instantiate_permission": self.new_instantiate_permission.to_dict(),
        }


@dataclass(frozen=True)
class UpdateContractLabelRequest(WasmMsg):
    type_url: ClassVar[str] = "/cosmwasm.wasm.v1.MsgUpdateContractLabel"

    sender: str
    new_label: str
    contract: str

    def validate_basic(self) -> None:
        require_address(self.sender, "sender")
        require_address(self.contract, "contract")
        validate_label(self.new_label)

    def body(self) -> dict[str, Any]:
        return {"sender": self.sender, "new_label": self.new_label, "contract": self.contract}


class StructuralValidator(Protocol):
    """Protocol for the post-build check applied to assembled messages."""

    def validate(self, request: WasmMsg) -> None:
        """Raise :class:`StructuralValidationError` when ``request`` is malformed."""


class BasicValidator:
    """Validator that runs each message's own ``validate_basic``."""

    def validate(self, request: WasmMsg) -> None:
        request.validate_basic()
