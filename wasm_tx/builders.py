"""Builders turning command arguments into wasm module requests.

Every builder validates its input in a fixed order and raises the first
problem it finds. Requests that the chain validates structurally are passed
through a :class:`~wasm_tx.messages.StructuralValidator` before they are
returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .access import AccessConfigFlags, parse_access_config_flags
from .address import Address, resolve_identity
from .coins import Coins, parse_coins_normalized
from .encoding import ArgDecoder
from .errors import (
    ConflictingFlagsError,
    MalformedInputError,
    MissingRequiredError,
    ResolutionError,
)
from .flags import parse_uint64
from .keys import KeyLookup
from .messages import (
    BasicValidator,
    ClearAdminRequest,
    ExecuteRequest,
    Instantiate2Request,
    InstantiateRequest,
    MigrateRequest,
    StoreCodeRequest,
    StructuralValidator,
    UpdateAdminRequest,
    UpdateContractLabelRequest,
    UpdateInstantiateConfigRequest,
    WasmMsg,
)
from .wasm_code import load_wasm_code

logger = logging.getLogger(__name__)

DEFAULT_VALIDATOR = BasicValidator()


@dataclass(frozen=True)
class InstantiateFlags:
    amount: str = ""
    label: str = ""
    admin: str = ""
    no_admin: bool = False


@dataclass(frozen=True)
class SaltFlags:
    """Codec overrides for the instantiate2 salt; hex is used when none is set."""

    ascii: bool = False
    hex: bool = False
    b64: bool = False


def _parse_amount(raw: str) -> Coins:
    try:
        return parse_coins_normalized(raw)
    except MalformedInputError as exc:
        raise MalformedInputError(f"amount: {exc}") from exc


def _parse_code_id(raw: str) -> int:
    return parse_uint64(raw, "code id")


def _checked(request: WasmMsg, validator: StructuralValidator | None) -> WasmMsg:
    (validator or DEFAULT_VALIDATOR).validate(request)
    return request


def parse_store_code_args(
    wasm_file: str | Path,
    sender: Address | str,
    access_flags: AccessConfigFlags,
    *,
    prefix: str | None = None,
    validator: StructuralValidator | None = None,
) -> StoreCodeRequest:
    """Build a code upload request from a wasm (or gzipped wasm) file."""

    wasm = load_wasm_code(wasm_file)
    permission = parse_access_config_flags(access_flags, prefix)
    request = StoreCodeRequest(
        sender=str(sender), wasm_byte_code=wasm, instantiate_permission=permission
    )
    logger.debug(
        "Prepared store code request with %d bytes, permission=%s",
        len(wasm),
        permission.permission.name if permission else "default",
    )
    return _checked(request, validator)  # type: ignore[return-value]


def resolve_admin(
    flags: InstantiateFlags, keyring: KeyLookup, prefix: str | None = None
) -> str:
    """Apply the admin policy: an admin or an explicit ``--no-admin``, never both."""

    if not flags.admin and not flags.no_admin:
        raise MissingRequiredError(
            "you must set an admin or explicitly pass --no-admin to make it immutable"
        )
    if flags.admin and flags.no_admin:
        raise ConflictingFlagsError(
            "you set an admin and passed --no-admin, those cannot both be true"
        )
    if not flags.admin:
        return ""
    try:
        return str(resolve_identity(flags.admin, keyring, prefix))
    except ResolutionError as exc:
        raise ResolutionError(f"admin {exc}") from exc


def parse_instantiate_args(
    raw_code_id: str,
    init_msg: str,
    sender: Address | str,
    flags: InstantiateFlags,
    keyring: KeyLookup,
    *,
    prefix: str | None = None,
    validator: StructuralValidator | None = None,
) -> InstantiateRequest:
    code_id = _parse_code_id(raw_code_id)
    funds = _parse_amount(flags.amount)
    if flags.label == "":
        raise MissingRequiredError("label is required on all contracts")
    admin = resolve_admin(flags, keyring, prefix)

    request = InstantiateRequest(
        sender=str(sender),
        code_id=code_id,
        label=flags.label,
        funds=funds,
        msg=init_msg.encode("utf-8"),
        admin=admin,
    )
    logger.debug("Prepared instantiate request for code %d (admin=%s)", code_id, admin or "none")
    return _checked(request, validator)  # type: ignore[return-value]


def parse_instantiate2_args(
    raw_code_id: str,
    init_msg: str,
    raw_salt: str,
    sender: Address | str,
    flags: InstantiateFlags,
    keyring: KeyLookup,
    *,
    fix_msg: bool = False,
    salt_flags: SaltFlags | None = None,
    prefix: str | None = None,
    validator: StructuralValidator | None = None,
) -> Instantiate2Request:
    """Build an instantiate request with a predictable contract address.

    The salt is decoded before anything else so that a bad salt is reported
    even when other arguments are also wrong.
    """

    salt_flags = salt_flags or SaltFlags()
    try:
        salt = ArgDecoder().decode(
            raw_salt, ascii=salt_flags.ascii, hex=salt_flags.hex, b64=salt_flags.b64
        )
    except MalformedInputError as exc:
        raise MalformedInputError(f"salt: {exc}") from exc

    base = parse_instantiate_args(
        raw_code_id, init_msg, sender, flags, keyring, prefix=prefix, validator=validator
    )
    return Instantiate2Request.from_instantiate(base, salt=salt, fix_msg=fix_msg)


def parse_execute_args(
    contract: str, exec_msg: str, sender: Address | str, amount: str = ""
) -> ExecuteRequest:
    """Build a contract call. The contract address is passed through unchecked."""

    funds = _parse_amount(amount)
    return ExecuteRequest(
        sender=str(sender), contract=contract, funds=funds, msg=exec_msg.encode("utf-8")
    )


def parse_migrate_args(
    contract: str,
    raw_code_id: str,
    migrate_msg: str,
    sender: Address | str,
    *,
    validator: StructuralValidator | None = None,
) -> MigrateRequest:
    code_id = _parse_code_id(raw_code_id)
    request = MigrateRequest(
        sender=str(sender), contract=contract, code_id=code_id, msg=migrate_msg.encode("utf-8")
    )
    return _checked(request, validator)  # type: ignore[return-value]


def parse_update_admin_args(
    contract: str,
    new_admin: str,
    sender: Address | str,
    keyring: KeyLookup,
    *,
    prefix: str | None = None,
    validator: StructuralValidator | None = None,
) -> UpdateAdminRequest:
    try:
        admin = resolve_identity(new_admin, keyring, prefix)
    except ResolutionError as exc:
        raise ResolutionError(f"new admin {exc}") from exc
    request = UpdateAdminRequest(sender=str(sender), new_admin=str(admin), contract=contract)
    return _checked(request, validator)  # type: ignore[return-value]


def parse_clear_admin_args(
    contract: str, sender: Address | str, *, validator: StructuralValidator | None = None
) -> ClearAdminRequest:
    request = ClearAdminRequest(sender=str(sender), contract=contract)
    return _checked(request, validator)  # type: ignore[return-value]


def parse_update_label_args(
    contract: str,
    new_label: str,
    sender: Address | str,
    *,
    validator: StructuralValidator | None = None,
) -> UpdateContractLabelRequest:
    if new_label == "":
        raise MissingRequiredError("new label is required")
    request = UpdateContractLabelRequest(sender=str(sender), new_label=new_label, contract=contract)
    return _checked(request, validator)  # type: ignore[return-value]


def parse_update_instantiate_config_args(
    raw_code_id: str,
    sender: Address | str,
    access_flags: AccessConfigFlags,
    *,
    prefix: str | None = None,
    validator: StructuralValidator | None = None,
) -> UpdateInstantiateConfigRequest:
    code_id = _parse_code_id(raw_code_id)
    permission = parse_access_config_flags(access_flags, prefix)
    if permission is None:
        raise MissingRequiredError("instantiate config update requires an explicit permission")
    request = UpdateInstantiateConfigRequest(
        sender=str(sender), code_id=code_id, new_instantiate_permission=permission
    )
    return _checked(request, validator)  # type: ignore[return-value]
