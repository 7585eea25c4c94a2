"""Command-line interface for building wasm transactions.

Each subcommand parses its arguments into an immutable message, runs the
message's basic validation and hands it to a submitter: either the external
signer daemon or, with ``--generate-only``, standard output.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .access import (
    FLAG_INSTANTIATE_ANY_OF_ADDRESSES,
    FLAG_INSTANTIATE_EVERYBODY,
    FLAG_INSTANTIATE_NOBODY,
    FLAG_INSTANTIATE_ONLY_ADDRESS,
    AccessConfigFlags,
)
from .address import Address, resolve_identity
from .builders import (
    InstantiateFlags,
    SaltFlags,
    parse_clear_admin_args,
    parse_execute_args,
    parse_instantiate2_args,
    parse_instantiate_args,
    parse_migrate_args,
    parse_store_code_args,
    parse_update_admin_args,
    parse_update_instantiate_config_args,
    parse_update_label_args,
)
from .coins import parse_coins_normalized
from .config import ClientConfig, ConfigurationError, load_client_config, set_default_config_path
from .encoding import ArgDecoder
from .errors import MalformedInputError, TxBuildError
from .flags import split_csv
from .grants import ContractGrantFlags, build_contract_grant, build_store_code_grant
from .keys import StaticKeyring
from .signer_client import (
    GenerateOnlySubmitter,
    SignableMsg,
    SignerRPCClient,
    Submitter,
    TxOptions,
)

logger = logging.getLogger(__name__)

COMPACT_JSON_SEPARATORS = (",", ":")


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


@dataclass
class CommandContext:
    config: ClientConfig
    keyring: StaticKeyring
    sender: Address
    submitter: Submitter
    options: TxOptions

    @property
    def prefix(self) -> str:
        return self.config.bech32_prefix


def _string_slice(values: Iterable[str] | None) -> tuple[str, ...]:
    """Flatten repeated, comma separated flag values."""

    items: list[str] = []
    for value in values or ():
        items.extend(split_csv(value))
    return tuple(items)


def _uint64(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid unsigned integer: {raw}") from exc
    if value < 0 or value >= 1 << 64:
        raise argparse.ArgumentTypeError(f"value out of range: {raw}")
    return value


def _add_tx_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("transaction flags")
    group.add_argument(
        "--from",
        dest="from_key",
        default=None,
        help="Name or address of the signing key (default: chain.from in the config)",
    )
    group.add_argument("--chain-id", default=None, help="Chain id of the target network")
    group.add_argument("--signer-url", default=None, help="JSON-RPC endpoint of the signer daemon")
    group.add_argument(
        "--generate-only",
        action="store_true",
        help="Print the unsigned transaction instead of submitting it",
    )
    group.add_argument("--memo", default="", help="Memo attached to the transaction")
    group.add_argument("--fees", default="", help="Fees to pay, e.g. 5000uwasm")
    group.add_argument("--gas", type=_uint64, default=None, help="Gas limit")


def _add_instantiate_permission_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        f"--{FLAG_INSTANTIATE_EVERYBODY}",
        dest="instantiate_everybody",
        default=None,
        help="Everybody can instantiate a contract from the code, optional",
    )
    parser.add_argument(
        f"--{FLAG_INSTANTIATE_NOBODY}",
        dest="instantiate_nobody",
        default=None,
        help="Nobody except the governance process can instantiate a contract from the code, optional",
    )
    parser.add_argument(
        f"--{FLAG_INSTANTIATE_ONLY_ADDRESS}",
        dest="instantiate_only_address",
        default="",
        help=f"Removed: use --{FLAG_INSTANTIATE_ANY_OF_ADDRESSES} instead",
    )
    parser.add_argument(
        f"--{FLAG_INSTANTIATE_ANY_OF_ADDRESSES}",
        dest="instantiate_anyof_addresses",
        action="append",
        default=None,
        help="Any of the addresses can instantiate a contract from the code, optional",
    )


def _add_instantiate_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--amount", default="", help="Coins to send to the contract during instantiation")
    parser.add_argument("--label", default="", help="A human-readable name for this contract in lists")
    parser.add_argument("--admin", default="", help="Address or key name of an admin")
    parser.add_argument(
        "--no-admin",
        action="store_true",
        help="You must set this explicitly if you don't want an admin",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wasm-tx", description="Wasm transaction subcommands")
    parser.add_argument("--config", default=None, help="Path to the YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    store = subparsers.add_parser(
        "store", aliases=["upload", "st", "s"], help="Upload a wasm binary"
    )
    store.add_argument("wasm_file", help="Path to a wasm binary or gzipped wasm binary")
    _add_instantiate_permission_flags(store)
    _add_tx_flags(store)
    store.set_defaults(func=cmd_store)

    instantiate = subparsers.add_parser(
        "instantiate",
        aliases=["start", "init", "inst", "i"],
        help="Instantiate a wasm contract",
    )
    instantiate.add_argument("code_id", help="Code id to instantiate")
    instantiate.add_argument("init_msg", help="JSON encoded init args")
    _add_instantiate_flags(instantiate)
    _add_tx_flags(instantiate)
    instantiate.set_defaults(func=cmd_instantiate)

    instantiate2 = subparsers.add_parser(
        "instantiate2", help="Instantiate a wasm contract with predictable address"
    )
    instantiate2.add_argument("code_id", help="Code id to instantiate")
    instantiate2.add_argument("init_msg", help="JSON encoded init args")
    instantiate2.add_argument("salt", help="Salt used for the address derivation (hex by default)")
    _add_instantiate_flags(instantiate2)
    instantiate2.add_argument(
        "--fix-msg",
        action="store_true",
        help="Include the init args in the predictable address generation",
    )
    ArgDecoder.register_flags(instantiate2, "salt")
    _add_tx_flags(instantiate2)
    instantiate2.set_defaults(func=cmd_instantiate2)

    execute = subparsers.add_parser(
        "execute",
        aliases=["run", "call", "exec", "ex", "e"],
        help="Execute a command on a wasm contract",
    )
    execute.add_argument("contract", help="Contract address")
    execute.add_argument("exec_msg", help="JSON encoded send args")
    execute.add_argument("--amount", default="", help="Coins to send to the contract along with command")
    _add_tx_flags(execute)
    execute.set_defaults(func=cmd_execute)

    migrate = subparsers.add_parser(
        "migrate", aliases=["update", "mig", "m"], help="Migrate a wasm contract to a new code version"
    )
    migrate.add_argument("contract", help="Contract address")
    migrate.add_argument("code_id", help="New code id")
    migrate.add_argument("migrate_msg", help="JSON encoded migrate args")
    _add_tx_flags(migrate)
    migrate.set_defaults(func=cmd_migrate)

    set_admin = subparsers.add_parser(
        "set-contract-admin", aliases=["new-admin", "admin"], help="Set new admin for a contract"
    )
    set_admin.add_argument("contract", help="Contract address")
    set_admin.add_argument("new_admin", help="Address or key name of the new admin")
    _add_tx_flags(set_admin)
    set_admin.set_defaults(func=cmd_set_contract_admin)

    clear_admin = subparsers.add_parser(
        "clear-contract-admin", aliases=["clear-admin"], help="Clears admin for a contract to prevent further migrations"
    )
    clear_admin.add_argument("contract", help="Contract address")
    _add_tx_flags(clear_admin)
    clear_admin.set_defaults(func=cmd_clear_contract_admin)

    set_label = subparsers.add_parser("set-contract-label", help="Set new label for a contract")
    set_label.add_argument("contract", help="Contract address")
    set_label.add_argument("new_label", help="New label")
    _add_tx_flags(set_label)
    set_label.set_defaults(func=cmd_set_contract_label)

    update_config = subparsers.add_parser(
        "update-instantiate-config", help="Update instantiate config for a codeID"
    )
    update_config.add_argument("code_id", help="Code id")
    _add_instantiate_permission_flags(update_config)
    _add_tx_flags(update_config)
    update_config.set_defaults(func=cmd_update_instantiate_config)

    grant = subparsers.add_parser("grant", help="Grant an authz permission")
    grant_subparsers = grant.add_subparsers(dest="grant_command", required=True)

    grant_contract = grant_subparsers.add_parser(
        "contract", help="Grant authorization to interact with a contract on behalf of you"
    )
    grant_contract.add_argument("grantee", help="Grantee address")
    grant_contract.add_argument("kind", help='Message type: "execution" or "migration"')
    grant_contract.add_argument("contract", help="Contract address")
    grant_contract.add_argument("--allow-msg-keys", action="append", default=None, help="Allowed msg keys")
    grant_contract.add_argument(
        "--allow-raw-msgs",
        action="append",
        default=None,
        help="Allowed raw msg; repeat the flag for several messages",
    )
    grant_contract.add_argument("--max-calls", type=_uint64, default=0, help="Maximal number of calls to the contract")
    grant_contract.add_argument("--max-funds", default="", help="Maximal amount of tokens transferable to the contract.")
    grant_contract.add_argument("--expiration", type=int, default=0, help="The Unix timestamp.")
    grant_contract.add_argument("--allow-all-messages", action="store_true", help="Allow all messages")
    grant_contract.add_argument("--no-token-transfer", action="store_true", help="Don't allow token transfer")
    _add_tx_flags(grant_contract)
    grant_contract.set_defaults(func=cmd_grant_contract)

    grant_store_code = grant_subparsers.add_parser(
        "store-code", help="Grant authorization to upload contract code on behalf of you"
    )
    grant_store_code.add_argument("grantee", help="Grantee address")
    grant_store_code.add_argument(
        "grants", nargs="+", help="code_hash:permission where permission is *, nobody, everybody or addresses"
    )
    grant_store_code.add_argument("--expiration", type=int, default=0, help="The Unix timestamp.")
    _add_tx_flags(grant_store_code)
    grant_store_code.set_defaults(func=cmd_grant_store_code)

    return parser


def _access_flags(args: argparse.Namespace) -> AccessConfigFlags:
    return AccessConfigFlags.from_raw(
        any_of_addresses=_string_slice(args.instantiate_anyof_addresses),
        everybody=args.instantiate_everybody,
        nobody=args.instantiate_nobody,
        only_address=args.instantiate_only_address,
    )


def _instantiate_flags(args: argparse.Namespace) -> InstantiateFlags:
    return InstantiateFlags(
        amount=args.amount, label=args.label, admin=args.admin, no_admin=args.no_admin
    )


def cmd_store(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_store_code_args(args.wasm_file, ctx.sender, _access_flags(args), prefix=ctx.prefix)


def cmd_instantiate(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_instantiate_args(
        args.code_id,
        args.init_msg,
        ctx.sender,
        _instantiate_flags(args),
        ctx.keyring,
        prefix=ctx.prefix,
    )


def cmd_instantiate2(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_instantiate2_args(
        args.code_id,
        args.init_msg,
        args.salt,
        ctx.sender,
        _instantiate_flags(args),
        ctx.keyring,
        fix_msg=args.fix_msg,
        salt_flags=SaltFlags(ascii=args.ascii, hex=args.hex, b64=args.b64),
        prefix=ctx.prefix,
    )


def cmd_execute(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_execute_args(args.contract, args.exec_msg, ctx.sender, args.amount)


def cmd_migrate(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_migrate_args(args.contract, args.code_id, args.migrate_msg, ctx.sender)


def cmd_set_contract_admin(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_update_admin_args(
        args.contract, args.new_admin, ctx.sender, ctx.keyring, prefix=ctx.prefix
    )


def cmd_clear_contract_admin(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_clear_admin_args(args.contract, ctx.sender)


def cmd_set_contract_label(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_update_label_args(args.contract, args.new_label, ctx.sender)


def cmd_update_instantiate_config(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return parse_update_instantiate_config_args(
        args.code_id, ctx.sender, _access_flags(args), prefix=ctx.prefix
    )


def cmd_grant_contract(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    flags = ContractGrantFlags(
        allow_msg_keys=_string_slice(args.allow_msg_keys),
        allow_raw_msgs=tuple(args.allow_raw_msgs or ()),
        max_funds=args.max_funds,
        max_calls=args.max_calls,
        expiration=args.expiration,
        allow_all_messages=args.allow_all_messages,
        no_token_transfer=args.no_token_transfer,
    )
    return build_contract_grant(
        ctx.sender, args.grantee, args.kind, args.contract, flags, prefix=ctx.prefix
    )


def cmd_grant_store_code(args: argparse.Namespace, ctx: CommandContext) -> SignableMsg:
    return build_store_code_grant(
        ctx.sender, args.grantee, args.grants, args.expiration, prefix=ctx.prefix
    )


def _build_context(args: argparse.Namespace) -> CommandContext:
    config = load_client_config(
        overrides={
            "chain_id": args.chain_id,
            "signer_endpoint": args.signer_url,
            "from_key": args.from_key,
        }
    )
    keyring = config.keyring()
    if not config.from_key:
        raise CLIError("--from is required (or set chain.from in the config file)")
    sender = resolve_identity(config.from_key, keyring, config.bech32_prefix)

    try:
        fees = parse_coins_normalized(args.fees)
    except MalformedInputError as exc:
        raise CLIError(f"--fees: {exc}") from exc
    options = TxOptions(
        chain_id=config.chain_id,
        signer=config.from_key,
        memo=args.memo,
        fees=fees,
        gas=args.gas,
    )
    submitter: Submitter
    if args.generate_only:
        submitter = GenerateOnlySubmitter()
    else:
        if not config.chain_id:
            raise CLIError("--chain-id is required when submitting to the signer")
        submitter = SignerRPCClient(config.signer_endpoint)
    return CommandContext(
        config=config, keyring=keyring, sender=sender, submitter=submitter, options=options
    )


def run_command(args: argparse.Namespace, ctx: CommandContext) -> dict[str, Any]:
    """Build the message for ``args``, validate it and submit it."""

    message = args.func(args, ctx)
    message.validate_basic()
    logger.info("Submitting %s", type(message).__name__)
    return ctx.submitter.submit([message], ctx.options)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    set_default_config_path(args.config)
    try:
        ctx = _build_context(args)
        result = run_command(args, ctx)
        if not args.generate_only:
            print(json.dumps(result, separators=COMPACT_JSON_SEPARATORS))
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
    except (CLIError, ConfigurationError, TxBuildError) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
