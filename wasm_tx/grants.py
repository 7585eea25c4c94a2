"""Builders for authz grant messages.

Contract grants resolve their limit and filter from flag combinations using
explicit decision tables: exactly one row must match, everything else fails.
Store-code grants are parsed from ``code_hash:permission`` tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from .access import parse_access_config
from .address import Address
from .authz import (
    AcceptedMessageKeysFilter,
    AcceptedMessagesFilter,
    AllowAllMessagesFilter,
    CodeGrant,
    CombinedLimit,
    ContractAuthzFilter,
    ContractAuthzLimit,
    ContractExecutionAuthorization,
    ContractGrant,
    ContractMigrationAuthorization,
    MaxCallsLimit,
    MaxFundsLimit,
    MsgGrant,
    StoreCodeAuthorization,
    expiration_from_unix,
)
from .coins import Coins, parse_coins_normalized
from .errors import (
    ConflictingFlagsError,
    MalformedInputError,
    MissingRequiredError,
    UnsupportedValueError,
)

logger = logging.getLogger(__name__)

GRANT_KIND_EXECUTION = "execution"
GRANT_KIND_MIGRATION = "migration"

_AUTHORIZATION_KINDS = {
    GRANT_KIND_EXECUTION: ContractExecutionAuthorization,
    GRANT_KIND_MIGRATION: ContractMigrationAuthorization,
}


@dataclass(frozen=True)
class LimitFlags:
    max_funds: str = ""
    max_calls: int = 0
    no_token_transfer: bool = False


@dataclass(frozen=True)
class FilterFlags:
    allow_all_messages: bool = False
    allow_msg_keys: tuple[str, ...] = ()
    allow_raw_msgs: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContractGrantFlags:
    allow_msg_keys: tuple[str, ...] = ()
    allow_raw_msgs: tuple[str, ...] = ()
    max_funds: str = ""
    max_calls: int = 0
    expiration: int = 0
    allow_all_messages: bool = False
    no_token_transfer: bool = False

    def limit_flags(self) -> LimitFlags:
        return LimitFlags(
            max_funds=self.max_funds,
            max_calls=self.max_calls,
            no_token_transfer=self.no_token_transfer,
        )

    def filter_flags(self) -> FilterFlags:
        return FilterFlags(
            allow_all_messages=self.allow_all_messages,
            allow_msg_keys=self.allow_msg_keys,
            allow_raw_msgs=self.allow_raw_msgs,
        )


def _max_funds(flags: LimitFlags) -> Coins:
    try:
        return parse_coins_normalized(flags.max_funds)
    except MalformedInputError as exc:
        raise MalformedInputError(f"max funds: {exc}") from exc


# (max funds set, max calls set, no token transfer) -> limit
_LIMIT_TABLE: dict[tuple[bool, bool, bool], Callable[[LimitFlags], ContractAuthzLimit]] = {
    (True, True, False): lambda f: CombinedLimit(calls_remaining=f.max_calls, amounts=_max_funds(f)),
    (True, False, False): lambda f: MaxFundsLimit(amounts=_max_funds(f)),
    (False, True, True): lambda f: MaxCallsLimit(remaining=f.max_calls),
}


def resolve_limit(flags: LimitFlags) -> ContractAuthzLimit:
    key = (flags.max_funds != "", flags.max_calls != 0, flags.no_token_transfer)
    factory = _LIMIT_TABLE.get(key)
    if factory is None:
        raise ConflictingFlagsError("invalid limit setup")
    return factory(flags)


def resolve_filter(flags: FilterFlags) -> ContractAuthzFilter:
    selectors: list[Callable[[], ContractAuthzFilter]] = []
    if flags.allow_all_messages:
        selectors.append(AllowAllMessagesFilter)
    if flags.allow_msg_keys:
        selectors.append(lambda: AcceptedMessageKeysFilter(keys=tuple(flags.allow_msg_keys)))
    if flags.allow_raw_msgs:
        selectors.append(
            lambda: AcceptedMessagesFilter(
                messages=tuple(msg.encode("utf-8") for msg in flags.allow_raw_msgs)
            )
        )

    if len(selectors) > 1:
        raise ConflictingFlagsError("cannot set more than one filter within one grant")
    if not selectors:
        raise MissingRequiredError("invalid filter setup")
    return selectors[0]()


def build_contract_grant(
    granter: Address | str,
    grantee: str,
    kind: str,
    contract: str,
    flags: ContractGrantFlags,
    *,
    prefix: str | None = None,
) -> MsgGrant:
    """Assemble a contract execution or migration grant.

    The expiration is mandatory and checked before the limit and filter are
    looked at. The ``kind`` token selects the authorization wrapper.
    """

    grantee_addr = Address.parse(grantee, prefix)
    contract_addr = Address.parse(contract, prefix)
    if flags.expiration == 0:
        raise MissingRequiredError("expiration must be set")

    limit = resolve_limit(flags.limit_flags())
    filter = resolve_filter(flags.filter_flags())
    grant = ContractGrant.new(contract_addr, limit, filter)

    authorization_cls = _AUTHORIZATION_KINDS.get(kind)
    if authorization_cls is None:
        raise UnsupportedValueError(f"{kind} authorization type not supported")
    authorization = authorization_cls(grants=(grant,))

    logger.debug(
        "Prepared %s grant for %s on %s with %s/%s",
        kind,
        grantee_addr,
        contract_addr,
        type(limit).__name__,
        type(filter).__name__,
    )
    return MsgGrant(
        granter=str(granter),
        grantee=str(grantee_addr),
        authorization=authorization,
        expiration=expiration_from_unix(flags.expiration),
    )


def parse_store_code_grants(tokens: Sequence[str], prefix: str | None = None) -> list[CodeGrant]:
    """Parse ``code_hash:permission`` tokens into code grants.

    ``permission`` is ``*`` (no restriction), ``nobody``, ``everybody`` or a
    comma separated address list. The hash is kept as the literal token bytes.
    Input order is preserved and repeated hashes are kept as given.
    """

    grants: list[CodeGrant] = []
    for token in tokens:
        parts = token.split(":")
        if len(parts) != 2:
            raise MalformedInputError("invalid format")
        code_hash, policy = parts
        if policy == "*":
            grants.append(CodeGrant(code_hash=code_hash.encode("utf-8")))
            continue
        permission = parse_access_config(policy, prefix)
        grants.append(
            CodeGrant(code_hash=code_hash.encode("utf-8"), instantiate_permission=permission)
        )
    return grants


def build_store_code_grant(
    granter: Address | str,
    grantee: str,
    tokens: Sequence[str],
    expiration: int = 0,
    *,
    prefix: str | None = None,
) -> MsgGrant:
    """Assemble a code upload grant; an expiration of ``0`` means none."""

    grantee_addr = Address.parse(grantee, prefix)
    grants = parse_store_code_grants(tokens, prefix)
    authorization = StoreCodeAuthorization(grants=tuple(grants))
    logger.debug("Prepared store-code grant for %s with %d code grants", grantee_addr, len(grants))
    return MsgGrant(
        granter=str(granter),
        grantee=str(grantee_addr),
        authorization=authorization,
        expiration=expiration_from_unix(expiration),
    )
