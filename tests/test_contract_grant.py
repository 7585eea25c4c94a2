from datetime import datetime, timezone
import itertools

import pytest

from wasm_tx.authz import (
    AcceptedMessageKeysFilter,
    AcceptedMessagesFilter,
    AllowAllMessagesFilter,
    CombinedLimit,
    ContractExecutionAuthorization,
    ContractMigrationAuthorization,
    MaxCallsLimit,
    MaxFundsLimit,
)
from wasm_tx.coins import Coin, Coins
from wasm_tx.errors import (
    ConflictingFlagsError,
    MalformedInputError,
    MissingRequiredError,
    StructuralValidationError,
    UnsupportedValueError,
)
from wasm_tx.grants import (
    ContractGrantFlags,
    FilterFlags,
    LimitFlags,
    build_contract_grant,
    resolve_filter,
    resolve_limit,
)

EXPIRATION = 1667979596
UWASM_100 = Coins((Coin("uwasm", 100),))

VALID_LIMITS = {
    ("100uwasm", 5, False): CombinedLimit(calls_remaining=5, amounts=UWASM_100),
    ("100uwasm", 0, False): MaxFundsLimit(amounts=UWASM_100),
    ("", 5, True): MaxCallsLimit(remaining=5),
}


@pytest.mark.parametrize(
    "max_funds, max_calls, no_token_transfer",
    list(itertools.product(["", "100uwasm"], [0, 5], [False, True])),
)
def test_limit_decision_table(max_funds, max_calls, no_token_transfer) -> None:
    flags = LimitFlags(max_funds=max_funds, max_calls=max_calls, no_token_transfer=no_token_transfer)
    expected = VALID_LIMITS.get((max_funds, max_calls, no_token_transfer))

    if expected is None:
        with pytest.raises(ConflictingFlagsError, match="invalid limit setup"):
            resolve_limit(flags)
    else:
        assert resolve_limit(flags) == expected


def test_bad_max_funds_syntax() -> None:
    with pytest.raises(MalformedInputError, match="^max funds: "):
        resolve_limit(LimitFlags(max_funds="abc"))


@pytest.mark.parametrize(
    "flags, expected",
    [
        (FilterFlags(allow_all_messages=True), AllowAllMessagesFilter()),
        (FilterFlags(allow_msg_keys=("inc", "reset")), AcceptedMessageKeysFilter(("inc", "reset"))),
        (FilterFlags(allow_raw_msgs=('{"inc":{}}',)), AcceptedMessagesFilter((b'{"inc":{}}',))),
    ],
)
def test_single_filter_selector(flags, expected) -> None:
    assert resolve_filter(flags) == expected


@pytest.mark.parametrize(
    "flags",
    [
        FilterFlags(allow_all_messages=True, allow_msg_keys=("inc",)),
        FilterFlags(allow_all_messages=True, allow_raw_msgs=("{}",)),
        FilterFlags(allow_msg_keys=("inc",), allow_raw_msgs=("{}",)),
        FilterFlags(allow_all_messages=True, allow_msg_keys=("inc",), allow_raw_msgs=("{}",)),
    ],
)
def test_multiple_filters_conflict(flags) -> None:
    with pytest.raises(ConflictingFlagsError, match="cannot set more than one filter within one grant"):
        resolve_filter(flags)


def test_no_filter_selected() -> None:
    with pytest.raises(MissingRequiredError, match="invalid filter setup"):
        resolve_filter(FilterFlags())


def test_combined_limit_grant(sender, make_address) -> None:
    grantee, contract = make_address(2), make_address(7)
    flags = ContractGrantFlags(
        max_calls=5, max_funds="100uwasm", expiration=EXPIRATION, allow_all_messages=True
    )

    msg = build_contract_grant(sender, grantee, "execution", contract, flags, prefix="wasm")

    assert msg.granter == sender
    assert msg.grantee == grantee
    assert msg.expiration == datetime(2022, 11, 9, 7, 39, 56, tzinfo=timezone.utc)
    assert isinstance(msg.authorization, ContractExecutionAuthorization)
    (grant,) = msg.authorization.grants
    assert grant.contract == contract
    assert grant.limit == CombinedLimit(calls_remaining=5, amounts=UWASM_100)
    msg.validate_basic()


def test_max_calls_migration_grant(sender, make_address) -> None:
    flags = ContractGrantFlags(
        max_calls=5, no_token_transfer=True, expiration=EXPIRATION, allow_msg_keys=("migrate",)
    )

    msg = build_contract_grant(sender, make_address(2), "migration", make_address(7), flags)

    assert isinstance(msg.authorization, ContractMigrationAuthorization)
    assert msg.authorization.grants[0].limit == MaxCallsLimit(remaining=5)


def test_expiration_is_checked_before_limit_and_filter(sender, make_address) -> None:
    with pytest.raises(MissingRequiredError, match="expiration must be set"):
        build_contract_grant(sender, make_address(2), "execution", make_address(7), ContractGrantFlags())


def test_unsupported_kind(sender, make_address) -> None:
    flags = ContractGrantFlags(max_calls=1, no_token_transfer=True, expiration=EXPIRATION, allow_all_messages=True)

    with pytest.raises(UnsupportedValueError, match="^instantiation authorization type not supported"):
        build_contract_grant(sender, make_address(2), "instantiation", make_address(7), flags)


def test_invalid_grantee(sender, make_address) -> None:
    with pytest.raises(MalformedInputError):
        build_contract_grant(sender, "bob", "execution", make_address(7), ContractGrantFlags(expiration=1))


def test_zero_max_funds_fail_grant_validation(sender, make_address) -> None:
    flags = ContractGrantFlags(max_funds="0uwasm", expiration=EXPIRATION, allow_all_messages=True)

    with pytest.raises(StructuralValidationError, match="^limit: amounts must not be empty"):
        build_contract_grant(sender, make_address(2), "execution", make_address(7), flags)


def test_raw_messages_must_be_json(sender, make_address) -> None:
    flags = ContractGrantFlags(
        max_calls=1, no_token_transfer=True, expiration=EXPIRATION, allow_raw_msgs=("not json",)
    )

    with pytest.raises(StructuralValidationError, match="^filter: invalid raw message"):
        build_contract_grant(sender, make_address(2), "execution", make_address(7), flags)


def test_grant_to_dict(sender, make_address) -> None:
    flags = ContractGrantFlags(
        max_calls=5, no_token_transfer=True, expiration=EXPIRATION, allow_all_messages=True
    )

    data = build_contract_grant(sender, make_address(2), "execution", make_address(7), flags).to_dict()

    assert data["@type"] == "/cosmos.authz.v1beta1.MsgGrant"
    assert data["grant"]["expiration"] == "2022-11-09T07:39:56Z"
    authorization = data["grant"]["authorization"]
    assert authorization["@type"] == "/cosmwasm.wasm.v1.ContractExecutionAuthorization"
    assert authorization["grants"][0]["limit"] == {
        "@type": "/cosmwasm.wasm.v1.MaxCallsLimit",
        "remaining": "5",
    }
    assert authorization["grants"][0]["filter"] == {"@type": "/cosmwasm.wasm.v1.AllowAllMessagesFilter"}


def test_granter_and_grantee_must_differ(sender, make_address) -> None:
    flags = ContractGrantFlags(max_calls=1, no_token_transfer=True, expiration=EXPIRATION, allow_all_messages=True)

    msg = build_contract_grant(sender, sender, "execution", make_address(7), flags)

    with pytest.raises(StructuralValidationError, match="cannot be same"):
        msg.validate_basic()
