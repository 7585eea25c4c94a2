"""Builders for CosmWasm transactions and authz grants."""

from .access import AccessConfig, AccessConfigFlags, AccessType, parse_access_config, parse_access_config_flags
from .address import Address, resolve_identity
from .authz import (
    AcceptedMessageKeysFilter,
    AcceptedMessagesFilter,
    AllowAllMessagesFilter,
    CodeGrant,
    CombinedLimit,
    ContractExecutionAuthorization,
    ContractGrant,
    ContractMigrationAuthorization,
    MaxCallsLimit,
    MaxFundsLimit,
    MsgGrant,
    StoreCodeAuthorization,
)
from .builders import (
    InstantiateFlags,
    SaltFlags,
    parse_execute_args,
    parse_instantiate2_args,
    parse_instantiate_args,
    parse_store_code_args,
)
from .coins import Coin, Coins, parse_coins_normalized
from .errors import (
    ConflictingFlagsError,
    KeyNotFoundError,
    MalformedInputError,
    MissingRequiredError,
    NetworkError,
    ResolutionError,
    StructuralValidationError,
    SubmitRejectedError,
    TxBuildError,
    UnsupportedValueError,
)
from .grants import (
    ContractGrantFlags,
    FilterFlags,
    LimitFlags,
    build_contract_grant,
    build_store_code_grant,
    parse_store_code_grants,
    resolve_filter,
    resolve_limit,
)
from .keys import KeyLookup, StaticKeyring
from .messages import (
    BasicValidator,
    ExecuteRequest,
    Instantiate2Request,
    InstantiateRequest,
    StoreCodeRequest,
)

__all__ = [
    "AccessConfig",
    "AccessConfigFlags",
    "AccessType",
    "parse_access_config",
    "parse_access_config_flags",
    "Address",
    "resolve_identity",
    "AcceptedMessageKeysFilter",
    "AcceptedMessagesFilter",
    "AllowAllMessagesFilter",
    "CodeGrant",
    "CombinedLimit",
    "ContractExecutionAuthorization",
    "ContractGrant",
    "ContractMigrationAuthorization",
    "MaxCallsLimit",
    "MaxFundsLimit",
    "MsgGrant",
    "StoreCodeAuthorization",
    "InstantiateFlags",
    "SaltFlags",
    "parse_execute_args",
    "parse_instantiate2_args",
    "parse_instantiate_args",
    "parse_store_code_args",
    "Coin",
    "Coins",
    "parse_coins_normalized",
    "ConflictingFlagsError",
    "KeyNotFoundError",
    "MalformedInputError",
    "MissingRequiredError",
    "NetworkError",
    "ResolutionError",
    "StructuralValidationError",
    "SubmitRejectedError",
    "TxBuildError",
    "UnsupportedValueError",
    "ContractGrantFlags",
    "FilterFlags",
    "LimitFlags",
    "build_contract_grant",
    "build_store_code_grant",
    "parse_store_code_grants",
    "resolve_filter",
    "resolve_limit",
    "KeyLookup",
    "StaticKeyring",
    "BasicValidator",
    "ExecuteRequest",
    "Instantiate2Request",
    "InstantiateRequest",
    "StoreCodeRequest",
]
