"""Hand-off of assembled messages to the signing/broadcast service.

Signing and broadcasting happen outside this package. Two submitters are
provided: :class:`SignerRPCClient` forwards the unsigned transaction to an
external signer daemon over JSON-RPC, and :class:`GenerateOnlySubmitter`
prints the unsigned transaction so it can be signed offline.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from dataclasses import dataclass, field
from typing import IO, Any, Dict, Optional, Protocol, Sequence

import requests
from requests import RequestException, Response

from .coins import Coins
from .errors import NetworkError, SubmitRejectedError

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200_000


class SignableMsg(Protocol):
    def validate_basic(self) -> None:
        ...

    def to_dict(self) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class TxOptions:
    """Transaction level settings that travel with the messages."""

    chain_id: str | None = None
    signer: str | None = None
    memo: str = ""
    fees: Coins = field(default_factory=Coins)
    gas: int | None = None


def build_unsigned_tx(messages: Sequence[SignableMsg], options: TxOptions) -> dict[str, Any]:
    """Render ``messages`` as an unsigned transaction in protobuf JSON form."""

    return {
        "body": {
            "messages": [message.to_dict() for message in messages],
            "memo": options.memo,
            "timeout_height": "0",
            "extension_options": [],
            "non_critical_extension_options": [],
        },
        "auth_info": {
            "signer_infos": [],
            "fee": {
                "amount": options.fees.to_list(),
                "gas_limit": str(options.gas if options.gas is not None else DEFAULT_GAS_LIMIT),
                "payer": "",
                "granter": "",
            },
        },
        "signatures": [],
    }


class Submitter(Protocol):
    """Protocol describing the signing/broadcast collaborator."""

    def submit(self, messages: Sequence[SignableMsg], options: TxOptions) -> dict[str, Any]:
        """Sign and broadcast ``messages``; raise on network or validation failures."""


class GenerateOnlySubmitter:
    """Write the unsigned transaction JSON instead of broadcasting it."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def submit(self, messages: Sequence[SignableMsg], options: TxOptions) -> dict[str, Any]:
        tx = build_unsigned_tx(messages, options)
        self.stream.write(json.dumps(tx, indent=2) + "\n")
        return tx


class SignerRPCClient:
    """JSON-RPC client for an external signer daemon.

    The daemon owns the keys: it receives the unsigned transaction together
    with the signer key name and chain id, signs it and broadcasts it. Each
    submission is a single blocking request.
    """

    def __init__(self, endpoint: str, *, timeout: float = 30) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = requests.Session()

    def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Perform a JSON-RPC request."""

        payload = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params or [],
        }
        logger.debug("Signer call %s", method)
        try:
            response = self._session.post(
                self.endpoint,
                data=json.dumps(payload),
                headers={"content-type": "application/json"},
                timeout=self.timeout,
            )
        except RequestException as exc:
            logger.error(
                "Signer connection failed: %s",
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise NetworkError(
                "Signer connection failed. Ensure the signer daemon is running and "
                "WASM_TX_SIGNER_ENDPOINT (or ~/.wasm-tx.yaml) points to it."
            ) from exc
        self._raise_for_status(response)
        try:
            result = response.json()
        except ValueError as exc:
            logger.debug("Signer JSON parse error: %s", response.text, exc_info=True)
            raise NetworkError("Signer returned malformed JSON") from exc
        if not isinstance(result, dict):
            raise NetworkError("Signer returned an unexpected response shape")
        if result.get("error"):
            error = result["error"]
            raise SubmitRejectedError(error.get("code", -1), error.get("message", "unknown"))
        return result.get("result")

    def _raise_for_status(self, response: Response) -> None:
        if response.ok:
            return
        try:
            err_body = response.json()
        except ValueError:
            err_body = response.text
        logger.error("Signer HTTP error %s from %s", response.status_code, response.url)
        logger.error("Signer error body: %s", err_body)
        if isinstance(err_body, dict) and isinstance(err_body.get("error"), dict):
            error = err_body["error"]
            raise SubmitRejectedError(error.get("code", -1), error.get("message", "unknown"))
        raise NetworkError(
            f"Signer returned HTTP {response.status_code}; check the endpoint URL.",
            status_code=response.status_code,
        )

    def submit(self, messages: Sequence[SignableMsg], options: TxOptions) -> Dict[str, Any]:
        tx = build_unsigned_tx(messages, options)
        request = {"chain_id": options.chain_id, "signer": options.signer, "tx": tx}
        result = self.call("submit_tx", [request])
        if not isinstance(result, dict):
            return {"result": result}
        return result
