"""Decoding of binary positional arguments such as the instantiate2 salt."""

from __future__ import annotations

import argparse
import base64
import binascii
import re
from typing import Callable

from .errors import ConflictingFlagsError, MalformedInputError

Decoder = Callable[[str], bytes]

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def hex_decode(raw: str) -> bytes:
    if len(raw) % 2:
        raise MalformedInputError(f"odd length hex string: {raw!r}")
    if not _HEX_RE.fullmatch(raw):
        raise MalformedInputError(f"invalid hex string: {raw!r}")
    return bytes.fromhex(raw)


def ascii_decode(raw: str) -> bytes:
    try:
        return raw.encode("ascii")
    except UnicodeEncodeError as exc:
        raise MalformedInputError(f"non ascii characters in {raw!r}") from exc


def b64_decode(raw: str) -> bytes:
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedInputError(f"invalid base64 string: {raw!r}") from exc


class ArgDecoder:
    """Decode an argument with a default codec unless a codec flag overrides it.

    At most one of ``ascii``, ``hex`` and ``b64`` may be selected.
    """

    def __init__(self, default: Decoder = hex_decode) -> None:
        self.default = default

    @staticmethod
    def register_flags(parser: argparse.ArgumentParser, arg_name: str) -> None:
        parser.add_argument("--ascii", action="store_true", help=f"ascii encoded {arg_name}")
        parser.add_argument("--hex", action="store_true", help=f"hex encoded {arg_name}")
        parser.add_argument("--b64", action="store_true", help=f"base64 encoded {arg_name}")

    def decode(
        self, raw: str, *, ascii: bool = False, hex: bool = False, b64: bool = False
    ) -> bytes:
        selected = [
            decoder
            for enabled, decoder in ((ascii, ascii_decode), (hex, hex_decode), (b64, b64_decode))
            if enabled
        ]
        if len(selected) > 1:
            raise ConflictingFlagsError("multiple decoding flags used")
        decoder = selected[0] if selected else self.default
        return decoder(raw)
