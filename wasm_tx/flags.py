"""Decoding helpers for raw command-line flag values."""

from __future__ import annotations

import re

from .errors import MalformedInputError

_UINT_RE = re.compile(r"[0-9]+")
_TRUE_TOKENS = {"1", "t", "T", "true", "TRUE", "True"}
_FALSE_TOKENS = {"0", "f", "F", "false", "FALSE", "False"}


def parse_bool(raw: str, flag: str) -> bool:
    """Parse ``raw`` using the same spellings accepted by the chain tooling."""

    value = raw.strip()
    if value in _TRUE_TOKENS:
        return True
    if value in _FALSE_TOKENS:
        return False
    raise MalformedInputError(f"boolean value expected for {flag}: {raw!r}")


def parse_tristate(raw: str | None, flag: str) -> bool | None:
    """Decode an optional boolean flag.

    ``None`` or an empty string means the flag was not given at all, which is
    different from an explicit ``false``.
    """

    if raw is None or raw == "":
        return None
    return parse_bool(raw, flag)


def split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [segment.strip() for segment in raw.split(",") if segment.strip()]


def parse_uint64(raw: str, name: str) -> int:
    if not _UINT_RE.fullmatch(raw):
        raise MalformedInputError(f"{name}: invalid unsigned integer {raw!r}")
    value = int(raw)
    if value >= 1 << 64:
        raise MalformedInputError(f"{name}: value {raw} out of range")
    return value
