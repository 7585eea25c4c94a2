"""Helpers for preparing wasm byte code before upload."""

from __future__ import annotations

import gzip
import logging
from pathlib import Path

from .errors import MalformedInputError

logger = logging.getLogger(__name__)

WASM_MAGIC = b"\x00asm"
GZIP_MAGIC = b"\x1f\x8b"
MAX_WASM_SIZE = 800 * 1024


def is_wasm(data: bytes) -> bool:
    return data.startswith(WASM_MAGIC)


def is_gzip(data: bytes) -> bool:
    return data.startswith(GZIP_MAGIC)


def gzip_it(data: bytes) -> bytes:
    return gzip.compress(data, compresslevel=9)


def load_wasm_code(path: str | Path) -> bytes:
    """Read a contract file and return gzip compressed byte code.

    Raw wasm binaries are compressed; already gzipped input is passed through.
    Anything else is rejected.
    """

    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise MalformedInputError(f"cannot read wasm file {path}: {exc}") from exc

    if is_wasm(data):
        compressed = gzip_it(data)
        logger.debug("Compressed %s from %d to %d bytes", path, len(data), len(compressed))
        return compressed
    if is_gzip(data):
        return data
    raise MalformedInputError("invalid input file. Use wasm binary or gzip")
