"""Key name lookup used to turn human readable names into addresses."""

from __future__ import annotations

from typing import Mapping, Protocol

from .address import Address
from .errors import KeyNotFoundError


class KeyLookup(Protocol):
    """Protocol describing how key names are resolved to addresses."""

    def resolve(self, name: str) -> Address:
        """Return the address stored under ``name`` or raise :class:`KeyNotFoundError`."""


class StaticKeyring:
    """Read-only keyring backed by a name -> address mapping.

    The CLI fills it from the ``keys:`` section of the config file. Lookups
    are local and side-effect free.
    """

    def __init__(self, entries: Mapping[str, str] | None = None, prefix: str | None = None) -> None:
        self._entries = dict(entries or {})
        self._prefix = prefix

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def names(self) -> list[str]:
        return sorted(self._entries)

    def resolve(self, name: str) -> Address:
        try:
            stored = self._entries[name]
        except KeyError as exc:
            raise KeyNotFoundError(name) from exc
        return Address.parse(stored, self._prefix)
