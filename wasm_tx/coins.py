"""Coin amount parsing and normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Iterable

from .errors import MalformedInputError

_DENOM_PATTERN = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_DEC_AMOUNT_PATTERN = r"[0-9]+(?:\.[0-9]+)?|\.[0-9]+"
_DENOM_RE = re.compile(_DENOM_PATTERN)
_DEC_COIN_RE = re.compile(rf"({_DEC_AMOUNT_PATTERN})\s*({_DENOM_PATTERN})")


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: int

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    def to_dict(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": str(self.amount)}


@dataclass(frozen=True)
class Coins:
    """Ordered set of coins with unique denominations.

    Instances produced by :func:`parse_coins_normalized` are always sorted by
    denomination, merged and free of zero amounts.
    """

    items: tuple[Coin, ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def __str__(self) -> str:
        return ",".join(str(coin) for coin in self.items)

    def amount_of(self, denom: str) -> int:
        for coin in self.items:
            if coin.denom == denom:
                return coin.amount
        return 0

    def to_list(self) -> list[dict[str, str]]:
        return [coin.to_dict() for coin in self.items]

    def is_valid(self) -> bool:
        previous: str | None = None
        for coin in self.items:
            if not validate_denom(coin.denom) or coin.amount <= 0:
                return False
            if previous is not None and coin.denom <= previous:
                return False
            previous = coin.denom
        return True

    @classmethod
    def normalized(cls, coins: Iterable[Coin]) -> "Coins":
        totals: dict[str, int] = {}
        for coin in coins:
            totals[coin.denom] = totals.get(coin.denom, 0) + coin.amount
        return cls(
            tuple(Coin(denom, amount) for denom, amount in sorted(totals.items()) if amount > 0)
        )


def validate_denom(denom: Any) -> bool:
    return isinstance(denom, str) and _DENOM_RE.fullmatch(denom) is not None


def parse_coins_normalized(raw: str | None) -> Coins:
    """Parse a comma separated coin list such as ``"100uwasm,5stake"``.

    Decimal amounts are truncated to whole units, zero entries are dropped,
    repeated denominations are merged and the result is sorted by denom. An
    empty string yields an empty :class:`Coins`.
    """

    text = (raw or "").strip()
    if not text:
        return Coins()
    parsed: list[Coin] = []
    for piece in text.split(","):
        parsed.append(_parse_dec_coin(piece))
    return Coins.normalized(parsed)


def _parse_dec_coin(raw: str) -> Coin:
    text = raw.strip()
    match = _DEC_COIN_RE.fullmatch(text)
    if match is None:
        raise MalformedInputError(f"invalid decimal coin expression: {raw}")
    amount_text, denom = match.groups()
    try:
        amount = Decimal(amount_text)
    except InvalidOperation as exc:  # pragma: no cover - regex guards the syntax
        raise MalformedInputError(f"failed to parse decimal coin amount: {amount_text}") from exc
    return Coin(denom=denom, amount=int(amount.to_integral_value(rounding=ROUND_DOWN)))
