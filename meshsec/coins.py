"""Coins: a denomination with an integer amount, plus parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .errors import ERR_INVALID_COINS

_DENOM = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_DENOM_RE = re.compile(rf"^{_DENOM}$")
_COIN_RE = re.compile(rf"^\s*([0-9]+(?:\.[0-9]*)?)\s*({_DENOM})\s*$")


@dataclass(frozen=True)
class Coin:
    """A token amount; an amount of None stands for an unset value."""

    denom: str
    amount: int | None

    def __str__(self) -> str:
        return f"{self.amount if self.amount is not None else '<nil>'}{self.denom}"

    def validate(self) -> None:
        """Raise MeshSecurityError when the denom or amount is invalid."""
        if not _DENOM_RE.match(self.denom):
            raise ERR_INVALID_COINS.wrap(f"invalid denom: {self.denom}")
        if self.amount is None:
            raise ERR_INVALID_COINS.wrap("amount is nil")
        if self.amount < 0:
            raise ERR_INVALID_COINS.wrap(f"negative coin amount: {self.amount}")

    def _same_denom(self, other: "Coin", op: str) -> None:
        if self.denom != other.denom:
            raise ERR_INVALID_COINS.wrap(
                f"invalid coin denominations; {self.denom}, {other.denom} ({op})"
            )

    def add(self, other: "Coin") -> "Coin":
        self._same_denom(other, "add")
        return Coin(self.denom, (self.amount or 0) + (other.amount or 0))

    def sub(self, other: "Coin") -> "Coin":
        self._same_denom(other, "sub")
        return Coin(self.denom, (self.amount or 0) - (other.amount or 0))

    def add_amount(self, amount: int) -> "Coin":
        return Coin(self.denom, (self.amount or 0) + amount)

    def is_lt(self, other: "Coin") -> bool:
        self._same_denom(other, "compare")
        return (self.amount or 0) < (other.amount or 0)

    def is_negative(self) -> bool:
        return self.amount is not None and self.amount < 0


def parse_coin_normalized(text: str) -> Coin:
    """Parse '100stake' (decimal amounts are truncated) into a Coin."""
    match = _COIN_RE.match(text)
    if not match:
        raise ERR_INVALID_COINS.wrap(f"invalid decimal coin expression: {text}")
    try:
        value = Decimal(match.group(1))
    except InvalidOperation as exc:
        raise ERR_INVALID_COINS.wrap(f"invalid amount: {text}") from exc
    return Coin(match.group(2), int(value))


def parse_coins_normalized(text: str) -> tuple[Coin, ...]:
    """Parse a comma separated coin list; zero amounts are dropped, result sorted."""
    text = text.strip()
    if not text:
        return ()
    coins = [parse_coin_normalized(part) for part in text.split(",")]
    coins = sorted((c for c in coins if c.amount), key=lambda c: c.denom)
    denoms = [c.denom for c in coins]
    if len(set(denoms)) != len(denoms):
        raise ERR_INVALID_COINS.wrap(f"duplicate denomination in {text}")
    return tuple(coins)