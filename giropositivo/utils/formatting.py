"""Mini README: Money and duration helpers for command line output.

Structure:
    * parse_money_input - read masked currency strings such as ``"1.234,56"``.
    * format_money - render an amount as Brazilian reais.
    * format_duration - render minutes as ``"Xh Ym"``.

Money inputs are typed as digit sequences whose last two digits are cents,
so every non-digit character is ignored apart from a leading minus sign.
"""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def parse_money_input(value: str) -> float:
    """Convert a masked money string into a float amount."""

    if not value:
        return 0.0
    negative = "-" in value
    digits = _NON_DIGITS.sub("", value)
    amount = int(digits or "0") / 100
    return -amount if negative else amount


def format_money(amount: float) -> str:
    """Format ``amount`` as ``R$ 1.234,56``."""

    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {grouped}"


def format_duration(minutes: float) -> str:
    hours = int(minutes // 60)
    remainder = int(minutes % 60)
    return f"{hours}h {remainder}m"
