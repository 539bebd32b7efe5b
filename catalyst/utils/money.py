# catalyst/utils/money.py
"""
Money is kept in integer minor units (paise) everywhere inside the engine.
Text such as "₹1,999.50" only appears at the storage/API boundary.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from catalyst.domain.errors import InvalidAmountError
from catalyst.utils.settings import CURRENCY_SYMBOL

MINOR_PER_UNIT = 100
CENTS = Decimal("0.01")

# currency prefix ("₹", "Rs. ", "INR "), then the number; commas group thousands
_AMOUNT = re.compile(r"^\D*?(-?\d[\d,]*(?:\.\d+)?)\s*$")


def D(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))


def to_minor(value) -> int:
    """Major units (Decimal/int/float/str) -> minor units, half-up."""
    return int((D(value) * MINOR_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_PER_UNIT).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(text) -> int:
    if isinstance(text, (int, float, Decimal)) and not isinstance(text, bool):
        return to_minor(text)
    if text is None:
        raise InvalidAmountError("amount is missing")
    match = _AMOUNT.match(str(text).strip())
    if not match:
        raise InvalidAmountError(f"not an amount: {text!r}")
    try:
        return to_minor(Decimal(match.group(1).replace(",", "")))
    except InvalidOperation:
        raise InvalidAmountError(f"not an amount: {text!r}")


def format_amount(minor: int, symbol: str | None = None) -> str:
    return f"{CURRENCY_SYMBOL if symbol is None else symbol}{from_minor(minor)}"


def percent_of(minor: int, percent) -> int:
    return int((Decimal(minor) * D(percent) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
