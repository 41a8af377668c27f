"""
Native-currency amount conversion

Decimal strings are converted to smallest-unit integers with integer
arithmetic only. Floats and Decimal contexts never touch the value, so
the result is exact or the input is rejected.
"""

import re
from typing import Any

from actionlink.core.exceptions import InvalidAmountError

DEFAULT_DECIMALS = 18

# Largest value a transaction (or any uint256 argument) can carry
UINT256_MAX = 2 ** 256 - 1

_DECIMAL_RE = re.compile(r"^(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?$")


def to_smallest_unit(amount: Any, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a decimal string to an integer amount of the smallest unit.

    Args:
        amount: Decimal string such as "1.5" or "0.001"
        decimals: Fixed decimal exponent of the currency (18 for CORE/ETH)

    Returns:
        Integer amount, e.g. "1.5" -> 1500000000000000000

    Raises:
        InvalidAmountError: Not a plain non-negative decimal string, or more
            fractional digits than `decimals` allows, or a result above
            UINT256_MAX
    """
    if not isinstance(amount, str):
        raise InvalidAmountError(amount, "amount must be a decimal string")

    text = amount.strip()
    match = _DECIMAL_RE.match(text)
    if not text or match is None:
        raise InvalidAmountError(amount, "not a decimal number")

    whole = match.group("whole") or ""
    frac = match.group("frac") or ""
    if not whole and not frac:
        raise InvalidAmountError(amount, "not a decimal number")

    if len(frac) > decimals:
        raise InvalidAmountError(
            amount,
            f"{len(frac)} fractional digits exceeds the {decimals} supported"
        )

    # uint256 has at most 78 digits
    whole = whole.lstrip("0")
    if len(whole) > 78:
        raise InvalidAmountError(amount, "amount does not fit in uint256")

    value = int(whole or "0") * 10 ** decimals + int(frac.ljust(decimals, "0") or "0")
    if value > UINT256_MAX:
        raise InvalidAmountError(amount, "amount does not fit in uint256")
    return value


def to_positive_smallest_unit(amount: Any, decimals: int = DEFAULT_DECIMALS) -> int:
    """Same as to_smallest_unit but rejects zero."""
    value = to_smallest_unit(amount, decimals)
    if value <= 0:
        raise InvalidAmountError(amount, "amount must be greater than zero")
    return value


def format_native_amount(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render a smallest-unit integer as a trimmed decimal string."""
    if value < 0:
        raise InvalidAmountError(value, "amount must not be negative")
    whole, frac = divmod(value, 10 ** decimals)
    if frac == 0:
        return str(whole)
    return f"{whole}.{str(frac).rjust(decimals, '0').rstrip('0')}"
