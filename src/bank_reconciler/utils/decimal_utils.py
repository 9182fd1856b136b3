"""Decimal utilities for statement amounts.

All monetary calculations use Decimal to avoid floating-point precision issues.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")

# Regex for parentheses-enclosed negatives: ($1,234.56) or (1234.56)
PARENS_NEGATIVE_PATTERN = re.compile(r"^\s*\(\s*([^)]+)\s*\)\s*$")

# Trailing DR marks money out on many bank exports
DR_SUFFIX_PATTERN = re.compile(r"\s*DR\s*$", re.IGNORECASE)

# Everything except digits, sign and decimal point
NON_NUMERIC_PATTERN = re.compile(r"[^0-9.\-]")


def parse_amount(raw_amount: Optional[str]) -> tuple[Decimal, bool]:
    """Parse a raw statement amount into a magnitude and a withdrawal flag.

    Negative markers recognized:
    - Minus sign anywhere: -500.00, 500.00-, -$500.00
    - Accounting parentheses: (500.00), ($500.00)
    - DR suffix: 500.00 DR

    After the sign is read, every character except digits, the minus sign
    and the decimal point is stripped. Thousands separators and currency
    symbols therefore disappear: "$1,234.56" parses as 1234.56.

    Unparseable input yields zero rather than raising, so that an otherwise
    valid row stays importable.

    Args:
        raw_amount: The raw amount string.

    Returns:
        Tuple of (non-negative magnitude, is_withdrawal).
    """
    if not raw_amount:
        return Decimal("0"), False

    amount_str = raw_amount.strip()
    is_withdrawal = False

    parens_match = PARENS_NEGATIVE_PATTERN.match(amount_str)
    if parens_match:
        amount_str = parens_match.group(1)
        is_withdrawal = True

    if DR_SUFFIX_PATTERN.search(amount_str):
        amount_str = DR_SUFFIX_PATTERN.sub("", amount_str)
        is_withdrawal = True

    cleaned = NON_NUMERIC_PATTERN.sub("", amount_str)
    if "-" in cleaned:
        is_withdrawal = True
        cleaned = cleaned.replace("-", "")

    if not cleaned:
        return Decimal("0"), False

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0"), False

    if amount == 0:
        return Decimal("0"), False

    return amount, is_withdrawal


def parse_signed_amount(raw_amount: Optional[str]) -> Decimal:
    """Parse a raw amount keeping its sign (used for running balances)."""
    magnitude, is_negative = parse_amount(raw_amount)
    return -magnitude if is_negative else magnitude


def safe_decimal(value: Optional[object], default: Decimal = Decimal("0")) -> Decimal:
    """Safely convert a value to Decimal.

    Args:
        value: Value to convert (string, int, float, Decimal or None).
        default: Default value if conversion fails.

    Returns:
        Decimal value or default.
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, float, str)):
            return Decimal(str(value).strip())
        return default
    except (InvalidOperation, ValueError):
        return default


def round_cents(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places (half up)."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Optional[Decimal], decimal_places: int = 2) -> str:
    """Format a Decimal amount for display, empty string for None."""
    if amount is None:
        return ""
    quantize_str = "0." + "0" * decimal_places
    return str(amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP))
