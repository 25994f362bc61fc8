"""Amount parsing and consolidation for shopping list quantities."""

import math
import re
from dataclasses import dataclass

# Denominator cap for formatted fractions (eighths)
FRACTION_DENOMINATOR = 8

# Mixed number ("1 1/2"), simple fraction ("1/2"), or integer/decimal ("2", "2.5"),
# followed by free text ("cups", "tbsp chopped", ...)
_LEADING_AMOUNT = re.compile(r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)(.*)$", re.DOTALL)


@dataclass
class ParsedAmount:
    """A leading numeric quantity and the text after it."""

    value: float
    rest: str


def _parse_number(text: str) -> float | None:
    """Parse an integer, decimal, fraction, or mixed number."""
    parts = text.split()
    if len(parts) == 2:
        whole = int(parts[0])
        fraction = _parse_number(parts[1])
        if fraction is None:
            return None
        return whole + fraction

    if "/" in text:
        numerator, denominator = text.split("/")
        if int(denominator) == 0:
            return None
        return int(numerator) / int(denominator)

    return float(text)


def parse_leading_amount(amount: str | None) -> ParsedAmount | None:
    """
    Parse the leading quantity of an amount string.

    Examples:
        "2" -> ParsedAmount(2.0, "")
        "2 cups" -> ParsedAmount(2.0, "cups")
        "1/2 cup" -> ParsedAmount(0.5, "cup")
        "1 1/2 tbsp" -> ParsedAmount(1.5, "tbsp")
        "to taste" -> None

    Returns:
        ParsedAmount or None if the string has no leading quantity
    """
    if not amount or not isinstance(amount, str):
        return None

    match = _LEADING_AMOUNT.match(amount.strip())
    if not match:
        return None

    value = _parse_number(match.group(1).strip())
    if value is None or math.isnan(value):
        return None

    return ParsedAmount(value=value, rest=match.group(2).strip())


def _with_rest(number: str, rest: str) -> str:
    return f"{number} {rest}" if rest else number


def format_amount(value: float, rest: str = "") -> str:
    """
    Format a quantity as a mixed fraction, rounded to the nearest eighth.

    Examples:
        (5, "cups") -> "5 cups"
        (0.5, "cup") -> "1/2 cup"
        (1.75, "") -> "1 3/4"
        (0.3, "") -> "1/4"
    """
    sign = -1 if value < 0 else 1
    value = abs(value)
    whole = math.floor(value)
    # Round half up
    numerator = math.floor((value - whole) * FRACTION_DENOMINATOR + 0.5)

    if numerator == FRACTION_DENOMINATOR:
        return _with_rest(str(sign * (whole + 1)), rest)

    if numerator == 0:
        return _with_rest(str(sign * whole), rest)

    divisor = math.gcd(numerator, FRACTION_DENOMINATOR)
    fraction = f"{numerator // divisor}/{FRACTION_DENOMINATOR // divisor}"

    if whole == 0:
        prefix = "-" if sign < 0 else ""
        return _with_rest(f"{prefix}{fraction}", rest)

    return _with_rest(f"{sign * whole} {fraction}", rest)


def add_amounts(a: str | None, b: str | None) -> str | None:
    """
    Combine two amount strings when their units agree.

    Args:
        a: Existing amount (e.g., "2 cups")
        b: Incoming amount (e.g., "1/2 cups")

    Returns:
        The formatted sum when both parse with the same remainder
        (case-insensitive), the parseable side when only one parses,
        or None when neither parses or the remainders differ
    """
    parsed_a = parse_leading_amount(a)
    parsed_b = parse_leading_amount(b)

    if parsed_a is None and parsed_b is None:
        return None

    if parsed_a is not None and parsed_b is not None:
        if parsed_a.rest.lower() != parsed_b.rest.lower():
            return None
        return format_amount(parsed_a.value + parsed_b.value, parsed_a.rest)

    # Only one side has a quantity; the other side's text is dropped
    if parsed_a is not None:
        return a
    return b
