"""Decimal parsing with the PHC minimal-encoding rule.

PHC decimals carry no superfluous leading zeros and no "-0":
    decimal          = 0 | -[1-9][0-9]* | [1-9][0-9]*
    positive decimal = 0 | [1-9][0-9]*

Only ASCII digits are accepted. Python's int() would also take
whitespace, underscores and other Unicode digits, so every input is
matched against a pattern first.
"""

import re

DECIMAL_RX = re.compile(r"0|-[1-9][0-9]*|[1-9][0-9]*")
POSITIVE_DECIMAL_RX = re.compile(r"0|[1-9][0-9]*")

# Non-strict mode accepts what a standard integer parser takes
_LOOSE_SIGNED_RX = re.compile(r"[+-]?[0-9]+")
_LOOSE_UNSIGNED_RX = re.compile(r"[0-9]+")


class DecimalError(ValueError):
    """Input is not a valid decimal."""


class NonMinimalDecimalError(DecimalError):
    """Input is a number, but not in its minimal encoding."""


class DecimalRangeError(DecimalError):
    """Input does not fit the requested bit width."""


def parse_decimal(text: str) -> int:
    """Parse a PHC decimal, e.g. "0", "-1" or "4242"."""
    if not DECIMAL_RX.fullmatch(text):
        raise DecimalError(f"input {text!r} isn't a valid decimal")
    return int(text)


def parse_positive_decimal(text: str) -> int:
    """Parse a PHC positive decimal (zero included)."""
    if not POSITIVE_DECIMAL_RX.fullmatch(text):
        raise DecimalError(f"input {text!r} isn't a valid positive decimal")
    return int(text)


def _check_minimal(text: str) -> None:
    if text.startswith("0"):
        if len(text) > 1:
            raise NonMinimalDecimalError(
                f"too many leading zeroes in {text!r}: not the minimal decimal encoding")
        return
    if text.startswith("-"):
        if len(text) == 1:
            raise DecimalError("invalid decimal encoding: consists only of '-'")
        if text[1] == "0":
            raise NonMinimalDecimalError(
                f"zero immediately after '-' in {text!r}: not the minimal decimal encoding")


def _check_bits(bits: int) -> None:
    if bits < 1:
        raise ValueError(f"Bit width must be at least 1, got {bits}")


def decode_decimal(text: str, strict: bool = True, bits: int = 64) -> int:
    """Parse a signed decimal that must fit into a `bits` wide integer.

    In strict mode the minimal encoding is enforced, otherwise any
    optionally signed digit sequence is accepted.
    """
    _check_bits(bits)
    if strict:
        _check_minimal(text)
    rx = DECIMAL_RX if strict else _LOOSE_SIGNED_RX
    if not rx.fullmatch(text):
        raise DecimalError(f"input {text!r} isn't a valid decimal")
    value = int(text)
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if not low <= value <= high:
        raise DecimalRangeError(
            f"value {text} out of range for {bits} bit integer: must be in [{low}, {high}]")
    return value


def decode_unsigned(text: str, strict: bool = True, bits: int = 64) -> int:
    """Parse an unsigned decimal that must fit into `bits` bits."""
    _check_bits(bits)
    if strict:
        _check_minimal(text)
    rx = POSITIVE_DECIMAL_RX if strict else _LOOSE_UNSIGNED_RX
    if not rx.fullmatch(text):
        raise DecimalError(f"input {text!r} isn't a valid unsigned decimal")
    value = int(text)
    high = (1 << bits) - 1
    if value > high:
        raise DecimalRangeError(
            f"value {text} out of range for {bits} bit unsigned integer: must be in [0, {high}]")
    return value
