"""Parameter value validators.

A validator is any callable taking the raw value string. It returns
None when the value is acceptable and raises ValueError otherwise.
The decoder wraps that error into a PHCError naming the parameter.
"""

import re
from typing import Callable

from ..core import b64
from ..core.decimals import decode_unsigned, parse_positive_decimal

Validator = Callable[[str], None]

VALUE_RX = re.compile(r"[A-Za-z0-9/+.-]*")
NAME_RX = re.compile(r"[a-z0-9-]*")

VALUE_CHARSET = "[a-zA-Z0-9/+.-]"
NAME_CHARSET = "[a-z0-9-]"


def first_invalid(text: str, rx: re.Pattern) -> str | None:
    """Return the first character of text that rx rejects, if any."""
    for c in text:
        if not rx.fullmatch(c):
            return c
    return None


def value_characters(value: str) -> None:
    """Default validator: only characters allowed in a parameter value."""
    bad = first_invalid(value, VALUE_RX)
    if bad is not None:
        raise ValueError(
            f"parameter value contains invalid character {bad!r}, "
            f"only characters in {VALUE_CHARSET} are allowed")


def no_validation(value: str) -> None:
    """Accept anything; used when a later step validates the value."""


def positive_decimal(value: str) -> None:
    parse_positive_decimal(value)


def unsigned(bits: int) -> Validator:
    """Minimal-encoded unsigned decimal fitting into `bits` bits."""
    def validate(value: str) -> None:
        decode_unsigned(value, strict=True, bits=bits)
    return validate


def base64_text(strict: bool = True) -> Validator:
    """Unpadded base64, strict about the unused trailing bits by default."""
    def validate(value: str) -> None:
        b64.decode(value, strict=strict)
    return validate


def one_of(*allowed: str) -> Validator:
    def validate(value: str) -> None:
        if value not in allowed:
            raise ValueError(f"value {value!r} must be one of [{', '.join(allowed)}]")
    return validate
