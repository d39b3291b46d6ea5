"""Unpadded base64 as used for PHC salt, hash and binary parameters.

Standard alphabet (A-Z a-z 0-9 + /), no "=" emitted or expected.
A string of length 4k+1 can never be produced by an encoder and is
always rejected. Strict decoding additionally requires the bits of
the last symbol that fall past the final byte to be zero, so every
byte string has exactly one accepted encoding.
"""

import base64
import binascii
import re
from dataclasses import dataclass

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# Reverse lookup: character -> 6 bit value
CHAR_TO_INDEX = {c: i for i, c in enumerate(ALPHABET)}

BASE64_RX = re.compile(r"[A-Za-z0-9+/]*")

# Unused low bits of the last symbol, keyed by len(text) % 4
_TRAILING_MASK = {2: 0x0F, 3: 0x03}


class Base64Error(ValueError):
    """Input is not valid unpadded base64."""


def encode(data: bytes) -> str:
    """Encode bytes to unpadded base64."""
    return base64.b64encode(data).decode("ascii").rstrip("=")


def decoded_length(text: str) -> int:
    """Number of bytes encoded by an unpadded base64 string of this length."""
    n = len(text)
    if n % 4 == 1:
        raise Base64Error(f"invalid base64 length {n}: length mod 4 == 1")
    return n * 3 // 4


def decode(text: str, strict: bool = True) -> bytes:
    """Decode unpadded base64.

    Raises Base64Error on a bad length, a character outside the
    alphabet, or (strict only) non-zero unused trailing bits.
    """
    remainder = len(text) % 4
    if remainder == 1:
        raise Base64Error(
            f"invalid base64 length {len(text)}: got a string of length mod 4 == 1")
    if not BASE64_RX.fullmatch(text):
        bad = next(c for c in text if c not in CHAR_TO_INDEX)
        raise Base64Error(f"invalid base64 character {bad!r} in {text!r}")
    if strict and remainder in _TRAILING_MASK:
        if CHAR_TO_INDEX[text[-1]] & _TRAILING_MASK[remainder]:
            raise Base64Error(
                f"invalid base64 {text!r}: unused trailing bits are not zero")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except binascii.Error as e:
        raise Base64Error(f"invalid base64 {text!r}: {e}") from e


def decode_lenient(text: str) -> bytes:
    """Decode unpadded base64 without checking the trailing bits."""
    return decode(text, strict=False)


@dataclass(frozen=True)
class Base64Codec:
    """Unpadded base64 with a fixed strictness, as attached to a schema."""
    strict: bool = True

    def encode(self, data: bytes) -> str:
        return encode(data)

    def decode(self, text: str) -> bytes:
        return decode(text, strict=self.strict)


STRICT = Base64Codec(strict=True)
LENIENT = Base64Codec(strict=False)
