"""Schema-less PHC parsing and the grammar helpers shared with the decoder.

PHCParser accepts any syntactically valid PHC string: function name
and parameter names from [a-z0-9-], values from [a-zA-Z0-9/+.-],
within the length limits of its ParserConfig. Parameters keep input
order and are all marked as set. Use a Schema when the parameter set
of the function is known.
"""

import logging
from dataclasses import dataclass

from ..core.b64 import STRICT, Base64Codec, Base64Error
from .errors import ErrorKind, PHCError, structure_error
from .model import ParameterValuePair, PHCInstance
from .validators import NAME_CHARSET, NAME_RX, VALUE_CHARSET, VALUE_RX, first_invalid

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 32


def _format_interval(low: int | None, high: int | None) -> str:
    return f"[{0 if low is None else low}, {'∞' if high is None else high}]"


def _check_length(text: str, kind: ErrorKind, what: str,
                  low: int | None, high: int | None, parameter: str | None = None) -> None:
    n = len(text)
    if (low is not None and n < low) or (high is not None and n > high):
        raise PHCError(kind, f"{what} {text!r}, length={n} has an invalid length: "
                             f"must be in {_format_interval(low, high)}",
                       parameter=parameter)


def check_name(name: str, kind: ErrorKind, what: str,
               low: int | None = 1, high: int | None = MAX_NAME_LENGTH) -> None:
    """Validate a function or parameter name against [a-z0-9-] and length."""
    bad = first_invalid(name, NAME_RX)
    if bad is not None:
        raise PHCError(kind, f"{what} {name!r} contains character {bad!r}, "
                             f"only characters in {NAME_CHARSET} are allowed")
    _check_length(name, kind, what, low, high)


def split_segments(text: str) -> list[str]:
    """Strip the leading "$" and split the rest into non-empty segments."""
    if not text.startswith("$"):
        raise structure_error("phc string must begin with '$'")
    segments = text[1:].split("$")
    if segments[0] == "":
        raise structure_error("missing function name after leading '$'")
    if any(s == "" for s in segments):
        raise structure_error("found two consecutive '$' in string")
    return segments


def parse_parameter_list(segment: str) -> list[ParameterValuePair]:
    """Split "a=1,b=2" into pairs; names and values are not validated."""
    pairs = []
    for entry in segment.split(","):
        name, sep, value = entry.partition("=")
        if not sep:
            raise PHCError(ErrorKind.MISSING_PARAMETER_VALUE, f"parameter {entry!r}",
                           parameter=entry)
        pairs.append(ParameterValuePair(name, value, True))
    return pairs


def decode_field(codec: Base64Codec, text: str, what: str) -> bytes:
    """Decode the salt or hash segment, wrapping base64 failures."""
    try:
        return codec.decode(text)
    except Base64Error as e:
        raise PHCError(ErrorKind.BASE64_DECODE,
                       f"error decoding {what} from base64 string", cause=e) from e


@dataclass(frozen=True)
class ParserConfig:
    """Length limits (inclusive, None for unbounded) and salt/hash codec."""
    function_name_length: tuple[int | None, int | None] = (1, MAX_NAME_LENGTH)
    parameter_name_length: tuple[int | None, int | None] = (1, MAX_NAME_LENGTH)
    parameter_value_length: tuple[int | None, int | None] = (1, None)
    codec: Base64Codec = STRICT


DEFAULT_CONFIG = ParserConfig()


class PHCParser:
    """Parse PHC strings without knowledge of the hash function."""

    def __init__(self, config: ParserConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def validate_function_name(self, name: str) -> None:
        check_name(name, ErrorKind.INVALID_FUNCTION_NAME, "function name",
                   *self.config.function_name_length)

    def validate_parameter(self, pair: ParameterValuePair) -> None:
        check_name(pair.name, ErrorKind.INVALID_PARAMETER_NAME, "parameter name",
                   *self.config.parameter_name_length)
        bad = first_invalid(pair.value, VALUE_RX)
        if bad is not None:
            raise PHCError(ErrorKind.INVALID_PARAMETER_VALUE,
                           f"parameter value {pair.value!r} contains character {bad!r}, "
                           f"only characters in {VALUE_CHARSET} are allowed",
                           parameter=pair.name)
        _check_length(pair.value, ErrorKind.INVALID_PARAMETER_VALUE, "parameter value",
                      *self.config.parameter_value_length, parameter=pair.name)

    def parse(self, text: str) -> PHCInstance:
        segments = split_segments(text)
        function = segments.pop(0)
        self.validate_function_name(function)

        parameters: list[ParameterValuePair] = []
        # "=" may only appear inside the parameter list
        if segments and "=" in segments[0]:
            parameters = parse_parameter_list(segments.pop(0))
            for pair in parameters:
                self.validate_parameter(pair)

        salt_text, salt, hash_text, hash_ = "", b"", "", b""
        if segments:
            salt_text = segments.pop(0)
            salt = decode_field(self.config.codec, salt_text, "salt")
        if segments:
            hash_text = segments.pop(0)
            hash_ = decode_field(self.config.codec, hash_text, "hash")
        if segments:
            raise structure_error("too many '$' in input string")

        logger.debug("parsed %r with %d parameters", function, len(parameters))
        return PHCInstance(function, tuple(parameters), salt, salt_text, hash_, hash_text)


def parse(text: str, config: ParserConfig = DEFAULT_CONFIG) -> PHCInstance:
    return PHCParser(config).parse(text)
