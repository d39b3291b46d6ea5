"""Schema-driven PHC decoding.

Token order is fixed: function name, parameter list, salt, hash.
Each part after the function name is optional, and there is no way
back once a part has been consumed.

Parameters are matched positionally against the schema in a single
left-to-right pass. A parsed name equal to the current descriptor is
validated and kept; otherwise the descriptor must be optional and
takes its default while the parsed entry waits for the next one. So
parameters must appear in schema order, and anything left over once
the descriptors run out is rejected.
"""

import logging
from typing import Mapping, Sequence

from .errors import ErrorKind, PHCError, mismatched_function_name, structure_error
from .model import ParameterValuePair, PHCInstance
from .parser import decode_field, parse_parameter_list, split_segments
from .schema import ParameterDescriptor, Schema

logger = logging.getLogger(__name__)


def _defaulted(descriptor: ParameterDescriptor) -> ParameterValuePair:
    if not descriptor.optional:
        raise PHCError(ErrorKind.NON_OPTIONAL_PARAMETER_MISSING,
                       f"parameter {descriptor.name!r}", parameter=descriptor.name)
    return ParameterValuePair(descriptor.name, descriptor.default, False)


def _validated(descriptor: ParameterDescriptor, value: str) -> ParameterValuePair:
    if not value:
        raise PHCError(ErrorKind.INVALID_PARAMETER_VALUE,
                       f"parameter {descriptor.name!r} has an empty value",
                       parameter=descriptor.name)
    try:
        descriptor.validate(value)
    except ValueError as e:
        raise PHCError(ErrorKind.PARAMETER_VALUE_VALIDATION,
                       f"validation of parameter {descriptor.name!r} failed",
                       cause=e, parameter=descriptor.name) from e
    return ParameterValuePair(descriptor.name, value, True)


def match_parameters(schema: Schema,
                     parsed: Sequence[ParameterValuePair]) -> tuple[ParameterValuePair, ...]:
    """Align parsed parameters with the schema descriptors."""
    descriptors = schema.descriptors
    result = []
    i = j = 0
    while i < len(descriptors) and j < len(parsed):
        descriptor, pair = descriptors[i], parsed[j]
        if descriptor.name == pair.name:
            result.append(_validated(descriptor, pair.value))
            j += 1
        else:
            result.append(_defaulted(descriptor))
        i += 1

    if j < len(parsed):
        name = parsed[j].name
        raise PHCError(ErrorKind.UNMATCHED_PARAMETER_NAME, f"parameter {name!r}",
                       parameter=name)
    for descriptor in descriptors[i:]:
        result.append(_defaulted(descriptor))
    return tuple(result)


def _check_function(schema: Schema, function: str) -> None:
    if not schema.accepts(function):
        raise mismatched_function_name(function, schema.function_names)


def decode(schema: Schema, text: str) -> PHCInstance:
    """Decode text against schema.

    Returns a complete PHCInstance or raises PHCError; nothing
    partially decoded is ever returned.
    """
    try:
        segments = split_segments(text)
        function = segments.pop(0)
        _check_function(schema, function)

        parsed: list[ParameterValuePair] = []
        if segments and "=" in segments[0]:
            parsed = parse_parameter_list(segments.pop(0))
        parameters = match_parameters(schema, parsed)

        salt_text, salt, hash_text, hash_ = "", b"", "", b""
        if segments:
            salt_text = segments.pop(0)
            salt = decode_field(schema.codec, salt_text, "salt")
        if segments:
            hash_text = segments.pop(0)
            hash_ = decode_field(schema.codec, hash_text, "hash")
        if segments:
            raise structure_error("too many '$' in input string")
    except PHCError as e:
        logger.debug("decode against %s failed: %s", schema.function_names[0], e.kind.name)
        raise

    return PHCInstance(function, parameters, salt, salt_text, hash_, hash_text)


def build(schema: Schema, function: str, params: Mapping[str, str],
          salt: str = "", hash: str = "") -> PHCInstance:
    """Create an instance from field values with decode's validation.

    Unlike decode, params is keyed by name, so its order does not
    matter; the result is always in schema order.
    """
    _check_function(schema, function)
    for name in params:
        if schema.descriptor(name) is None:
            raise PHCError(ErrorKind.UNMATCHED_PARAMETER_NAME, f"parameter {name!r}",
                           parameter=name)
    parameters = tuple(
        _validated(d, params[d.name]) if d.name in params else _defaulted(d)
        for d in schema.descriptors
    )
    if hash and not salt:
        raise structure_error("got empty salt but non-empty hash, this is not allowed")
    return PHCInstance(
        function,
        parameters,
        decode_field(schema.codec, salt, "salt"),
        salt,
        decode_field(schema.codec, hash, "hash"),
        hash,
    )
