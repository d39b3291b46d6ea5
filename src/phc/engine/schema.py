"""Declarative description of one PHC hash function.

A Schema names the accepted function identifiers, the parameters in
the order they must appear, and the base64 codec used for salt and
hash. Decoding and building live in phc.engine.decoder. Schemas
are frozen and hold no per-call state, so one instance can serve any
number of concurrent decode/encode calls.

    SCHEMA = Schema(
        function_names=("scrypt",),
        descriptors=(
            ParameterDescriptor("ln", validator=positive_decimal),
            ParameterDescriptor("r", validator=positive_decimal),
            ParameterDescriptor("p", validator=positive_decimal),
        ),
    )
    instance = decode(SCHEMA, "$scrypt$ln=15,r=8,p=1$...$...")
"""

from dataclasses import dataclass, field

from ..core.b64 import STRICT, Base64Codec
from .errors import ErrorKind
from .parser import MAX_NAME_LENGTH, check_name
from .validators import Validator, value_characters


@dataclass(frozen=True)
class ParameterDescriptor:
    """One named parameter slot.

    `default` is only consulted when `optional` is set. A validator of
    None means the default character check.
    """
    name: str
    default: str = ""
    optional: bool = False
    validator: Validator | None = field(default=None, compare=False)

    def __post_init__(self):
        check_name(self.name, ErrorKind.INVALID_PARAMETER_NAME, "parameter name",
                   1, MAX_NAME_LENGTH)

    def validate(self, value: str) -> None:
        (self.validator or value_characters)(value)


@dataclass(frozen=True)
class Schema:
    function_names: tuple[str, ...]
    descriptors: tuple[ParameterDescriptor, ...] = ()
    codec: Base64Codec = STRICT

    def __post_init__(self):
        # Accept lists for convenience, store tuples
        object.__setattr__(self, "function_names", tuple(self.function_names))
        object.__setattr__(self, "descriptors", tuple(self.descriptors))
        if not self.function_names:
            raise ValueError("Schema requires at least one function name")
        for name in self.function_names:
            check_name(name, ErrorKind.INVALID_FUNCTION_NAME, "function name",
                       1, MAX_NAME_LENGTH)
        seen = set()
        for d in self.descriptors:
            if d.name in seen:
                raise ValueError(f"Duplicate parameter name {d.name!r} in schema")
            seen.add(d.name)

    def accepts(self, function: str) -> bool:
        return function in self.function_names

    def descriptor(self, name: str) -> ParameterDescriptor | None:
        for d in self.descriptors:
            if d.name == name:
                return d
        return None

