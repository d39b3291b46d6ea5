"""Decoded representation of a PHC string."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterValuePair:
    """A realized parameter.

    is_set is True when the value came from the input string and False
    when it was filled in from the schema default.
    """
    name: str
    value: str
    is_set: bool = True


@dataclass(frozen=True)
class PHCInstance:
    """Function name, parameters in schema order, salt and hash.

    Salt and hash are kept both as the base64 text found in the input
    and as the decoded bytes. Empty text means the field was absent.
    """
    function: str
    parameters: tuple[ParameterValuePair, ...] = ()
    salt: bytes = b""
    salt_text: str = ""
    hash: bytes = b""
    hash_text: str = ""

    def get(self, name: str) -> ParameterValuePair | None:
        for pair in self.parameters:
            if pair.name == name:
                return pair
        return None

    def value(self, name: str) -> str:
        """Value of a parameter (set or defaulted); KeyError if unknown."""
        pair = self.get(name)
        if pair is None:
            raise KeyError(name)
        return pair.value

    def is_set(self, name: str) -> bool:
        pair = self.get(name)
        return pair is not None and pair.is_set

    def set_parameters(self) -> tuple[ParameterValuePair, ...]:
        """Parameters that were present in the input, in order."""
        return tuple(p for p in self.parameters if p.is_set)
