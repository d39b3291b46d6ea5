"""Error taxonomy for PHC decoding and encoding.

Every failure surfaces as a PHCError. The kind lets callers branch
without parsing messages; the wrapped cause (decimal, base64 or
validator error) stays reachable via `cause` and `__cause__`.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_STRUCTURE = "invalid phc syntax"
    INVALID_FUNCTION_NAME = "invalid function name"
    INVALID_PARAMETER_NAME = "invalid parameter name"
    INVALID_PARAMETER_VALUE = "invalid parameter value"
    MISSING_PARAMETER_VALUE = "no value for parameter given"
    NON_OPTIONAL_PARAMETER_MISSING = "non optional parameter is missing"
    PARAMETER_VALUE_VALIDATION = "validation of parameter failed"
    MISMATCHED_FUNCTION_NAME = "mismatched function name"
    UNMATCHED_PARAMETER_NAME = "unmatched parameter parsed"
    BASE64_DECODE = "error decoding base64"


class PHCError(ValueError):
    """A PHC string (or instance) violates the format."""

    def __init__(self, kind: ErrorKind, message: str,
                 cause: Exception | None = None,
                 parameter: str | None = None) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        self.parameter = parameter
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"invalid phc format: {self.kind.value}: {self.message}"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


def structure_error(message: str) -> PHCError:
    return PHCError(ErrorKind.INVALID_STRUCTURE, message)


def mismatched_function_name(got: str, expected: tuple[str, ...]) -> PHCError:
    if len(expected) == 1:
        message = f"got name {got!r}, expected name {expected[0]!r}"
    else:
        message = f"got name {got!r}, expected name in [{', '.join(expected)}]"
    return PHCError(ErrorKind.MISMATCHED_FUNCTION_NAME, message)
