"""Argon2 parameters in PHC form.

    $argon2<i|d|id>[$v=<version>],m=<memory>,t=<iterations>,p=<parallelism>
        [,keyid=<b64>][,data=<b64>][$<salt>[$<hash>]]

v defaults to 16 (Argon2 1.0) when omitted. keyid and data are
optional base64 fields. Decoding enforces the grammar and minimal
decimals; validate_parameters() applies the Argon2 limits from the
reference implementation.
"""

from dataclasses import dataclass, replace

from ..core import b64
from ..core.decimals import decode_unsigned
from ..engine.decoder import build, decode
from ..engine.encoder import encode
from ..engine.model import PHCInstance
from ..engine.schema import ParameterDescriptor, Schema
from ..engine.validators import base64_text, unsigned

ARGON2_VARIANTS = ("argon2id", "argon2i", "argon2d")

VERSION_10 = 0x10  # 1.0 (16)
VERSION_13 = 0x13  # 1.3 (19)
ARGON2_VERSIONS = (VERSION_10, VERSION_13)
DEFAULT_VERSION = VERSION_10

MAX_UINT32 = (1 << 32) - 1
MAX_PARALLELISM = 255

# Byte-size bounds on the base64 fields
MAX_KEYID_BYTES = 8
MAX_DATA_BYTES = 32
SALT_BYTES = (8, 48)
HASH_BYTES = (12, 64)

ARGON2_SCHEMA = Schema(
    function_names=ARGON2_VARIANTS,
    descriptors=(
        ParameterDescriptor("v", default=str(DEFAULT_VERSION), optional=True,
                            validator=unsigned(32)),
        ParameterDescriptor("m", validator=unsigned(32)),
        ParameterDescriptor("t", validator=unsigned(32)),
        ParameterDescriptor("p", validator=unsigned(32)),
        ParameterDescriptor("keyid", optional=True, validator=base64_text()),
        ParameterDescriptor("data", optional=True, validator=base64_text()),
    ),
)


class Argon2ParameterError(ValueError):
    """Decoded Argon2 parameters are outside the limits Argon2 accepts."""


@dataclass
class Argon2PHC:
    """Argon2 configuration.

    version is None when the string carries no "v" parameter.
    key_id, data, salt and hash are base64 text; empty means absent.
    """
    variant: str
    memory: int
    iterations: int
    parallelism: int
    version: int | None = None
    key_id: str = ""
    data: str = ""
    salt: str = ""
    hash: str = ""

    @property
    def resolved_version(self) -> int:
        return DEFAULT_VERSION if self.version is None else self.version

    @classmethod
    def from_instance(cls, instance: PHCInstance) -> "Argon2PHC":
        def number(name):
            return decode_unsigned(instance.value(name), strict=True, bits=32)

        return cls(
            variant=instance.function,
            memory=number("m"),
            iterations=number("t"),
            parallelism=number("p"),
            version=number("v") if instance.is_set("v") else None,
            key_id=instance.value("keyid"),
            data=instance.value("data"),
            salt=instance.salt_text,
            hash=instance.hash_text,
        )

    def to_instance(self) -> PHCInstance:
        params = {}
        if self.version is not None:
            params["v"] = str(self.version)
        params["m"] = str(self.memory)
        params["t"] = str(self.iterations)
        params["p"] = str(self.parallelism)
        if self.key_id:
            params["keyid"] = self.key_id
        if self.data:
            params["data"] = self.data
        return build(ARGON2_SCHEMA, self.variant, params, self.salt, self.hash)

    def encode(self) -> str:
        """PHC string for this configuration. Values are not range checked."""
        return encode(self.to_instance())

    def with_salt_and_hash(self, salt: bytes, hash: bytes) -> "Argon2PHC":
        return replace(self, salt=b64.encode(salt), hash=b64.encode(hash))

    def validate_parameters(self) -> None:
        """Check variant, version, cost limits and base64 field sizes."""
        if self.variant not in ARGON2_VARIANTS:
            raise Argon2ParameterError(
                f"argon2 validation error: variant must be in [{', '.join(ARGON2_VARIANTS)}]")
        if self.resolved_version not in ARGON2_VERSIONS:
            known = ", ".join(f"{v} ({v:#x})" for v in ARGON2_VERSIONS)
            raise Argon2ParameterError(
                f"argon2 validation error: invalid version {self.resolved_version}, "
                f"must be one of [{known}]")
        if not 1 <= self.memory <= MAX_UINT32:
            raise Argon2ParameterError(
                f"argon2 validation error: memory must be in range 1 <= memory <= {MAX_UINT32}")
        if not 1 <= self.iterations <= MAX_UINT32:
            raise Argon2ParameterError(
                f"argon2 validation error: iterations must be in range "
                f"1 <= iterations <= {MAX_UINT32}")
        if not 1 <= self.parallelism <= MAX_PARALLELISM:
            raise Argon2ParameterError(
                f"argon2 validation error: parallelism must be in range "
                f"1 <= parallelism <= {MAX_PARALLELISM}")
        # Memory is in KiB and must cover 8 blocks per lane
        if self.memory < 8 * self.parallelism:
            raise Argon2ParameterError(
                f"argon2 validation error: memory must be at least 8 * parallelism, "
                f"got m={self.memory}, p={self.parallelism}")

        _check_size("key id", self.key_id, 0, MAX_KEYID_BYTES)
        _check_size("associated data", self.data, 0, MAX_DATA_BYTES)
        if self.salt:
            _check_size("salt", self.salt, *SALT_BYTES)
        if self.hash:
            _check_size("hash", self.hash, *HASH_BYTES)


def _check_size(what: str, text: str, low: int, high: int) -> None:
    try:
        size = len(b64.decode(text))
    except b64.Base64Error as e:
        raise Argon2ParameterError(f"argon2 validation error: invalid {what}: {e}") from e
    if not low <= size <= high:
        raise Argon2ParameterError(
            f"argon2 validation error: {what} must be {low} to {high} bytes, got {size}")


def decode_argon2(text: str) -> Argon2PHC:
    """Decode an Argon2 PHC string (raises PHCError on malformed input)."""
    return Argon2PHC.from_instance(decode(ARGON2_SCHEMA, text))
