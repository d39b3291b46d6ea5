"""scrypt parameters in PHC form.

    $scrypt$ln=<log2 N>,r=<block size>,p=<parallelism>[$<salt>[$<hash>]]

Decoding only checks the grammar. Call validate_parameters() for the
scrypt cost limits.
"""

from dataclasses import dataclass, replace

from ..core import b64
from ..core.decimals import parse_positive_decimal
from ..engine.decoder import build, decode
from ..engine.encoder import encode
from ..engine.model import PHCInstance
from ..engine.schema import ParameterDescriptor, Schema
from ..engine.validators import positive_decimal

FUNCTION_NAME = "scrypt"

SCRYPT_SCHEMA = Schema(
    function_names=(FUNCTION_NAME,),
    descriptors=(
        ParameterDescriptor("ln", validator=positive_decimal),
        ParameterDescriptor("r", validator=positive_decimal),
        ParameterDescriptor("p", validator=positive_decimal),
    ),
)

MAX_INT = (1 << 63) - 1
MAX_UINT32 = (1 << 32) - 1


class ScryptParameterError(ValueError):
    """Decoded scrypt parameters are outside the limits scrypt accepts."""


@dataclass
class ScryptPHC:
    """scrypt configuration.

    cost is log2(N); block_size and parallelism are r and p.
    salt and hash are base64 text, not raw bytes, and may be empty.
    """
    cost: int
    block_size: int
    parallelism: int
    salt: str = ""
    hash: str = ""

    @property
    def n(self) -> int:
        return 1 << self.cost

    @classmethod
    def from_instance(cls, instance: PHCInstance) -> "ScryptPHC":
        return cls(
            cost=parse_positive_decimal(instance.value("ln")),
            block_size=parse_positive_decimal(instance.value("r")),
            parallelism=parse_positive_decimal(instance.value("p")),
            salt=instance.salt_text,
            hash=instance.hash_text,
        )

    def to_instance(self) -> PHCInstance:
        params = {"ln": str(self.cost), "r": str(self.block_size), "p": str(self.parallelism)}
        return build(SCRYPT_SCHEMA, FUNCTION_NAME, params, self.salt, self.hash)

    def encode(self) -> str:
        """PHC string for this configuration. Values are not range checked."""
        return encode(self.to_instance())

    def with_salt_and_hash(self, salt: bytes, hash: bytes) -> "ScryptPHC":
        return replace(self, salt=b64.encode(salt), hash=b64.encode(hash))

    def validate_parameters(self) -> None:
        """Check the scrypt limits on N, r and p. Salt and hash are not checked."""
        if not 1 <= self.cost < 63:
            raise ScryptParameterError(
                f"scrypt validation error: cost (ln) must be in range 1 <= ln <= 62, got {self.cost}")
        if not 1 <= self.block_size <= MAX_UINT32:
            raise ScryptParameterError(
                f"scrypt validation error: blocksize must be in range 1 <= blocksize <= "
                f"{MAX_UINT32}, got {self.block_size}")
        if self.parallelism < 1:
            raise ScryptParameterError(
                f"scrypt validation error: parallelism must be at least 1, got {self.parallelism}")
        r, p = self.block_size, self.parallelism
        if r * p >= 1 << 30 or r > MAX_INT // 128 // p or r > MAX_INT // 256:
            raise ScryptParameterError("scrypt validation error: parameters too large")


def decode_scrypt(text: str) -> ScryptPHC:
    """Decode a scrypt PHC string (raises PHCError on malformed input)."""
    return ScryptPHC.from_instance(decode(SCRYPT_SCHEMA, text))
