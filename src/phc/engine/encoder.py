"""Serialize a PHCInstance back to its PHC string.

Only parameters marked as set are written, so an instance produced
by decode re-encodes to the string it came from whenever that string
was canonical (minimal decimals, defaults omitted, schema order).
"""

import io
import logging
from typing import TextIO

from .errors import structure_error
from .model import PHCInstance

logger = logging.getLogger(__name__)


def write(instance: PHCInstance, sink: TextIO) -> int:
    """Write instance to sink and return the number of characters written."""
    if instance.hash_text and not instance.salt_text:
        raise structure_error("got empty salt but non-empty hash, this is not allowed")

    parts = [f"${instance.function}"]
    params = instance.set_parameters()
    if params:
        parts.append("$" + ",".join(f"{p.name}={p.value}" for p in params))
    if instance.salt_text:
        parts.append(f"${instance.salt_text}")
        if instance.hash_text:
            parts.append(f"${instance.hash_text}")

    written = 0
    for part in parts:
        sink.write(part)
        written += len(part)
    logger.debug("encoded %r (%d characters)", instance.function, written)
    return written


def encode(instance: PHCInstance) -> str:
    buf = io.StringIO()
    write(instance, buf)
    return buf.getvalue()
