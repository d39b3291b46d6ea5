"""
Command-line interface for inspecting PHC strings.

    phc decode '$argon2id$v=19,m=4096,t=3,p=1$...$...'
    phc validate '$scrypt$ln=15,r=8,p=1$...$...'
"""
from __future__ import annotations

import argparse
import logging
import sys

from .engine.decoder import decode
from .engine.model import PHCInstance
from .engine.parser import parse

logger = logging.getLogger(__name__)


def _schema(function: str):
    """Schema for a known function name, or None."""
    from .algorithms.argon2 import ARGON2_SCHEMA
    from .algorithms.scrypt import SCRYPT_SCHEMA

    for schema in (SCRYPT_SCHEMA, ARGON2_SCHEMA):
        if schema.accepts(function):
            return schema
    return None


def _adapter(function: str):
    """Adapter decoder for a known function name, or None."""
    from .algorithms.argon2 import ARGON2_VARIANTS, decode_argon2
    from .algorithms.scrypt import FUNCTION_NAME, decode_scrypt

    if function == FUNCTION_NAME:
        return decode_scrypt
    if function in ARGON2_VARIANTS:
        return decode_argon2
    return None


def _function_of(text: str) -> str:
    return text[1:].split("$", 1)[0] if text.startswith("$") else ""


def _describe(instance: PHCInstance) -> None:
    print(f"Function: {instance.function}")
    print(f"Parameters ({len(instance.parameters)}):")
    for pair in instance.parameters:
        marker = "" if pair.is_set else "  (default)"
        print(f"  {pair.name} = {pair.value}{marker}")
    print(f"Salt: {instance.salt_text or '-'} ({len(instance.salt)} bytes)")
    print(f"Hash: {instance.hash_text or '-'} ({len(instance.hash)} bytes)")


def cmd_decode(args: argparse.Namespace) -> int:
    """Decode a PHC string and show its fields."""
    function = _function_of(args.phc)
    schema = _schema(function)
    if schema is None:
        logger.debug("no schema for %r, using the generic parser", function)
        instance = parse(args.phc)
    else:
        instance = decode(schema, args.phc)
    _describe(instance)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Decode a PHC string and check the algorithm's parameter limits."""
    function = _function_of(args.phc)
    decoder = _adapter(function)
    if decoder is None:
        print(f"No validation rules for function {function!r}", file=sys.stderr)
        return 1
    decoder(args.phc).validate_parameters()
    print("OK")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="phc",
        description="Decode and validate PHC password hash strings",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    decode_parser = subparsers.add_parser("decode", help="Show the fields of a PHC string")
    decode_parser.add_argument("phc", help="PHC string, e.g. '$scrypt$ln=15,r=8,p=1'")
    decode_parser.set_defaults(func=cmd_decode)

    validate_parser = subparsers.add_parser("validate", help="Check algorithm parameter limits")
    validate_parser.add_argument("phc", help="PHC string for scrypt or argon2")
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
