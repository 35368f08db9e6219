# -*- coding: utf-8 -*-
"""Location: ./toongateway/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway command line.

Offline access to the gateway operations plus a ``serve`` command:

    toongateway encode data.json --delimiter tab --length-marker
    toongateway repair broken.json
    cat notes.txt | toongateway count
    toongateway serve --port 8080

``encode``, ``repair`` and ``count`` read FILE, or stdin when FILE is omitted
or ``-``. Results go to stdout; diagnostics go to stderr.

Examples:
    >>> parser = create_parser()
    >>> args = parser.parse_args(["encode", "--delimiter", "pipe", "in.json"])
    >>> (args.command, args.delimiter, args.file)
    ('encode', '|', 'in.json')
"""

# Standard
import argparse
import sys
from typing import List, Optional, TextIO

# Third-Party
import orjson
import uvicorn

# First-Party
from toongateway import __version__
from toongateway.config import settings
from toongateway.services.conversion_service import ConversionError, ConversionService
from toongateway.services.logging_service import LoggingService
from toongateway.services.token_service import TokenEstimator, TokenizerHandle
from toongateway.toon import InvalidOptionError
from toongateway.toon.rows import verify_document

logging_service = LoggingService()

DELIMITER_NAMES = {"comma": ",", "tab": "\t", "pipe": "|"}


class CLIError(Exception):
    """Base class for CLI-related errors."""


def _delimiter(value: str) -> str:
    """argparse type accepting a delimiter by name or literally.

    Args:
        value: ``comma``, ``tab``, ``pipe``, ``,``, ``|`` or a literal tab.

    Returns:
        str: The delimiter character.

    Raises:
        argparse.ArgumentTypeError: For anything else.

    Examples:
        >>> _delimiter("tab")
        '\\t'
        >>> _delimiter(",")
        ','
    """
    if value in DELIMITER_NAMES:
        return DELIMITER_NAMES[value]
    if value in DELIMITER_NAMES.values():
        return value
    raise argparse.ArgumentTypeError(f"invalid delimiter: {value!r} (choose from comma, tab, pipe)")


def _read_input(path: Optional[str], stdin: TextIO) -> str:
    """Read FILE, or stdin for ``None`` and ``-``.

    Args:
        path: File path or None.
        stdin: Stream used when no file is given.

    Returns:
        str: The input text.

    Raises:
        CLIError: If the file cannot be read.
    """
    if path is None or path == "-":
        return stdin.read()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise CLIError(f"Cannot read {path}: {e.strerror}") from e


def _build_service() -> ConversionService:
    """Create an unbounded conversion service for local use.

    Returns:
        ConversionService: Service using the configured tokenizer.
    """
    return ConversionService(TokenEstimator(TokenizerHandle(settings.tokenizer_encoding)), max_input_chars=sys.maxsize)


def encode_command(args: argparse.Namespace, stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """Convert JSON to TOON.

    Args:
        args: Parsed arguments.
        stdin: Input stream.
        stdout: Output stream.
        stderr: Diagnostics stream.

    Returns:
        int: Exit code.

    Raises:
        CLIError: If the --check read-back fails.
    """
    result = _build_service().convert(_read_input(args.file, stdin), args.delimiter, args.length_marker, args.indent)
    if result.fixed:
        print(f"warning: {result.message}", file=stderr)
    if args.check:
        try:
            checked = verify_document(result.toon)
        except ValueError as e:
            raise CLIError(f"check failed: {e}") from e
        print(f"check: {checked} arrays read back", file=stderr)
    if args.stats and result.token_savings:
        s = result.token_savings
        print(f"tokens: json={s.json_tokens} toon={s.toon_tokens} saved={s.saved} ({s.percentage}%)", file=stderr)
    print(result.toon, file=stdout)
    return 0


def repair_command(args: argparse.Namespace, stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """Repair malformed JSON.

    Args:
        args: Parsed arguments.
        stdin: Input stream.
        stdout: Output stream.
        stderr: Diagnostics stream.

    Returns:
        int: Exit code.
    """
    result = _build_service().fix_json(_read_input(args.file, stdin))
    for change in result.changes:
        print(f"- {change}", file=stderr)
    print(result.text, file=stdout)
    return 0


def count_command(args: argparse.Namespace, stdin: TextIO, stdout: TextIO, _stderr: TextIO) -> int:
    """Count tokens, words and characters.

    Args:
        args: Parsed arguments.
        stdin: Input stream.
        stdout: Output stream.
        _stderr: Diagnostics stream (unused).

    Returns:
        int: Exit code.
    """
    result = _build_service().count(_read_input(args.file, stdin))
    print(orjson.dumps(result.model_dump(by_alias=True)).decode(), file=stdout)
    return 0


def serve_command(args: argparse.Namespace, _stdin: TextIO, _stdout: TextIO, _stderr: TextIO) -> int:
    """Run the HTTP service with uvicorn.

    Args:
        args: Parsed arguments.
        _stdin: Unused.
        _stdout: Unused.
        _stderr: Unused.

    Returns:
        int: Exit code.
    """
    uvicorn.run("toongateway.main:app", host=args.host, port=args.port, reload=args.reload, log_level=settings.log_level.lower())
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(prog="toongateway", description="Convert JSON to TOON, repair JSON, and count tokens")
    parser.add_argument("--version", "-V", action="version", version=f"toongateway {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    encode_parser = subparsers.add_parser("encode", help="Convert JSON to TOON")
    encode_parser.add_argument("file", nargs="?", help="Input JSON file (default: stdin)")
    encode_parser.add_argument("--delimiter", "-d", type=_delimiter, default=None, help="comma, tab or pipe (default: comma)")
    encode_parser.add_argument("--indent", "-i", type=int, default=None, help="Spaces per nesting level (default: 2)")
    encode_parser.add_argument("--length-marker", "-l", action="store_true", help="Prefix array lengths with #")
    encode_parser.add_argument("--check", action="store_true", help="Read back inline and tabular arrays after encoding")
    encode_parser.add_argument("--stats", action="store_true", help="Print token savings to stderr")
    encode_parser.set_defaults(func=encode_command)

    repair_parser = subparsers.add_parser("repair", help="Repair malformed JSON")
    repair_parser.add_argument("file", nargs="?", help="Input file (default: stdin)")
    repair_parser.set_defaults(func=repair_command)

    count_parser = subparsers.add_parser("count", help="Count tokens, words and characters")
    count_parser.add_argument("file", nargs="?", help="Input file (default: stdin)")
    count_parser.set_defaults(func=count_command)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    serve_parser.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.set_defaults(func=serve_command)

    return parser


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments (default: ``sys.argv[1:]``).
        stdin: Input stream (default: ``sys.stdin``).
        stdout: Output stream (default: ``sys.stdout``).
        stderr: Diagnostics stream (default: ``sys.stderr``).

    Returns:
        int: Exit code; 1 when the input could not be processed.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    parser = create_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help(stderr)
        return 1

    logging_service.configure(level="DEBUG" if args.verbose else "WARNING", log_format="text", stream=stderr)

    try:
        return args.func(args, stdin, stdout, stderr)
    except (ConversionError, InvalidOptionError, CLIError) as e:
        print(f"error: {e}", file=stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
