# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the confparse command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from confparse.model.tree import Block, PropertyValue, ValueKind
from confparse.parser.diagnostics import Diagnostic, ParseContext
from confparse.parser.lexer import Lexer, TokenType
from confparse.parser.parser import ParseError, parse
from confparse.parser.reader import open_source
from confparse.settings.config import ParserSettings, SettingsError, load_settings

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the confparse CLI."""
    parser = argparse.ArgumentParser(
        prog="confparse",
        description="confparse - block/property configuration file parser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log file and include activity to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check that a configuration file parses",
        description="Parse a configuration file and all of its includes, reporting the first error.",
    )
    _add_file_arguments(check_parser)

    # show subcommand
    show_parser = subparsers.add_parser(
        "show",
        help="Print an outline of the parse tree",
        description="Parse a configuration file and print its blocks, properties and values.",
    )
    _add_file_arguments(show_parser)

    # tokens subcommand
    tokens_parser = subparsers.add_parser(
        "tokens",
        help="Print the token stream of a single file",
        description="Tokenize one configuration file without following includes.",
    )
    tokens_parser.add_argument("file", help="Configuration file to tokenize")
    tokens_parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the file (default: utf-8)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _add_file_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("file", help="Root configuration file")
    subparser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="YAML file with parser settings (encoding, max-include-depth, include-base)",
    )


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "show":
        return _cmd_show(args)
    if args.command == "tokens":
        return _cmd_tokens(args)
    return 0


def _print_diagnostic(diagnostic: Diagnostic) -> None:
    print(diagnostic, file=sys.stderr)


def _load_settings(args: argparse.Namespace) -> ParserSettings | None:
    """Load the settings named on the command line, printing any error."""
    if args.settings is None:
        return ParserSettings()
    try:
        return load_settings(args.settings)
    except SettingsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    settings = _load_settings(args)
    if settings is None:
        return 1

    try:
        tree = parse(args.file, sink=_print_diagnostic, settings=settings)
    except ParseError:
        return 1

    print(f"OK: {len(tree.blocks)} block(s) from {len(tree.files)} file(s)")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """Handle the show subcommand."""
    settings = _load_settings(args)
    if settings is None:
        return 1

    try:
        tree = parse(args.file, sink=_print_diagnostic, settings=settings)
    except ParseError:
        return 1

    for block in tree.blocks:
        print(_block_header(block))
        for prop in block.properties:
            values = ", ".join(_format_value(value) for value in prop.values)
            print(f"    {prop.name}: {values}")
    return 0


def _cmd_tokens(args: argparse.Namespace) -> int:
    """Handle the tokens subcommand."""
    context = ParseContext(args.file, sink=_print_diagnostic)
    try:
        with open_source(Path(args.file), args.encoding) as reader:
            for token in Lexer(reader, context):
                if token.type is TokenType.ERROR:
                    return 1
                value = token.number if token.type is TokenType.NUMBER else token.text
                print(f"{token.line:>5}  {token.type.name:<9}  {value!r}")
    except (OSError, LookupError) as exc:
        print(f"Error: cannot read '{args.file}': {exc}", file=sys.stderr)
        return 1
    return 0


def _block_header(block: Block) -> str:
    name = f" {block.block_name}" if block.block_name else ""
    return f"{block.block_type}{name}  ({block.file_name}:{block.line})"


def _format_value(value: PropertyValue) -> str:
    if value.kind is ValueKind.STRING:
        escaped = value.text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return str(value.value)
