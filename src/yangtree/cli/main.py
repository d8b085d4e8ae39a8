# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the yangtree command-line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path

from yachalk import chalk

from yangtree.compiler.export import to_dict, to_json, write_json
from yangtree.compiler.build import parse_multiple, parse_single
from yangtree.model.diagnostics import Diagnostic, Severity
from yangtree.model.entities import BatchResult, ParseResult, YangSource
from yangtree.workspace.config import CONFIG_FILE_NAME, DEFAULT_CONFIG, ConfigError, ParserConfig, load_parser_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the yangtree CLI."""
    parser = argparse.ArgumentParser(
        prog="yangtree",
        description="yangtree: YANG module parser and dependency graph builder",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Parser configuration file (default: {CONFIG_FILE_NAME} next to the input, if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # parse subcommand
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse a single YANG file",
        description="Parse one YANG file and print its diagnostics or its full result.",
    )
    parse_parser.add_argument("file", help="YANG file to parse")
    parse_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full parse result as JSON",
    )
    parse_parser.add_argument(
        "--fallback",
        action="store_true",
        help="Use the line-based fallback parser only",
    )
    parse_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Also write the full result as JSON to this path",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check every YANG file in a directory",
        description="Parse all *.yang files in a directory as one batch and report diagnostics and cycles.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the YANG files (default: current directory)",
    )
    check_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Also write the full batch result as JSON to this path",
    )

    # graph subcommand
    graph_parser = subparsers.add_parser(
        "graph",
        help="Print the dependency graph of a directory",
        description="Parse all *.yang files in a directory and print their dependency graph as JSON.",
    )
    graph_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the YANG files (default: current directory)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_SEVERITY_STYLES = {
    Severity.ERROR: chalk.red,
    Severity.WARNING: chalk.yellow,
    Severity.INFO: chalk.blue,
}


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "parse":
        return _cmd_parse(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "graph":
        return _cmd_graph(args)
    return 0


def _load_config(explicit: Path | None, directory: Path) -> ParserConfig:
    """Load the explicit config file, or the default one in *directory* if present.

    Raises:
        ConfigError: If the selected file is missing or invalid.
    """
    if explicit is not None:
        return load_parser_config(explicit)
    candidate = directory / CONFIG_FILE_NAME
    if candidate.exists():
        return load_parser_config(candidate)
    return DEFAULT_CONFIG


def _format_diagnostic(diagnostic: Diagnostic) -> str:
    position = f"{diagnostic.line}" if diagnostic.column is None else f"{diagnostic.line}:{diagnostic.column}"
    label = _SEVERITY_STYLES[diagnostic.severity](diagnostic.severity.value)
    return f"  line {position}: {label} [{diagnostic.category.value}] {diagnostic.message}"


def _print_result(result: ParseResult) -> None:
    module = result.tree.name if result.tree is not None else "<no module>"
    print(f"{result.filename}: {module} (parser: {result.parser_used})")
    for diagnostic in result.diagnostics:
        print(_format_diagnostic(diagnostic))


def _collect_sources(directory: Path) -> list[YangSource]:
    return [
        YangSource(
            name=path.relative_to(directory).as_posix(),
            content=path.read_text(encoding="utf-8", errors="replace"),
        )
        for path in sorted(directory.rglob("*.yang"))
    ]


def _parse_directory(args: argparse.Namespace) -> BatchResult | None:
    """Parse the directory of a check/graph command, reporting problems on stderr."""
    directory = Path(args.directory).resolve()
    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None
    try:
        config = _load_config(args.config, directory)
        sources = _collect_sources(directory)
    except (ConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None
    return parse_multiple(sources, config=config)


def _cmd_parse(args: argparse.Namespace) -> int:
    """Handle the parse subcommand."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file '{path}' does not exist.", file=sys.stderr)
        return 1
    try:
        config = _load_config(args.config, path.resolve().parent)
        content = path.read_bytes()
    except (ConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    result = parse_single(content, path.name, config=config, force_fallback=args.fallback)
    if args.json:
        print(to_json(result, indent=2))
    else:
        _print_result(result)
        print(chalk.green("Result: valid") if result.valid else chalk.red("Result: invalid"))
    if args.output is not None:
        write_json(result, args.output)
    return 0 if result.valid else 1


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    batch = _parse_directory(args)
    if batch is None:
        return 1
    if not batch.files:
        print("No .yang files found.")
        return 0

    print(f"Checking {len(batch.files)} YANG file(s)...")
    for result in batch.files:
        if result.diagnostics:
            _print_result(result)

    cycles = [edge for edge in batch.graph.edges if edge.in_cycle]
    if cycles:
        print(chalk.red("Circular imports:"))
        for edge in cycles:
            print(f"  {edge.source} -> {edge.target}")

    summary = batch.summary
    print(
        f"{summary.total_modules} file(s), {summary.valid_modules} valid, {summary.total_errors} error(s)."
    )
    if args.output is not None:
        write_json(batch, args.output)
    return 1 if summary.total_errors else 0


def _cmd_graph(args: argparse.Namespace) -> int:
    """Handle the graph subcommand."""
    batch = _parse_directory(args)
    if batch is None:
        return 1
    payload = to_dict(batch)
    print(json.dumps({"dependencies": payload["dependencies"], "graph": payload["graph"]}, indent=2))
    return 0
