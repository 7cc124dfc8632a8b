"""Command-line entry point for searchintext."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from . import __version__
from .config.parser import ConfigurationError, create_config_template, load_config
from .engine import SearchEngine
from .models.config import OutputFormat
from .models.search_query import SearchConfig
from .reporting import BANNER_RULE, LogReporter, configure_logging, format_summary
from .tools.fs_walker import TraversalError
from .tools.path_probe import probe_root


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_TRAVERSAL_ERROR = 2


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="searchintext",
        usage="searchintext [OPTIONS] -p path -k keyword",
        description="Search for a keyword in file contents and in file and folder names",
    )
    parser.add_argument("-p", "--path", help="Path to directory to search")
    parser.add_argument("-k", "--keyword", help="Keyword to search")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose (prints all files searched)",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        metavar="BYTES",
        help="Files of this size or larger are matched by name only",
    )
    parser.add_argument("--workers", type=int, help="Worker threads running match tasks")
    parser.add_argument("--config", type=Path, help="Path to a YAML settings file")
    parser.add_argument(
        "--log-format",
        choices=[fmt.value for fmt in OutputFormat],
        help="Output format for match records",
    )
    parser.add_argument("--log-level", help="Root log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument(
        "--init-config",
        type=Path,
        metavar="PATH",
        help="Write a settings template to PATH and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _missing_arguments(args: argparse.Namespace) -> List[str]:
    errors = []
    if not args.path:
        errors.append("ERROR: Missing path to directory")
    if not args.keyword:
        errors.append("ERROR: Missing keyword to search")
    return errors


def _usage_error(parser: argparse.ArgumentParser, errors: Sequence[str]) -> int:
    for error in errors:
        print(error, file=sys.stderr)
    parser.print_help(sys.stderr)
    return EXIT_CONFIG_ERROR


def _print_banner() -> None:
    print(BANNER_RULE)
    print("searchintext: A search in text utility.")
    print("searching...")
    print(BANNER_RULE)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if args.init_config:
        try:
            create_config_template(args.init_config)
        except ConfigurationError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        print(f"Settings template written to {args.init_config}")
        return EXIT_OK

    errors = _missing_arguments(args)
    if errors:
        return _usage_error(parser, errors)

    try:
        parse_result = load_config(args.config)
    except ConfigurationError as e:
        return _usage_error(parser, [f"ERROR: {e}"])

    settings = parse_result.settings
    output_format = OutputFormat(args.log_format) if args.log_format else settings.output.format
    json_output = output_format == OutputFormat.JSON
    configure_logging(level=args.log_level or settings.output.log_level, json_output=json_output)

    for warning in parse_result.warnings:
        logger.debug(f"Configuration warning: {warning}")

    try:
        config = SearchConfig.from_settings(
            args.path,
            args.keyword,
            settings,
            verbose=True if args.verbose else None,
            size_ceiling_bytes=args.max_size,
            max_workers=args.workers,
        )
    except ValidationError as e:
        return _usage_error(parser, [f"ERROR: Invalid arguments: {e}"])

    try:
        probe_root(config.root_path)
    except ConfigurationError as e:
        return _usage_error(parser, [f"ERROR: {e}"])

    if not json_output:
        _print_banner()

    engine = SearchEngine(config, LogReporter(config.keyword))
    try:
        summary = engine.run()
    except ConfigurationError as e:
        return _usage_error(parser, [f"ERROR: {e}"])
    except TraversalError as e:
        logger.error(f"Search aborted: {e}")
        return EXIT_TRAVERSAL_ERROR

    if json_output:
        logger.info("Search complete.", extra={"summary": summary.to_dict()})
    else:
        print(BANNER_RULE)
        logger.info("Search complete.")
        print(format_summary(summary))

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
