"""Command-line interface for fb2md.

Converts a single FictionBook file, or every FB2 file below a directory,
to Markdown.

Examples
--------
Basic conversion (writes book.md in the current directory):
    $ fb2md book.fb2

Explicit output path:
    $ fb2md book.fb2 output.md

Convert a directory tree into one output directory:
    $ fb2md -o out/ books/

Extract embedded images (default directory: <output>_images):
    $ fb2md -i book.fb2

Use environment variables for defaults:
    $ export FB2MD_IMAGES=true
    $ export FB2MD_OUTPUT_DIR=./converted
    $ fb2md books/
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from fb2md import __version__
from fb2md.constants import (
    ENV_VAR_PREFIX,
    EPUB_EXTENSION,
    EXIT_CONVERSION_ERROR,
    EXIT_FILE_ERROR,
    EXIT_SUCCESS,
    EXIT_USAGE_ERROR,
)
from fb2md.converter import convert_file, default_output_path, is_fb2_path
from fb2md.exceptions import Fb2MdError, FileError
from fb2md.logging_utils import configure_logging, resolve_log_level
from fb2md.options import Fb2MarkdownOptions

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")


def get_env_var_value(key: str) -> Optional[str]:
    """Get environment variable with FB2MD_ prefix.

    Parameters
    ----------
    key : str
        The parameter name (e.g., 'images_dir')

    Returns
    -------
    Optional[str]
        Environment variable value or None if not set

    """
    env_key = f"{ENV_VAR_PREFIX}{key.upper().replace('-', '_')}"
    return os.environ.get(env_key)


def apply_env_vars_to_parser(parser: argparse.ArgumentParser) -> None:
    """Apply environment variables as defaults to parser arguments.

    CLI arguments still take precedence over environment variables.
    """
    for action in parser._actions:
        if not action.dest or action.dest in ("help", "version") or not action.option_strings:
            continue
        env_value = get_env_var_value(action.dest)
        if env_value is None:
            continue

        if isinstance(action, (argparse._StoreTrueAction, argparse._StoreFalseAction)):
            # Flag destinations are named positively, so the value maps directly
            action.default = env_value.lower() in _TRUE_VALUES
        elif action.choices:
            if env_value.upper() in action.choices:
                action.default = env_value.upper()
            else:
                logger.warning(
                    "Invalid choice for %s%s: %s. Choices: %s",
                    ENV_VAR_PREFIX,
                    action.dest.upper(),
                    env_value,
                    list(action.choices),
                )
        else:
            action.default = env_value


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fb2md",
        description="Convert FB2 ebooks to Markdown.",
        epilog="Environment variables FB2MD_<OPTION> (e.g. FB2MD_IMAGES_DIR) provide defaults.",
    )
    parser.add_argument("input", help="FB2 file or directory of FB2 files")
    parser.add_argument("output", nargs="?", help="Output Markdown path (single file input only)")
    parser.add_argument("-i", "--images", action="store_true", help="Extract embedded images")
    parser.add_argument(
        "--images-dir",
        dest="images_dir",
        help="Directory for extracted images (default: <output>_images)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        help="Output directory (batch conversion, or default location for single files)",
    )
    parser.add_argument(
        "--no-description",
        dest="include_description",
        action="store_false",
        help="Do not render the book title, authors and annotation",
    )
    parser.add_argument("-v", "--version", action="version", version=f"fb2md {__version__}")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--verbose", action="store_true", help="Shortcut for --log-level DEBUG")
    parser.add_argument("--log-file", dest="log_file", help="Also write log output to this file")
    parser.add_argument("--trace", action="store_true", help="Very verbose logging with timestamps")
    parser.add_argument("--rich", action="store_true", help="Format log messages and the batch summary with rich")
    apply_env_vars_to_parser(parser)
    return parser


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    log_level = resolve_log_level(parsed_args.log_level, verbose=parsed_args.verbose, trace=parsed_args.trace)
    configure_logging(
        log_level,
        log_file=parsed_args.log_file,
        trace_mode=parsed_args.trace,
        use_rich=should_use_rich_output(parsed_args, sys.stderr),
    )


def should_use_rich_output(args: argparse.Namespace, stream=None) -> bool:
    """Return True when ``--rich`` was given and the output stream is a terminal."""
    if not args.rich:
        return False
    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(callable(isatty) and isatty())


def build_options(args: argparse.Namespace) -> Fb2MarkdownOptions:
    """Map parsed arguments onto conversion options."""
    return Fb2MarkdownOptions(
        extract_images=args.images,
        images_dir=args.images_dir or None,
        include_description=args.include_description,
    )


@dataclass
class BatchReport:
    """Files converted and failed during a directory conversion."""

    converted: list[tuple[Path, Path]] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)


def batch_output_path(input_dir: Path, path: Path, output_dir: Path) -> Path:
    """Map a file below ``input_dir`` to a flat ``.md`` name in ``output_dir``."""
    relative = path.relative_to(input_dir)
    flat = default_output_path(relative).with_suffix("")
    parts = [*relative.parent.parts, flat.name]
    return output_dir / ("_".join(parts) + ".md")


def convert_directory(input_dir: Path, output_dir: Path, options: Fb2MarkdownOptions) -> BatchReport:
    """Convert every FB2 file below ``input_dir``.

    A file that fails is logged and skipped; the rest are still converted.
    """
    report = BatchReport()
    for path in sorted(p for p in input_dir.rglob("*") if p.is_file()):
        if path.suffix.lower() == EPUB_EXTENSION:
            logger.warning("%s: EPUB input is not supported, skipping", path)
            continue
        if not is_fb2_path(path):
            continue

        out_path = batch_output_path(input_dir, path, output_dir)
        try:
            convert_file(path, out_path, options)
        except Fb2MdError as exc:
            logger.warning("%s: %s", path, exc)
            report.failed.append((path, str(exc)))
            continue
        print(f"{path} -> {out_path}")
        report.converted.append((path, out_path))
    return report


def _print_rich_summary(report: BatchReport) -> None:
    console = Console()
    table = Table(title="fb2md conversion summary")
    table.add_column("Input")
    table.add_column("Result")
    for source, target in report.converted:
        table.add_row(str(source), f"[green]{target}[/green]")
    for source, message in report.failed:
        table.add_row(str(source), f"[red]{message}[/red]")
    console.print(table)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the fb2md command line.

    Returns
    -------
    int
        Process exit code

    """
    parser = create_parser()
    args = parser.parse_args(argv)
    _setup_logging_level(args)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"error: {input_path}: no such file or directory", file=sys.stderr)
        return EXIT_FILE_ERROR

    options = build_options(args)

    if input_path.is_dir():
        if args.output:
            parser.print_usage(sys.stderr)
            print("error: an explicit output path cannot be used with a directory input", file=sys.stderr)
            return EXIT_USAGE_ERROR
        output_dir = Path(args.output_dir or ".")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            print(f"error: cannot create output directory: {exc}", file=sys.stderr)
            return EXIT_FILE_ERROR

        report = convert_directory(input_path, output_dir, options)
        if should_use_rich_output(args):
            _print_rich_summary(report)
        print(f"converted {len(report.converted)} file(s)")
        return EXIT_SUCCESS

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = default_output_path(input_path, args.output_dir)

    try:
        convert_file(input_path, output_path, options)
    except FileError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FILE_ERROR
    except Fb2MdError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONVERSION_ERROR

    if should_use_rich_output(args):
        _print_rich_summary(BatchReport(converted=[(input_path, output_path)]))
    else:
        print(f"{input_path} -> {output_path}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
