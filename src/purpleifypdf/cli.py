"""CLI entry point for purpleifypdf."""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from pydantic import ValidationError

from purpleifypdf import __version__, logger
from purpleifypdf.dependencies import ensure_render_dependencies
from purpleifypdf.exceptions import PackageError
from purpleifypdf.images import transform_images
from purpleifypdf.logging import configure_logging
from purpleifypdf.pipeline import Progress, transform
from purpleifypdf.port import Port
from purpleifypdf.settings import Settings, get_settings
from purpleifypdf.transformation import transform_page_png
from purpleifypdf.typing.enums import Quality
from purpleifypdf.typing.models import Color, PageRange


def _quality_from_cli(value: str) -> Quality:
    """Convert `--quality` CLI value into a quality level.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not supported.

    Returns:
        Quality: Selected quality.
    """
    try:
        return Quality.from_str(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _color_from_cli(value: str) -> Color:
    """Convert `--background` CLI value (`#rrggbb`) into a colour.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a hex colour.

    Returns:
        Color: Parsed colour.
    """
    try:
        return Color.from_hex(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", required=True, type=Path, dest="input_path")
    parser.add_argument("--output", required=True, type=Path, dest="output_path")
    parser.add_argument("--quality", type=_quality_from_cli, default=None)
    parser.add_argument("--background", type=_color_from_cli, default=None, dest="background_color")


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page-start", type=int, default=0, dest="page_start", help="First page (0-based)")
    parser.add_argument("--page-count", type=int, default=None, dest="page_count")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="purpleifypdf")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    transform_parser = subparsers.add_parser("transform", help="Write a PDF with its background replaced")
    _add_render_arguments(transform_parser)
    _add_range_arguments(transform_parser)

    images_parser = subparsers.add_parser("images", help="Write the page image stream of a PDF")
    _add_render_arguments(images_parser)
    _add_range_arguments(images_parser)

    page_parser = subparsers.add_parser("page", help="Write one transformed page as PNG")
    _add_render_arguments(page_parser)
    page_parser.add_argument("--page", type=int, required=True, help="Page index (0-based)")

    subparsers.add_parser("port", help="Serve a host process over stdin/stdout")

    return parser


def _build_page_range(args: argparse.Namespace) -> PageRange | None:
    """Build the page range selected on the command line.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Raises:
        argparse.ArgumentTypeError: If a start page is given without a page count,
            or if either value is negative.

    Returns:
        PageRange | None: Selected range, or None for every page.
    """
    if args.page_count is None:
        if args.page_start:
            raise argparse.ArgumentTypeError("--page-count is required with --page-start")
        return None
    try:
        return PageRange(starting_index=args.page_start, count=args.page_count)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError("--page-start and --page-count must not be negative") from exc


def _run_transform(args: argparse.Namespace, settings: Settings) -> None:
    step = transform(
        args.input_path.read_bytes(),
        _build_page_range(args),
        args.quality or settings.default_quality,
        args.background_color or settings.background_color,
    )
    while isinstance(step := step.next(), Progress):
        logger.info("Transforming", extra={"percent_done": round(step.percent_done * 100, 1)})

    document = step.result()
    args.output_path.write_bytes(document.data)
    logger.info("Transformation completed", extra={"output_path": str(args.output_path)})


def _run_images(args: argparse.Namespace, settings: Settings) -> None:
    stream = transform_images(
        args.input_path.read_bytes(),
        _build_page_range(args),
        args.quality or settings.default_quality,
        args.background_color or settings.background_color,
    )
    with stream, args.output_path.open("wb") as out:
        shutil.copyfileobj(stream, out)
    logger.info("Image stream written", extra={"output_path": str(args.output_path)})


def _run_page(args: argparse.Namespace, settings: Settings) -> None:
    png = transform_page_png(
        args.input_path.read_bytes(),
        args.page,
        args.quality or settings.default_quality,
        args.background_color or settings.background_color,
    )
    args.output_path.write_bytes(png)
    logger.info("Page written", extra={"output_path": str(args.output_path), "page": args.page})


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    ensure_render_dependencies()

    if args.command == "port":
        Port(sys.stdin.buffer, sys.stdout.buffer).serve()
        return 0

    commands = {
        "transform": _run_transform,
        "images": _run_images,
        "page": _run_page,
    }
    try:
        commands[args.command](args, settings)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except (PackageError, OSError):
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
