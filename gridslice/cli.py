"""gridslice CLI - run the slice server and inspect slices locally."""

import argparse
import logging
import sys
from typing import NoReturn

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gridslice.columns import letters_to_column_index
from gridslice.config import GridSliceConfig, LoggingConfig, get_config
from gridslice.engine import SliceEngine, Viewport
from gridslice.errors import ValidationError
from gridslice.observability.logging import (
    configure_structured_logging,
    configure_text_logging,
)

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure the root logger from the logging config.

    Args:
        config: Level and format, usually read from the environment.
        verbose: If True, force DEBUG regardless of the configured level.
    """
    level = logging.DEBUG if verbose else config.level_number
    if config.format == "json":
        configure_structured_logging(level=level)
    else:
        configure_text_logging(level=level)


def _engine_for(config: GridSliceConfig) -> SliceEngine:
    return SliceEngine(bounds=config.bounds, limits=config.limits)


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the WebSocket server.

    The listen address is fixed by configuration. A bind failure makes uvicorn
    exit the process with a non-zero status before any connection is served.

    Returns:
        Exit code.
    """
    import uvicorn

    config = get_config()
    server = config.server

    console.print(
        Panel(
            f"[bold green]Starting gridslice server[/bold green]\n"
            f"Endpoint: ws://{server.host}:{server.port}{server.path}\n"
            f"Grid: {config.bounds.max_rows:,} rows x {config.bounds.max_cols:,} columns\n"
            f"Max message size: {server.max_message_size // (1024 * 1024)} MiB",
            title="gridslice",
        )
    )

    try:
        uvicorn.run(
            "api.main:app",
            host=server.host,
            port=server.port,
            ws="websockets",
            ws_max_size=server.max_message_size,
            log_config=None,
            log_level=config.logging.level,
        )
        return 0
    except Exception as e:
        console.print(f"[red]Error starting server: {e}[/red]")
        return 1


def cmd_metadata(args: argparse.Namespace) -> int:
    """Print the grid bounds served to clients."""
    bounds = _engine_for(get_config()).compute_metadata()
    console.print(f"maxRows: {bounds.max_rows}")
    console.print(f"maxCols: {bounds.max_cols}")
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    """Compute a slice locally and print its window and leading cells.

    Returns:
        Exit code (1 if the viewport is rejected).
    """
    scroll_left = args.scroll_left
    if args.start_column:
        try:
            scroll_left = letters_to_column_index(args.start_column) * args.column_width
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return 1

    viewport = Viewport(
        screen_width=args.screen_width,
        screen_height=args.screen_height,
        horizontal_buffer=args.horizontal_buffer,
        vertical_buffer=args.vertical_buffer,
        default_column_width=args.column_width,
        default_row_height=args.row_height,
        scroll_left=scroll_left,
        scroll_top=args.scroll_top,
    )

    try:
        result = _engine_for(get_config()).compute_slice(viewport)
    except ValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1

    window = result.window
    console.print(
        f"Rows {window.start_row}-{window.end_row} ({window.row_count}), "
        f"columns {window.start_col}-{window.end_col} ({window.col_count})"
    )
    if not window.row_count or not window.col_count:
        console.print("[dim]Empty slice.[/dim]")
        return 0

    shown_cols = result.col_letters[: args.max_cols]
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    for letters in shown_cols:
        table.add_column(letters)

    for offset, cells in enumerate(result.cells_by_row[: args.max_rows]):
        table.add_row(str(window.start_row + offset + 1), *cells[: len(shown_cols)])

    console.print(table)
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    from gridslice import __version__

    console.print(f"gridslice v{__version__}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="gridslice",
        description="gridslice - serve viewport slices of a huge virtual grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gridslice serve                          Start the WebSocket server
  gridslice metadata                       Show grid bounds
  gridslice preview --scroll-top 4000      Preview the slice at a scroll offset
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the WebSocket server",
    )
    serve_parser.set_defaults(func=cmd_serve)

    metadata_parser = subparsers.add_parser(
        "metadata",
        help="Show grid bounds",
    )
    metadata_parser.set_defaults(func=cmd_metadata)

    preview_parser = subparsers.add_parser(
        "preview",
        help="Compute and print a slice for a viewport",
    )
    for flag, default, help_text in (
        ("--screen-width", 1200, "Visible width (default: 1200)"),
        ("--screen-height", 800, "Visible height (default: 800)"),
        ("--horizontal-buffer", 2, "Extra columns on each side (default: 2)"),
        ("--vertical-buffer", 5, "Extra rows on each side (default: 5)"),
        ("--column-width", 100, "Default column width (default: 100)"),
        ("--row-height", 20, "Default row height (default: 20)"),
        ("--scroll-left", 0, "Horizontal scroll offset (default: 0)"),
        ("--scroll-top", 0, "Vertical scroll offset (default: 0)"),
    ):
        preview_parser.add_argument(flag, type=int, default=default, help=help_text)
    preview_parser.add_argument(
        "--start-column",
        metavar="LABEL",
        help="Scroll so this column (e.g. AA) is leftmost; overrides --scroll-left",
    )
    preview_parser.add_argument(
        "--max-rows",
        type=int,
        default=20,
        help="Rows to print (default: 20)",
    )
    preview_parser.add_argument(
        "--max-cols",
        type=int,
        default=8,
        help="Columns to print (default: 8)",
    )
    preview_parser.set_defaults(func=cmd_preview)

    version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
    )
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. Uses sys.argv if None.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        return cmd_version(args)

    setup_logging(get_config().logging, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    result: int = args.func(args)
    return result


def run() -> NoReturn:
    """Entry point that handles interrupts and exit."""
    try:
        exit_code = main()
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")
        exit_code = 130
    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        logger.exception("Unexpected error")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    run()
