"""Command-line interface for SDT Macro Extender.

Lets you try format strings and inspect data sources from the terminal,
using the same pipeline the host calls on every display refresh.

Usage:
    sdtmacro render "Out: ~eTempOutside~Value~round~1~ C" --url http://host/json
    sdtmacro lookup --url http://host/a.json --url http://host/b.json --format json
    sdtmacro version
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from sdtmacro import __version__
from sdtmacro.config import CacheMode, clean_urls, settings
from sdtmacro.pipeline import Fetcher, MacroRequest, MacroService

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="sdtmacro",
        description="SDT Macro Extender: JSON-backed macros for display strings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sdtmacro render "~eTempOutside~Value~round~1~" --url http://host/json
  sdtmacro lookup --url http://host/json --format json

URLs default to SDT_API_URLS from the environment or .env.
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # render command
    render_parser = subparsers.add_parser(
        "render",
        help="Substitute macros in a format string",
        description="Fetch configured sources and render one format string",
    )
    render_parser.add_argument(
        "format_string",
        type=str,
        help="Display format string containing macros",
    )
    render_parser.add_argument(
        "--url",
        action="append",
        dest="urls",
        default=None,
        help="JSON source URL (repeatable, default: from settings)",
    )
    render_parser.add_argument(
        "--client",
        type=str,
        default=None,
        help="Client identity used as cache key in client mode",
    )
    render_parser.add_argument(
        "--cache-mode",
        type=str,
        choices=[m.value for m in CacheMode],
        default=None,
        help="Cache sharing mode (default: from settings)",
    )

    # lookup command
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Show the merged lookup table of all sources",
    )
    lookup_parser.add_argument(
        "--url",
        action="append",
        dest="urls",
        default=None,
        help="JSON source URL (repeatable, default: from settings)",
    )
    lookup_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def _resolve_urls(args: argparse.Namespace) -> list[str]:
    if args.urls:
        return clean_urls(args.urls)
    return list(settings.api_urls)


def cmd_render(args: argparse.Namespace) -> int:
    """Execute the render command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        service = MacroService(urls=_resolve_urls(args), cache_mode=args.cache_mode)
        request = MacroRequest(format=args.format_string, client_id=args.client)

        logger.info(
            "Rendering with %d source(s) (cache_mode=%s)",
            len(service.urls), service.cache_mode.value,
        )
        asyncio.run(service.macro_string(request))

        print(request.format)
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("Render failed: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_lookup(args: argparse.Namespace) -> int:
    """Execute the lookup command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 2 if no URL is configured, 1 on failure)
    """
    urls = _resolve_urls(args)
    if not urls:
        print("Error: no data source URL configured", file=sys.stderr)
        return 2

    try:
        result = asyncio.run(Fetcher().fetch_all(urls))

        if args.format == "json":
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
        else:
            for url, ok in result.sources.items():
                print(f"{'ok  ' if ok else 'FAIL'} {url}")
            for record_id, record in result.aggregate.by_id.items():
                print(f"{record_id}: {json.dumps(record, ensure_ascii=False, default=str)}")

        return 0 if result.has_data else 1

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("Lookup failed: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    print(f"SDT Macro Extender v{__version__}")
    print("JSON-backed macros for SuperDateTime display strings")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    # Route to command handler
    if args.command == "render":
        return cmd_render(args)
    elif args.command == "lookup":
        return cmd_lookup(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        # No command specified
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
