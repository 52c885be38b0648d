"""Command-line interface for htmltomd."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .core.converter import Converter
from .errors import HtmlToMdError
from .logging_config import setup_logging
from .models.config import ServerConfig
from .models.conversion import ConversionRequest
from .models.events import ConversionEvent, EventType


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="htmltomd",
        description="Convert a region of a web page to Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the HTTP server on :8080
  htmltomd serve

  # Use a config file
  htmltomd serve --config htmltomd.yaml

  # Convert one page to stdout
  htmltomd convert https://example.com/post.html --selector .content \\
      --filter .post-actions --filter .article-nav

  # Convert a saved page, resolving links against its original URL
  htmltomd convert https://example.com/post.html --file post.html --json
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to YAML config file",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    common.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only log errors",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", parents=[common], help="Run the HTTP server")
    serve.add_argument("--host", type=str, default=None, help="Interface to bind (default: 0.0.0.0)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Port to listen on (default: 8080)")
    serve.add_argument("--timeout", type=float, default=None, help="Fetch timeout in seconds")

    convert = subparsers.add_parser("convert", parents=[common], help="Convert a single page")
    convert.add_argument("url", help="URL of the page")
    convert.add_argument("--selector", "-s", default="", help="CSS selector of the region to convert")
    convert.add_argument(
        "--filter",
        "-f",
        action="append",
        dest="filters",
        default=[],
        metavar="SELECTOR",
        help="CSS selector to remove (repeatable, applied in order)",
    )
    convert.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Read HTML from this file instead of fetching the URL",
    )
    convert.add_argument("--json", action="store_true", help="Print the JSON response instead of Markdown")
    convert.add_argument("--timeout", type=float, default=None, help="Fetch timeout in seconds")

    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Build the config from the optional YAML file and command-line overrides."""
    config = ServerConfig.from_yaml_file(args.config) if args.config else ServerConfig()

    overrides: dict = {}
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None) is not None:
        overrides["port"] = args.port
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    elif args.quiet:
        overrides["log_level"] = "ERROR"

    data = config.model_dump()
    data.update(overrides)
    if getattr(args, "timeout", None) is not None:
        data["fetch"]["timeout"] = args.timeout
    return ServerConfig.model_validate(data)


def run_convert(args: argparse.Namespace, config: ServerConfig) -> int:
    """Convert one page and print the result."""
    console = Console(stderr=True)

    try:
        request = ConversionRequest(url=args.url, selector=args.selector, filters=args.filters)
    except ValidationError as e:
        console.print(f"[red]Invalid request:[/red] {e.errors()[0]['msg']}")
        return 2

    html: Optional[bytes] = None
    if args.file:
        try:
            html = args.file.read_bytes()
        except OSError as e:
            console.print(f"[red]Error:[/red] cannot read {args.file}: {e}")
            return 1

    def on_event(event: ConversionEvent) -> None:
        if not args.verbose:
            return
        style = "red" if event.type == EventType.FAILED else "cyan"
        console.print(f"[{style}]{event}[/{style}]")

    async def run() -> int:
        try:
            async with Converter(config) as converter:
                if html is not None:
                    response = await converter.convert_html(request, html, emit=on_event)
                else:
                    response = await converter.convert(request, emit=on_event)
        except HtmlToMdError as e:
            console.print(f"[red]Error:[/red] {e}")
            return 1

        if args.json:
            print(json.dumps(response.model_dump(), ensure_ascii=False, indent=2))
        else:
            if not args.quiet:
                console.print(f"[green]{response.filename}[/green]")
            sys.stdout.write(response.content)
        return 0

    return asyncio.run(run())


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except (ValidationError, OSError, ValueError, yaml.YAMLError) as e:
        Console(stderr=True).print(f"[red]Configuration error:[/red] {e}")
        return 1

    # Markdown goes to stdout in convert mode, so logs must not
    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        stream=sys.stdout if args.command == "serve" else sys.stderr,
    )

    if args.command == "serve":
        from .server import run_server

        run_server(config)
        return 0

    return run_convert(args, config)


if __name__ == "__main__":
    sys.exit(main())
