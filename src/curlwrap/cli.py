"""Command-line interface for curlwrap."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .client import Client
from .errors import ConfigurationError, CurlwrapError, ParseError
from .logging_config import setup_logging
from .models.config import ClientSettings
from .models.response import ParsedResponse

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_TRANSPORT_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="curlwrap",
        description="Request a path on a host and show every hop's headers plus the body",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch a page with headers of every redirect hop
  curlwrap http://site.ru/ page/1 -I -L

  # Convert a windows-1251 page to utf-8
  curlwrap http://site.ru/ page/1 --from-charset windows-1251 --to-charset utf-8

  # POST a form through a random proxy from the proxy directory
  curlwrap http://site.ru/ login -X POST -F user=me -F password=secret --proxy auto

  # Load settings from YAML and override the path
  curlwrap --config site.yaml catalog/
        """,
    )

    parser.add_argument("host", nargs="?", help="Base host, e.g. http://site.ru/")
    parser.add_argument("path", nargs="?", default="", help="Path relative to the host (default: /)")

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file; command-line flags override it",
    )

    request_group = parser.add_argument_group("request settings")
    request_group.add_argument("-X", "--method", choices=["GET", "PUT", "POST"], help="Request method")
    request_group.add_argument("-d", "--data", help="Pre-encoded request body")
    request_group.add_argument(
        "-F",
        "--form",
        action="append",
        metavar="NAME=VALUE",
        help="Form field to encode as the body (repeatable)",
    )
    request_group.add_argument(
        "-H",
        "--header",
        action="append",
        metavar="'NAME: VALUE'",
        help="Custom request header (repeatable)",
    )
    request_group.add_argument("-e", "--referer", help="Referer header")
    request_group.add_argument("-A", "--user-agent", help="User-Agent header")
    request_group.add_argument("-b", "--cookie", help="Cookie header value")
    request_group.add_argument("-c", "--cookie-jar", type=Path, help="Cookie jar file to read and update")

    network_group = parser.add_argument_group("network settings")
    network_group.add_argument("-I", "--show-headers", action="store_true", help="Capture headers of every hop")
    network_group.add_argument("-L", "--follow", action="store_true", help="Follow redirects")
    network_group.add_argument("--max-redirects", type=int, help="Maximum redirects to follow")
    network_group.add_argument("-x", "--proxy", help="Proxy host:port, or 'auto'")
    network_group.add_argument("-k", "--insecure", action="store_true", help="Disable TLS verification")
    network_group.add_argument("--timeout", type=float, help="Total timeout in seconds")
    network_group.add_argument("--connect-timeout", type=float, help="Connection timeout in seconds")

    output_group = parser.add_argument_group("output settings")
    output_group.add_argument("--from-charset", help="Charset of the response body, or 'auto'")
    output_group.add_argument("--to-charset", help="Charset to convert the response body to")
    output_group.add_argument("-o", "--output", type=Path, help="Write the body to a file instead of stdout")
    output_group.add_argument("--json", action="store_true", help="Print the whole response as JSON")
    output_group.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    output_group.add_argument("-q", "--quiet", action="store_true", help="Only print the body")

    return parser


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _parse_pairs(values: Optional[list[str]], separator: str, what: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition(separator)
        if not sep or not name.strip():
            raise ConfigurationError(f"Invalid {what} {item!r}")
        pairs[name.strip()] = value.strip()
    return pairs


def build_settings(args: argparse.Namespace) -> ClientSettings:
    """
    Build client settings from the config file and command-line flags.

    Raises:
        ConfigurationError: If flags are malformed or no host is given
        ValidationError: If the merged settings are invalid
    """
    data: dict[str, Any] = {}
    if args.config:
        data = ClientSettings.from_yaml_file(args.config).model_dump(exclude_unset=True)

    # With a host from --config, a single positional argument is the path
    if data.get("host") and args.host and not args.path and "://" not in args.host:
        args.host, args.path = None, args.host

    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.show_headers:
        overrides["show_headers"] = True
    if args.referer:
        overrides["referer"] = args.referer

    headers = _parse_pairs(args.header, ":", "header")
    if headers:
        overrides["headers"] = headers

    network: dict[str, Any] = {}
    if args.follow:
        network["follow_redirects"] = True
    if args.max_redirects is not None:
        network["max_redirects"] = args.max_redirects
    if args.proxy:
        network["proxy"] = args.proxy
    if args.user_agent:
        network["user_agent"] = args.user_agent
    if args.insecure:
        network["verify_tls"] = False
    if args.timeout is not None:
        network["timeout"] = args.timeout
    if args.connect_timeout is not None:
        network["connect_timeout"] = args.connect_timeout
    if network:
        overrides["network"] = network

    cookies: dict[str, Any] = {}
    if args.cookie:
        cookies["cookie"] = args.cookie
    if args.cookie_jar:
        cookies["jar"] = args.cookie_jar
    if cookies:
        overrides["cookies"] = cookies

    query: dict[str, Any] = {}
    if args.method:
        query["method"] = args.method
    if args.data is not None:
        query["data"] = args.data
    form = _parse_pairs(args.form, "=", "form field")
    if form:
        query["form"] = form
    if query:
        overrides["query"] = query

    if args.verbose:
        overrides["log_level"] = "DEBUG"
    elif args.quiet:
        overrides["log_level"] = "ERROR"

    merged = _merge(data, overrides)
    if not merged.get("host"):
        raise ConfigurationError("A host is required (positional argument or 'host' in --config)")
    return ClientSettings.model_validate(merged)


def print_headers(console: Console, response: ParsedResponse) -> None:
    """Print one table per header block."""
    for index, block in enumerate(response.headers):
        table = Table(title=f"Hop {index + 1}: {block.status_line}", show_header=False, title_justify="left")
        table.add_column("Header", style="cyan", no_wrap=True)
        table.add_column("Value")
        for name, value in block.headers.items():
            for item in value if isinstance(value, list) else [value]:
                table.add_row(name, item)
        console.print(table)


def response_to_json(response: ParsedResponse) -> str:
    """Serialize a response to JSON, decoding the body as text."""
    data = response.as_dict()
    data["content"] = response.text
    data["info"] = dict(response.info)
    return json.dumps(data, indent=2, ensure_ascii=False)


def run_request(args: argparse.Namespace) -> int:
    """Run one request from parsed arguments and print the result."""
    console = Console(stderr=True)

    try:
        settings = build_settings(args)
    except (ConfigurationError, ValidationError, yaml.YAMLError, OSError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return EXIT_ERROR

    setup_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        with Client.from_settings(settings) as client:
            response = client.execute(args.path, args.from_charset, args.to_charset)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return EXIT_ERROR
    except ParseError as e:
        console.print(f"[red]Cannot parse response:[/red] {e}")
        return EXIT_ERROR
    except CurlwrapError as e:
        console.print(f"[red]Error:[/red] {e}")
        return EXIT_ERROR

    if args.json:
        print(response_to_json(response))
    else:
        if not args.quiet:
            print_headers(console, response)
        if args.output:
            args.output.write_bytes(response.content)
            if not args.quiet:
                console.print(f"Saved {len(response.content)} bytes to {args.output}")
        else:
            sys.stdout.buffer.write(response.content)
            sys.stdout.flush()

    if not response.ok:
        console.print(f"[red]Transport error {response.errno}:[/red] {response.error}")
        return EXIT_TRANSPORT_ERROR

    if args.verbose:
        console.print(f"[dim]{dict(response.info)}[/dim]")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_request(args)


if __name__ == "__main__":
    sys.exit(main())
