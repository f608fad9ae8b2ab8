"""Command-line entrypoint for link-preview-fetch."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Sequence
from uuid import uuid4

from core.config import FetchDefaults
from core.models import FetchLimits
from core.pipeline import PreviewPipeline
from core.structured_logging import emit_json_event
from fetcher import BoundedFetcher, fetch_content_length
from parser import HtmlParseStage, get_meta_value, truncate
from quality import (
    normalize_url_for_output,
    pretty_filesize,
    resolve_absolute_url,
    uri_decode,
    uri_encode,
)


DESCRIPTION_MAX_CHARS = 200


def _emit_cli_event(
    event_type: str,
    *,
    run_id: str,
    command: str,
    **payload: Any,
) -> str:
    """Emit one structured CLI event line with standard fields."""
    return emit_json_event(
        event_type,
        run_id=run_id,
        command=command,
        **payload,
    )


def _parse_headers(raw_headers: Sequence[str] | None) -> dict[str, str]:
    """Parse repeated "Name: value" flags into a header mapping."""
    headers: dict[str, str] = {}
    for raw in raw_headers or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header {raw!r}, expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _limits_from_args(args: argparse.Namespace) -> FetchLimits:
    """Build immutable fetch limits from CLI flags."""
    return FetchLimits.from_kilobytes(
        args.max_download_kb,
        connect_timeout_seconds=args.connect_timeout,
        read_timeout_seconds=args.timeout,
        overall_timeout_seconds=args.timeout,
        max_redirects=args.max_redirects,
        user_agent=args.user_agent or None,
        verify_tls=not args.insecure,
        chain_timeout_seconds=args.chain_timeout,
    )


def _cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch one URL under limits and optionally write the body to a file."""
    run_id = args.run_id or str(uuid4())
    fetcher = BoundedFetcher(limits=_limits_from_args(args))
    body = fetcher.fetch(uri_encode(args.url), headers=_parse_headers(args.header), run_id=run_id)

    output = None
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(body)

    _emit_cli_event(
        "cli_fetch_completed",
        run_id=run_id,
        command="fetch",
        url=args.url,
        bytes_received=len(body),
        size=pretty_filesize(len(body)),
        output=str(output) if output else None,
    )
    return 0


def _cmd_preview(args: argparse.Namespace) -> int:
    """Fetch a page (preferring its canonical link) and print preview metadata."""
    run_id = args.run_id or str(uuid4())
    pipeline = PreviewPipeline(BoundedFetcher(limits=_limits_from_args(args)), HtmlParseStage())
    url = uri_encode(args.url)
    document = pipeline.run(url, headers=_parse_headers(args.header), run_id=run_id)

    description = get_meta_value(document.meta_tags, "og:description") or get_meta_value(
        document.meta_tags, "description"
    )
    image = get_meta_value(document.meta_tags, "og:image")
    if image:
        image = normalize_url_for_output(uri_encode(resolve_absolute_url(image, document.url)))

    _emit_cli_event(
        "cli_preview_completed",
        run_id=run_id,
        command="preview",
        url=normalize_url_for_output(document.url),
        title=get_meta_value(document.meta_tags, "og:title") or document.html_title,
        description=truncate(description, DESCRIPTION_MAX_CHARS) if description else None,
        image=image,
        fetched=not document.is_empty,
    )
    return 0 if not document.is_empty else 1


def _cmd_content_length(args: argparse.Namespace) -> int:
    """Print the Content-Length reported by a HEAD request."""
    length = fetch_content_length(uri_encode(args.url), limits=_limits_from_args(args))
    print(length if length is not None else "")
    return 0 if length is not None else 1


def _cmd_encode(args: argparse.Namespace) -> int:
    print(uri_encode(args.uri))
    return 0


def _cmd_decode(args: argparse.Namespace) -> int:
    print(uri_decode(args.uri))
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    print(resolve_absolute_url(args.src, args.base) or "")
    return 0


def _cmd_normalize(args: argparse.Namespace) -> int:
    print(normalize_url_for_output(args.url))
    return 0


def _add_fetch_arguments(parser: argparse.ArgumentParser) -> None:
    """Attach limit/header flags shared by network commands."""
    parser.add_argument("url", help="URL to fetch")
    parser.add_argument(
        "--max-download-kb",
        type=int,
        default=FetchDefaults.MAX_DOWNLOAD_KB,
        help="Maximum body size in kilobytes",
    )
    parser.add_argument(
        "--max-redirects",
        type=int,
        default=FetchDefaults.MAX_REDIRECTS,
        help="Maximum 301/302 hops to follow",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=FetchDefaults.TIMEOUT_SECONDS,
        help="Read timeout and per-hop time budget (seconds)",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=FetchDefaults.CONNECT_TIMEOUT_SECONDS,
        help="Connection timeout (seconds)",
    )
    parser.add_argument(
        "--chain-timeout",
        type=float,
        default=FetchDefaults.CHAIN_TIMEOUT_SECONDS,
        help="Optional time budget for the whole redirect chain (seconds)",
    )
    parser.add_argument(
        "--user-agent",
        default=FetchDefaults.USER_AGENT,
        help="User-Agent sent when no User-Agent header is given",
    )
    parser.add_argument(
        "--header",
        action="append",
        help="Extra request header as 'Name: value' (repeatable)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification",
    )
    parser.add_argument("--run-id", help="Optional explicit run ID for logging")


def build_parser() -> argparse.ArgumentParser:
    """Create argument parser for the link-preview CLI."""
    parser = argparse.ArgumentParser(
        prog="link-preview",
        description="Bounded fetching and URL normalization for link previews",
    )
    parser.add_argument("--version", action="version", version="link-preview-fetch 0.1.0")

    subparsers = parser.add_subparsers(dest="command")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch a URL under size/time/redirect limits")
    _add_fetch_arguments(fetch_parser)
    fetch_parser.add_argument("--output", help="Write the body to this path")
    fetch_parser.set_defaults(func=_cmd_fetch)

    preview_parser = subparsers.add_parser(
        "preview",
        help="Fetch a page, follow its canonical link, and print preview metadata",
    )
    _add_fetch_arguments(preview_parser)
    preview_parser.set_defaults(func=_cmd_preview)

    length_parser = subparsers.add_parser(
        "content-length",
        help="Print Content-Length from a HEAD request",
    )
    _add_fetch_arguments(length_parser)
    length_parser.set_defaults(func=_cmd_content_length)

    encode_parser = subparsers.add_parser("encode", help="Percent-encode a URI per component")
    encode_parser.add_argument("uri")
    encode_parser.set_defaults(func=_cmd_encode)

    decode_parser = subparsers.add_parser("decode", help="Percent-decode a URI")
    decode_parser.add_argument("uri")
    decode_parser.set_defaults(func=_cmd_decode)

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a relative URL against a page URL")
    resolve_parser.add_argument("src")
    resolve_parser.add_argument("base")
    resolve_parser.set_defaults(func=_cmd_resolve)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Make a URL safe for HTML attribute output",
    )
    normalize_parser.add_argument("url")
    normalize_parser.set_defaults(func=_cmd_normalize)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        return int(args.func(args))
    except Exception as exc:
        _emit_cli_event(
            "cli_error",
            run_id=getattr(args, "run_id", None) or str(uuid4()),
            command=str(getattr(args, "command", "unknown")),
            level="error",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1


def cli() -> None:
    """Console-script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":
    raise SystemExit(main())
