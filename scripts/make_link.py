from __future__ import annotations

"""CLI entry point for turning a JSON file of products into a shareable link."""

import argparse
import json
import sys
from pathlib import Path

import httpx

from productlink.services.codec import TOKEN_BUDGET, URL_LENGTH_CEILING, PayloadCodec
from productlink.services.transport import fragment_url, query_url, token_fits


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a productlink URL for a payload file.")
    parser.add_argument(
        "source",
        type=Path,
        help="Path to a JSON file containing an array of product records.",
    )
    parser.add_argument(
        "--prefer",
        choices=("query", "fragment", "stored"),
        default="query",
        help="Placement to use when the token fits the budget.",
    )
    parser.add_argument(
        "--server",
        default=None,
        help="Base URL of a running productlink service, used for stored links.",
    )
    parser.add_argument(
        "--budget",
        type=int,
        default=TOKEN_BUDGET,
        help=f"Maximum token length before falling back to storage (default {TOKEN_BUDGET}).",
    )
    parser.add_argument(
        "--url-ceiling",
        type=int,
        default=URL_LENGTH_CEILING,
        help=f"Maximum length of the full query URL (default {URL_LENGTH_CEILING}).",
    )
    return parser.parse_args()


def _post_payload(server: str, payload: list) -> str:
    response = httpx.post(f"{server.rstrip('/')}/api/new", json=payload, timeout=30.0)
    response.raise_for_status()
    body = response.json()
    return f"{server.rstrip('/')}{body['url']}"


def main() -> int:
    args = parse_args()
    payload = json.loads(args.source.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        print("Payload file must contain a JSON array.", file=sys.stderr)  # noqa: T201
        return 1

    codec = PayloadCodec()
    token = codec.encode(payload)
    base = (args.server or "").rstrip("/")
    fits = token_fits(token, base_url=base, budget=args.budget, url_ceiling=args.url_ceiling)
    print(f"Token length: {len(token)} ({'fits' if fits else 'exceeds'} budget of {args.budget})")  # noqa: T201

    if fits and args.prefer != "stored":
        build = fragment_url if args.prefer == "fragment" else query_url
        url = build(token, base)
        print(url)  # noqa: T201
        return 0

    if not args.server:
        print("Payload needs a stored link; pass --server to upload it.", file=sys.stderr)  # noqa: T201
        return 2

    try:
        print(_post_payload(args.server, payload))  # noqa: T201
    except httpx.HTTPError as exc:
        print(f"Upload failed: {exc}", file=sys.stderr)  # noqa: T201
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
