from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .api import create_app, handle_request
from .config import AppConfig, ConfigError, config_path, load_config
from .pipeline import RunSummary, run
from .snapshot import write_snapshot


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="research-feed", description="Research opportunity feed builder"
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--stats", action="store_true", help="Print crawl diagnostics to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Crawl and write the JSON snapshot")
    build_parser.add_argument("--out", help="Snapshot path (default from config)")

    lookup_parser = subparsers.add_parser("lookup", help="Rebuild one opportunity by id")
    lookup_parser.add_argument("id", help="Opportunity id")

    serve_parser = subparsers.add_parser("serve", help="Serve the live JSON endpoint")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = load_config(config_path(args.config))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if args.command == "build":
        return _build(config, args.out, args.stats)
    if args.command == "lookup":
        return _lookup(config, args.id)
    return _serve(config, args.host, args.port)


def _build(config: AppConfig, out: str | None, stats: bool) -> int:
    summary = run(config)
    out_path = Path(out or config.output.snapshot_path).expanduser()
    write_snapshot(out_path, summary.result_set)

    if stats or config.show_warnings:
        _print_stats(summary)
    print(f"Wrote {summary.accepted} opportunities to {out_path}")
    return 0


def _lookup(config: AppConfig, opportunity_id: str) -> int:
    response = handle_request({"id": opportunity_id}, config)
    print(json.dumps(response.body, indent=2, ensure_ascii=False))
    return 0 if response.status == 200 else 1


def _serve(config: AppConfig, host: str | None, port: int | None) -> int:
    from wsgiref.simple_server import make_server

    bind_host = host or config.serve.host
    bind_port = port if port is not None else config.serve.port
    with make_server(bind_host, bind_port, create_app(config)) as server:
        print(f"Serving {config.serve.api_path} on http://{bind_host}:{bind_port}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


def _print_stats(summary: RunSummary) -> None:
    if not summary.index_fetched:
        print("Warning: index page returned no content", file=sys.stderr)
    rejected = ", ".join(f"{reason}={count}" for reason, count in sorted(summary.rejections.items()))
    print(
        "Crawl stats: "
        f"candidates={summary.candidates} "
        f"fetched={summary.fetched} "
        f"accepted={summary.accepted} "
        f"fetch_failures={summary.fetch_failures} "
        f"rejected=[{rejected}]",
        file=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
