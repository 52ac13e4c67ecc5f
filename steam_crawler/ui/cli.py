from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import CrawlConfig, FETCH_ERROR_POLICIES, OUTPUT_FORMATS
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..engines.base import CrawlReport

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="steam-crawler",
        description="Crawl Steam store app pages by following app-to-app links",
    )
    p.add_argument("seeds", nargs="*", type=int, help="Seed app ids (e.g. 400 for Portal)")
    limit = p.add_mutually_exclusive_group()
    limit.add_argument("-n", "--count", type=int, default=None, help="Stop after this many products")
    limit.add_argument("-t", "--time", type=float, default=None, help="Stop dispatching after this many seconds")
    p.add_argument("-f", "--format", choices=OUTPUT_FORMATS, default=None, help="Output format (default: json)")
    p.add_argument("-o", "--output", type=str, default=None, help="Output file path, '-' for stdout (default)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--max-concurrency", type=int, default=None, help="Max concurrent fetches (default from config)")
    p.add_argument("--request-timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument("--retries", type=int, default=None, help="Retries per page after the first attempt")
    p.add_argument("--on-fetch-error", choices=FETCH_ERROR_POLICIES, default=None,
                   help="skip: drop the failing app and continue; abort: stop and emit partial results")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of CLI crawl")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig()

    if args.seeds:
        cfg.seeds = list(args.seeds)
    # The flags are mutually exclusive, so either one replaces the file's policy entirely.
    if args.count is not None:
        cfg.target_count, cfg.time_budget = args.count, None
    if args.time is not None:
        cfg.target_count, cfg.time_budget = None, args.time
    if args.format:
        cfg.output_format = args.format
    if args.output:
        cfg.output_path = args.output
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.request_timeout is not None:
        cfg.request_timeout = args.request_timeout
    if args.retries is not None:
        cfg.retries = args.retries
    if args.on_fetch_error:
        cfg.on_fetch_error = args.on_fetch_error

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install 'steam-crawler[api]'") from exc
    uvicorn.run("steam_crawler.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    try:
        cfg = _load_config(args)
    except (OSError, ValueError, TypeError) as exc:
        parser.error(str(exc))

    # Dynamic engine + exporter loading so upgrades don't require code edits.
    engine_cls = load_symbol(cfg.engine)
    exporter_cls = load_symbol(cfg.exporter)

    async def _run() -> CrawlReport:
        engine = engine_cls(cfg)
        return await engine.crawl()

    report: CrawlReport = asyncio.run(_run())

    # Partial results are still written when the crawl was aborted.
    exporter = exporter_cls()
    exporter.export(report.products, cfg.output_path)

    logger.info("Visited: %s | Products: %s | Skipped: %s | Failed: %s | Output: %s",
                report.visited_count,
                len(report.products),
                len(report.skipped),
                len(report.failed),
                cfg.output_path)
    if not report.complete:
        logger.warning("Crawl aborted (%s); output may be incomplete", report.error)
        return 1
    return 0
