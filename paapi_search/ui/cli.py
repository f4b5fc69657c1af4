from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError as OptionsError

from ..config import SearchConfig, MARKETPLACES
from ..errors import ConfigurationError, PaapiSearchError, ValidationError
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..engines.base import SearchReport
from ..engines.sequential_engine import SequentialSearchEngine
from ..request.options import (
    AVAILABILITIES,
    CONDITIONS,
    DEFAULT_RESOURCES,
    DELIVERY_FLAGS,
    MERCHANTS,
    SORT_ORDERS,
    SearchOptions,
)

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Amazon PA-API SearchItems CLI")
    p.add_argument("--items", type=str, default=None,
                   help="JSON file holding a list of search options (one SearchItems call each)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--marketplace", type=str, default=None,
                   help=f"Marketplace host or name ({', '.join(MARKETPLACES)})")
    p.add_argument("--partner-tag", type=str, default=None, help="Partner tag override for every item")
    p.add_argument("--continue-on-fail", action="store_true", default=None,
                   help="Record failed items instead of aborting the batch")
    p.add_argument("--client", type=str, default=None, help="Client dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--output", type=str, default=None, help="Output file path")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of a CLI search")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")

    item = p.add_argument_group("single search (used when --items is not given)")
    item.add_argument("--keywords", type=str, default="")
    item.add_argument("--title", type=str, default="")
    item.add_argument("--actor", type=str, default="")
    item.add_argument("--artist", type=str, default="")
    item.add_argument("--author", type=str, default="")
    item.add_argument("--brand", type=str, default="")
    item.add_argument("--browse-node-id", type=str, default="")
    item.add_argument("--search-index", type=str, default="All", help="Category, e.g. Electronics")
    item.add_argument("--min-price", type=int, default=0, help="Lowest currency denomination, e.g. cents")
    item.add_argument("--max-price", type=int, default=0)
    item.add_argument("--min-reviews-rating", type=int, default=0)
    item.add_argument("--min-saving-percent", type=int, default=0)
    item.add_argument("--condition", choices=CONDITIONS, default="Any")
    item.add_argument("--availability", choices=AVAILABILITIES, default=None)
    item.add_argument("--merchant", choices=MERCHANTS, default="All")
    item.add_argument("--delivery-flag", choices=DELIVERY_FLAGS, action="append", default=[])
    item.add_argument("--item-count", type=int, default=10)
    item.add_argument("--item-page", type=int, default=1)
    item.add_argument("--sort-by", choices=SORT_ORDERS, default="Relevance")
    item.add_argument("--resources", type=str, default=",".join(DEFAULT_RESOURCES),
                      help="Comma-separated response resources")
    item.add_argument("--offer-count", type=int, default=None)
    item.add_argument("--currency", type=str, default="", help="Currency of preference, e.g. EUR")
    item.add_argument("--languages", type=str, default="", help="Comma-separated, e.g. 'en_US, fr_FR'")
    return p


def _load_config(args: argparse.Namespace) -> SearchConfig:
    if args.config:
        cfg = SearchConfig.from_file(args.config)
    else:
        cfg = SearchConfig.from_env()

    if args.marketplace:
        cfg.marketplace = args.marketplace
    if args.continue_on_fail is not None:
        cfg.continue_on_fail = args.continue_on_fail
    if args.client:
        cfg.client = args.client
    if args.exporter:
        cfg.exporter = args.exporter
    if args.output:
        cfg.output_path = args.output

    cfg.validate()
    return cfg


def _options_from_args(args: argparse.Namespace) -> SearchOptions:
    raw: Dict[str, Any] = {
        "search_index": args.search_index,
        "search_criteria": {
            "keywords": args.keywords,
            "title": args.title,
            "actor": args.actor,
            "artist": args.artist,
            "author": args.author,
            "brand": args.brand,
            "browse_node_id": args.browse_node_id,
        },
        "filters": {
            "min_price": args.min_price,
            "max_price": args.max_price,
            "min_reviews_rating": args.min_reviews_rating,
            "min_saving_percent": args.min_saving_percent,
            "condition": args.condition,
            "availability": args.availability,
            "merchant": args.merchant,
            "delivery_flags": args.delivery_flag,
        },
        "item_count": args.item_count,
        "item_page": args.item_page,
        "sort_by": args.sort_by,
        "resources": [r.strip() for r in args.resources.split(",") if r.strip()],
        "additional_options": {
            "offer_count": args.offer_count,
            "currency_of_preference": args.currency,
            "languages_of_preference": args.languages,
        },
    }
    return SearchOptions.model_validate(raw)


def load_items(args: argparse.Namespace) -> List[SearchOptions]:
    if args.items:
        with open(args.items, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ValidationError(f"{args.items}: expected a JSON object or a list of objects")
        items = [SearchOptions.model_validate(d) for d in data]
    else:
        items = [_options_from_args(args)]

    if args.partner_tag:
        items = [o.model_copy(update={"partner_tag": args.partner_tag}) for o in items]
    return items


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install fastapi uvicorn pydantic") from exc
    uvicorn.run("paapi_search.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    try:
        cfg = _load_config(args)
        items = load_items(args)
        client_cls = load_symbol(cfg.client)
        exporter_cls = load_symbol(cfg.exporter)
    except (ConfigurationError, ValidationError, OptionsError, OSError, json.JSONDecodeError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2

    async def _run() -> SearchReport:
        client = client_cls(cfg)
        try:
            return await SequentialSearchEngine(cfg, client).run(items)
        finally:
            await client.close()

    try:
        report: SearchReport = asyncio.run(_run())
    except PaapiSearchError as exc:
        logger.error("%s", exc)
        return 1

    exporter = exporter_cls()
    exporter.export(report, cfg.output_path)

    logger.info("Items: %s | Succeeded: %s | Failed: %s | Output: %s",
                len(report.results), report.succeeded, report.failed, cfg.output_path)
    return 0 if report.failed == 0 else 1
