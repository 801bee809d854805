from __future__ import annotations

import argparse
import json
import sys
from datetime import date

from wallet_agent.config import EngineConfig
from wallet_agent.errors import InvalidInputError, WalletAgentError
from wallet_agent.log import setup_logging
from wallet_agent.models import CartContext, OfferCatalog, offer_to_dict, result_to_dict
from wallet_agent.profile import load_profile_file
from wallet_agent.providers import JsonOfferProvider, merge_catalogs
from wallet_agent.recommender import Recommender
from wallet_agent.registry import attach_offers
from wallet_agent.web import run_web_server


def catalog_from_args(args: argparse.Namespace) -> OfferCatalog:
    catalogs = [JsonOfferProvider(source="bank", file_path=path).fetch_catalog() for path in args.bank_offers or []]
    return merge_catalogs(*catalogs)


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError(f"--date must be YYYY-MM-DD, got {value!r}", field="date") from exc


def cmd_catalog(args: argparse.Namespace) -> None:
    catalog = catalog_from_args(args)
    payload = {
        "offers": [offer_to_dict(offer) for offer in catalog.offers],
        "warnings": [
            {"bank": warning.bank, "index": warning.index, "message": warning.message} for warning in catalog.warnings
        ],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_recommend(args: argparse.Namespace) -> None:
    catalog = catalog_from_args(args)
    methods = attach_offers(load_profile_file(args.profile), catalog.offers)
    cart = CartContext(cart_total=args.amount, category=args.category, on_date=parse_date(args.date))
    result = Recommender(config=EngineConfig.from_env()).recommend(methods, cart)
    print(json.dumps({"recommended": result_to_dict(result)}, indent=2, ensure_ascii=False))


def cmd_serve(args: argparse.Namespace) -> None:
    run_web_server(catalog_from_args(args), host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pick the saved payment method that saves the most on a purchase")
    parser.add_argument("--bank-offers", action="append", help="per-bank offer JSON file (repeatable)")
    parser.add_argument("--log-level", default=None)

    sub = parser.add_subparsers(required=True)

    catalog = sub.add_parser("catalog")
    catalog.set_defaults(func=cmd_catalog)

    rec = sub.add_parser("recommend")
    rec.add_argument("--profile", required=True)
    rec.add_argument("--amount", type=float, required=True)
    rec.add_argument("--category", default=None)
    rec.add_argument("--date", default=None)
    rec.set_defaults(func=cmd_recommend)

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    try:
        args.func(args)
    except WalletAgentError as exc:
        print(json.dumps({"error": exc.message, "error_code": exc.error_code}), file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
