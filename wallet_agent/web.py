from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from wallet_agent.config import EngineConfig
from wallet_agent.errors import InvalidInputError, WalletAgentError
from wallet_agent.log import get_logger
from wallet_agent.models import CartContext, OfferCatalog, offer_to_dict, result_to_dict
from wallet_agent.profile import load_profile
from wallet_agent.recommender import Recommender
from wallet_agent.registry import attach_offers

logger = get_logger("web")


@dataclass(slots=True)
class AppServices:
    catalog: OfferCatalog
    recommender: Recommender


def _cart_from_payload(payload: dict) -> CartContext:
    try:
        total = float(payload["cartTotal"])
    except KeyError as exc:
        raise InvalidInputError("cartTotal is required", field="cart_total") from exc
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("cartTotal must be a number", field="cart_total") from exc

    category = payload.get("category") or None
    on_date = None
    if payload.get("date"):
        try:
            on_date = date.fromisoformat(str(payload["date"]))
        except ValueError as exc:
            raise InvalidInputError("date must be YYYY-MM-DD", field="date") from exc
    return CartContext(cart_total=total, category=category, on_date=on_date)


def build_recommendation_response(services: AppServices, payload: dict) -> dict:
    methods = attach_offers(load_profile(payload.get("profile", [])), services.catalog.offers)
    result = services.recommender.recommend(methods, _cart_from_payload(payload))
    return {"recommended": result_to_dict(result)}


def create_handler(catalog: OfferCatalog, config: EngineConfig | None = None):
    services = AppServices(catalog=catalog, recommender=Recommender(config=config))

    class Handler(BaseHTTPRequestHandler):
        def _send_json(self, payload: dict, status: int = 200) -> None:
            raw = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(raw)))
            self.end_headers()
            self.wfile.write(raw)

        def _read_json_body(self) -> dict:
            try:
                size = int(self.headers.get("Content-Length", "0"))
            except ValueError as exc:
                raise InvalidInputError("Content-Length must be an integer", field="body") from exc
            if size < 0:
                raise InvalidInputError("Content-Length cannot be negative", field="body")
            if not size:
                return {}
            try:
                payload = json.loads(self.rfile.read(size).decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise InvalidInputError("Request body must be JSON", field="body") from exc
            if not isinstance(payload, dict):
                raise InvalidInputError("Request body must be a JSON object", field="body")
            return payload

        def do_GET(self):
            path = urlparse(self.path).path
            if path == "/api/offers":
                self._send_json({"offers": [offer_to_dict(offer) for offer in services.catalog.offers]})
                return
            self.send_error(HTTPStatus.NOT_FOUND)

        def do_POST(self):
            path = urlparse(self.path).path
            if path != "/api/recommend":
                self.send_error(HTTPStatus.NOT_FOUND)
                return
            try:
                response = build_recommendation_response(services, self._read_json_body())
            except WalletAgentError as exc:
                logger.info("Rejected recommendation request: %s", exc.message)
                self._send_json({"error": exc.message, "error_code": exc.error_code}, status=400)
                return
            self._send_json(response)

        def log_message(self, format, *args):
            return

    return Handler


def run_web_server(catalog: OfferCatalog, host: str = "0.0.0.0", port: int = 8000) -> None:
    server = ThreadingHTTPServer((host, port), create_handler(catalog, EngineConfig.from_env()))
    logger.info("Recommendation API listening on http://%s:%s", host, port)
    server.serve_forever()
