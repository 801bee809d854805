from __future__ import annotations

import json
import math
from pathlib import Path

from wallet_agent.errors import InvalidInputError
from wallet_agent.models import METHOD_TYPES, PaymentMethod, offer_from_dict


def _number(item: dict, key: str, method_id: str) -> float | None:
    value = item.get(key)
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{key} of payment method {method_id} must be a number", field=key) from exc
    if not math.isfinite(number):
        raise InvalidInputError(f"{key} of payment method {method_id} must be finite", field=key)
    return number


def _usage_percentage(item: dict, method_id: str) -> float | None:
    # profiles store utilization either as a 0-1 fraction ("usage") or as a percentage
    usage = _number(item, "usagePercentage", method_id)
    if usage is None:
        fraction = _number(item, "usage", method_id)
        if fraction is None:
            return None
        if not 0 <= fraction <= 1:
            raise InvalidInputError(f"usage of payment method {method_id} must be between 0 and 1", field="usage")
        usage = fraction * 100
    if not 0 <= usage <= 100:
        raise InvalidInputError(
            f"usagePercentage of payment method {method_id} must be between 0 and 100", field="usagePercentage"
        )
    return usage


def method_from_dict(item: dict) -> PaymentMethod:
    if not isinstance(item, dict):
        raise InvalidInputError("Each payment method must be an object", field="methods")
    method_id = str(item.get("id") or "").strip()
    name = str(item.get("name") or "").strip()
    if not method_id or not name:
        raise InvalidInputError("Payment methods need both an id and a name", field="methods")
    method_type = item.get("type")
    if method_type not in METHOD_TYPES:
        raise InvalidInputError(f"Unsupported payment method type {method_type!r} for {method_id}", field="type")

    raw_offers = item.get("offers") or []
    if not isinstance(raw_offers, list):
        raise InvalidInputError(f"offers of payment method {method_id} must be a list", field="offers")
    if not all(isinstance(offer, dict) for offer in raw_offers):
        raise InvalidInputError(f"offers of payment method {method_id} must be objects", field="offers")
    try:
        offers = tuple(offer_from_dict(offer) for offer in raw_offers)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid offer on payment method {method_id}: {exc}", field="offers") from exc

    usage = _usage_percentage(item, method_id)
    balance = _number(item, "walletBalance", method_id)
    return PaymentMethod(
        method_id=method_id,
        name=name,
        type=method_type,
        bank_name=item.get("bankName") or None,
        usage_percentage=usage if method_type == "credit_card" else None,
        wallet_balance=balance if method_type in ("wallet", "gift_card") else None,
        offers=offers,
    )


def load_profile(payload: object) -> tuple[PaymentMethod, ...]:
    """Snapshot a user's saved payment methods, preserving their stored order."""
    if isinstance(payload, dict):
        payload = payload.get("savedPaymentMethods", [])
    if not isinstance(payload, list):
        raise InvalidInputError("Profile must be a list of payment methods or contain savedPaymentMethods", field="profile")
    return tuple(method_from_dict(item) for item in payload)


def load_profile_file(path: str) -> tuple[PaymentMethod, ...]:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidInputError(f"Cannot read profile {path}: {exc}", field="profile") from exc
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"{path} is not valid JSON: {exc}", field="profile") from exc
    return load_profile(payload)
