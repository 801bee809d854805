"""Links a user's saved payment methods to the bank offers that apply to them."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from wallet_agent.log import get_logger
from wallet_agent.models import Offer, PaymentMethod

logger = get_logger("registry")

CARD_TYPE_LABELS = {
    "credit_card": "credit card",
    "debit_card": "debit card",
}


def card_name_matches(specific_card_type: str, method_name: str) -> bool:
    """Exact match, or match after expanding a trailing " CC" to " Credit Card"."""
    if method_name == specific_card_type:
        return True
    return method_name == specific_card_type.replace(" CC", " Credit Card")


def _covers_method_type(card_types: Iterable[str], method_type: str) -> bool:
    label = CARD_TYPE_LABELS.get(method_type)
    if label is None:
        return False
    return any(label in card_type.lower() for card_type in card_types)


def offers_for_method(method: PaymentMethod, catalog_offers: Iterable[Offer]) -> list[Offer]:
    if not method.bank_name:
        return []

    matched: list[Offer] = []
    for offer in catalog_offers:
        if offer.bank != method.bank_name:
            continue
        if offer.specific_card_type:
            if not card_name_matches(offer.specific_card_type, method.name):
                continue
        elif not _covers_method_type(offer.card_types, method.type):
            continue
        matched.append(offer)
    return matched


def attach_offers(methods: Iterable[PaymentMethod], catalog_offers: Iterable[Offer]) -> tuple[PaymentMethod, ...]:
    """Return copies of ``methods`` with matching catalog offers appended after their own offers."""
    catalog = tuple(catalog_offers)
    attached: list[PaymentMethod] = []
    for method in methods:
        bank_offers = offers_for_method(method, catalog)
        logger.debug("Method %s: %d own offers, %d bank offers", method.method_id, len(method.offers), len(bank_offers))
        attached.append(replace(method, offers=method.offers + tuple(bank_offers)))
    return tuple(attached)
