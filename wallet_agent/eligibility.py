"""Offer applicability rules.

An offer applies to a (payment method, cart) pair only when it passes, in
order: the category check (skipped during a fallback scan), minimum spend,
card-specific restriction, validity period and the EMI exclusivity check.
"""

from __future__ import annotations

import re
from datetime import date

from wallet_agent.models import CartContext, Offer, PaymentMethod, mentions_emi
from wallet_agent.registry import card_name_matches

ALL_CATEGORIES = "all categories"

MONTHS = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"), start=1
    )
}

DATE_RE = re.compile(
    r"(?P<iso>(?P<iy>\d{4})-(?P<im>\d{1,2})-(?P<id>\d{1,2}))"
    r"|(?P<dmy>(?P<dd>\d{1,2})(?:st|nd|rd|th)?\s+(?P<dm>[A-Za-z]{3,9})\.?,?\s+(?P<dy>\d{4}))"
    r"|(?P<mdy>(?P<mm>[A-Za-z]{3,9})\.?\s+(?P<md>\d{1,2})(?:st|nd|rd|th)?,?\s+(?P<my>\d{4}))"
)
START_ONLY_RE = re.compile(r"\b(from|starting|starts|begins)\b", re.IGNORECASE)


def _month(name: str) -> int | None:
    return MONTHS.get(name[:3].lower())


def _to_date(year: str, month: int | None, day: str) -> date | None:
    if month is None:
        return None
    try:
        return date(int(year), month, int(day))
    except ValueError:
        return None


def parse_period_dates(period: str) -> list[date]:
    found: list[date] = []
    for match in DATE_RE.finditer(period):
        if match.group("iso"):
            parsed = _to_date(match.group("iy"), int(match.group("im")), match.group("id"))
        elif match.group("dmy"):
            parsed = _to_date(match.group("dy"), _month(match.group("dm")), match.group("dd"))
        else:
            parsed = _to_date(match.group("my"), _month(match.group("mm")), match.group("md"))
        if parsed is not None:
            found.append(parsed)
    return found


def period_is_valid(period: str | None, on_date: date | None) -> bool:
    """False only when the period names dates that clearly exclude ``on_date``.

    Free-text periods such as "Ongoing" or "Festive season" are treated as
    valid, and so is any period when no date is supplied.
    """
    if not period or on_date is None:
        return True
    dates = parse_period_dates(period)
    if not dates:
        return True
    if len(dates) >= 2:
        return dates[0] <= on_date <= dates[-1]
    if START_ONLY_RE.search(period):
        return on_date >= dates[0]
    return on_date <= dates[0]


def category_matches(offer: Offer, category: str | None) -> bool:
    affinity = [item.strip().lower() for item in offer.category_affinity if item.strip()]
    if not affinity:
        return True
    if ALL_CATEGORIES in affinity:
        return True
    if not category:
        return False
    return category.strip().lower() in affinity


def is_emi_only(offer: Offer) -> bool:
    """EMI offers without a credit or debit cap have no usable non-EMI saving."""
    if not mentions_emi(offer.applicable_on):
        return False
    return offer.max_discount_credit is None and offer.max_discount_debit is None


def is_eligible(offer: Offer, method: PaymentMethod, cart: CartContext, fallback_mode: bool = False) -> bool:
    if not fallback_mode and not category_matches(offer, cart.category):
        return False
    if offer.min_spend is not None and cart.cart_total < offer.min_spend:
        return False
    if offer.specific_card_type and not card_name_matches(offer.specific_card_type, method.name):
        return False
    if not period_is_valid(offer.period, cart.on_date):
        return False
    if is_emi_only(offer):
        return False
    return True
