"""Normalization of raw bank offer records into canonical ``Offer`` objects.

Raw catalogs are lists of per-bank entries::

    {"bank": "HDFC Bank", "cardTypes": ["Credit Card"], "offers": [{...}, ...]}

Individual offers come in several shapes (explicit percentages, free-text
cashback descriptions, flat discounts, vouchers, reward points). Each shape is
handled by an ``OfferAdapter``; the first adapter in the chain that matches a
record normalizes it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, Protocol

from wallet_agent.errors import CatalogFormatError
from wallet_agent.log import get_logger
from wallet_agent.models import CatalogParseWarning, Offer, OfferCatalog, mentions_emi

logger = get_logger("catalog")

CASHBACK_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%\s*cashback", re.IGNORECASE)
UP_TO_AMOUNT_RE = re.compile(r"up to\s*(?:₹|rs\.?|inr)\s?([\d,]+(?:\.\d+)?)", re.IGNORECASE)
AMOUNT_RE = re.compile(r"(?:₹|rs\.?|inr)\s?([\d,]+(?:\.\d+)?)", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")

NUMERIC_FIELDS = ("minSpend", "maxDiscount", "maxDiscountCredit", "maxDiscountDebit", "maxDiscountEMI")


@dataclass(slots=True)
class OfferDraft:
    type: str = "other"
    value: float = 0.0
    value_type: str | None = None
    description: str = ""
    category_affinity: tuple[str, ...] | None = None
    max_discount: float | None = None


class OfferAdapter(Protocol):
    def matches(self, bank: str, raw: dict) -> bool:
        """Return True when this adapter understands the record's shape."""

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        ...


def _text(raw: dict, key: str) -> str:
    value = raw.get(key)
    return value if isinstance(value, str) else ""


def _parse_amount(text: str) -> float | None:
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return None


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return f"{value:.0f}"
    return f"{value:g}"


class HdfcMillenniaAdapter:
    """HDFC Millennia lists separate Amazon and gift-card cashback rates."""

    card_name = "HDFC Millennia"

    def matches(self, bank: str, raw: dict) -> bool:
        return raw.get("card") == self.card_name

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        value = _as_float(raw.get("cashbackPercentAmazon"))
        draft = OfferDraft(
            type="cashback",
            value=value,
            value_type="percentage",
            description=f"{_fmt(value)}% cashback on Amazon",
            category_affinity=("Shopping", "Amazon Prime", "Electronics", "Mobiles"),
        )
        gift_card_value = _as_float(raw.get("cashbackPercentGiftCard"))
        if value == 0 and gift_card_value:
            draft.value = gift_card_value
            draft.description = f"{_fmt(gift_card_value)}% cashback on Gift Cards"
            draft.category_affinity = ("Shopping",)
        return draft


class PercentDiscountAdapter:
    def matches(self, bank: str, raw: dict) -> bool:
        return bool(raw.get("discountPercent"))

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        value = _as_float(raw.get("discountPercent"))
        return OfferDraft(type="cashback", value=value, value_type="percentage", description=f"{_fmt(value)}% off")


class VoucherAdapter:
    def matches(self, bank: str, raw: dict) -> bool:
        return "voucher" in _text(raw, "offerType").lower()

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        return OfferDraft(type="voucher", value=0.0, description=_text(raw, "offerType"))


class CashbackTextAdapter:
    """Cashback described only in prose, e.g. "5% cashback up to ₹500"."""

    def matches(self, bank: str, raw: dict) -> bool:
        return "cashback" in _text(raw, "benefits").lower() or "cashback" in _text(raw, "extra").lower()

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        text = _text(raw, "benefits") or _text(raw, "extra")
        match = CASHBACK_PERCENT_RE.search(text)
        draft = OfferDraft(
            type="cashback",
            value=float(match.group(1)) if match else 0.0,
            value_type="percentage",
            description=text or "Cashback offer",
        )
        cap_match = UP_TO_AMOUNT_RE.search(_text(raw, "extra"))
        if cap_match:
            draft.max_discount = _parse_amount(cap_match.group(1))
        return draft


class FlatTextAdapter:
    def matches(self, bank: str, raw: dict) -> bool:
        extra = _text(raw, "extra").lower()
        return "flat" in extra or "off" in extra

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        extra = _text(raw, "extra")
        match = AMOUNT_RE.search(extra)
        value = _parse_amount(match.group(1)) if match else None
        return OfferDraft(type="flat_discount", value=value or 0.0, value_type="amount", description=extra)


class RewardPointsAdapter:
    def matches(self, bank: str, raw: dict) -> bool:
        return "rewards" in _text(raw, "offerType").lower() or "points" in _text(raw, "details").lower()

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        return OfferDraft(
            type="bonus_reward",
            value=0.0,
            value_type="points",
            description=_text(raw, "offerType") or "Bonus Rewards",
        )


class GenericAdapter:
    def matches(self, bank: str, raw: dict) -> bool:
        return True

    def normalize(self, bank: str, raw: dict) -> OfferDraft:
        return OfferDraft(description=_text(raw, "offerType") or _text(raw, "details") or "Special Offer")


DEFAULT_ADAPTERS: tuple[OfferAdapter, ...] = (
    HdfcMillenniaAdapter(),
    PercentDiscountAdapter(),
    VoucherAdapter(),
    CashbackTextAdapter(),
    FlatTextAdapter(),
    RewardPointsAdapter(),
    GenericAdapter(),
)


def offer_id_for(bank: str, counter: int) -> str:
    slug = WHITESPACE_RE.sub("_", bank.lower())
    return f"bank_offer_{slug}_{counter}"


def synthesize_description(base: str, offer: Offer, card_types: Iterable[str]) -> str:
    """Concise display text: base terms, min spend and the most relevant cap, never the period."""
    description = base
    if offer.min_spend:
        description += f", min spend ₹{_fmt(offer.min_spend)}"
    card_types_lower = {card_type.lower() for card_type in card_types}
    if "credit card" in card_types_lower and offer.max_discount_credit:
        description += f", max discount ₹{_fmt(offer.max_discount_credit)} (Credit)"
    elif "debit card" in card_types_lower and offer.max_discount_debit:
        description += f", max discount ₹{_fmt(offer.max_discount_debit)} (Debit)"
    elif offer.max_discount and not (offer.max_discount_emi and mentions_emi(offer.applicable_on)):
        description += f", max discount ₹{_fmt(offer.max_discount)}"
    return description.strip()


def _string_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


class CatalogLoader:
    """Turns raw bank entries into an ``OfferCatalog``, collecting parse warnings."""

    def __init__(self, adapters: Iterable[OfferAdapter] | None = None, source: str = "bank") -> None:
        self.adapters = tuple(adapters) if adapters is not None else DEFAULT_ADAPTERS
        self.source = source

    def load(self, raw_records: object) -> OfferCatalog:
        if not isinstance(raw_records, list):
            raise CatalogFormatError(f"Offer catalog must be a list of bank entries, got {type(raw_records).__name__}")

        offers: list[Offer] = []
        warnings: list[CatalogParseWarning] = []
        counter = 0

        for entry_index, entry in enumerate(raw_records):
            if not isinstance(entry, dict):
                self._warn(warnings, None, entry_index, "bank entry is not an object; skipped")
                continue
            bank = entry.get("bank")
            if not isinstance(bank, str) or not bank.strip():
                self._warn(warnings, None, entry_index, "bank entry has no bank name; skipped")
                continue
            raw_offers = entry.get("offers", [])
            if not isinstance(raw_offers, list):
                self._warn(warnings, bank, entry_index, "offers is not a list; bank skipped")
                continue
            card_types = _string_list(entry.get("cardTypes"))

            for offer_index, raw in enumerate(raw_offers):
                if not isinstance(raw, dict):
                    self._warn(warnings, bank, offer_index, "offer is not an object; skipped")
                    continue
                counter += 1
                offers.append(self._normalize(bank, card_types, raw, counter, offer_index, warnings))

        logger.info("Loaded %d offers from %d bank entries (%d warnings)", len(offers), len(raw_records), len(warnings))
        return OfferCatalog(offers=tuple(offers), warnings=tuple(warnings))

    def _normalize(
        self,
        bank: str,
        card_types: tuple[str, ...],
        raw: dict,
        counter: int,
        offer_index: int,
        warnings: list[CatalogParseWarning],
    ) -> Offer:
        numbers: dict[str, float | None] = {}
        for key in NUMERIC_FIELDS:
            value = raw.get(key)
            if value is None or value == "":
                numbers[key] = None
                continue
            try:
                numbers[key] = float(value)
            except (TypeError, ValueError):
                self._warn(warnings, bank, offer_index, f"{key}={value!r} is not a number; ignored")
                numbers[key] = None

        adapter = next(adapter for adapter in self.adapters if adapter.matches(bank, raw))
        draft = adapter.normalize(bank, raw)

        max_discount = numbers["maxDiscount"]
        if max_discount is None and draft.max_discount is not None:
            max_discount = draft.max_discount

        category_affinity = draft.category_affinity
        if category_affinity is None:
            category_affinity = _string_list(raw.get("categories"))

        period = raw.get("period")
        offer = Offer(
            offer_id=offer_id_for(bank, counter),
            description="",
            type=draft.type,
            value=draft.value,
            value_type=draft.value_type,
            min_spend=numbers["minSpend"],
            max_discount=max_discount,
            max_discount_credit=numbers["maxDiscountCredit"],
            max_discount_debit=numbers["maxDiscountDebit"],
            max_discount_emi=numbers["maxDiscountEMI"],
            period=str(period) if period is not None else None,
            category_affinity=category_affinity,
            applicable_on=_string_list(raw.get("applicableOn")),
            specific_card_type=raw.get("card") if isinstance(raw.get("card"), str) else None,
            bank=bank,
            card_types=card_types,
            source=self.source,
            raw_details=_text(raw, "details") or _text(raw, "benefits") or _text(raw, "extra") or None,
        )
        return replace(offer, description=synthesize_description(draft.description, offer, card_types))

    def _warn(self, warnings: list[CatalogParseWarning], bank: str | None, index: int | None, message: str) -> None:
        warning = CatalogParseWarning(bank=bank, index=index, message=message)
        logger.warning("Catalog record bank=%s index=%s: %s", bank, index, message)
        warnings.append(warning)


def load_catalog(raw_records: object, source: str = "bank") -> OfferCatalog:
    return CatalogLoader(source=source).load(raw_records)


def load_offers(raw_records: object) -> list[Offer]:
    return list(load_catalog(raw_records).offers)
