from __future__ import annotations

from dataclasses import dataclass
from datetime import date

OFFER_TYPES = ("cashback", "miles", "flat_discount", "voucher", "bonus_reward", "other")
VALUE_TYPES = ("percentage", "amount", "multiplier", "points")
METHOD_TYPES = ("credit_card", "debit_card", "upi", "wallet", "gift_card")

# value_type assumed when a record leaves it out
DEFAULT_VALUE_TYPES = {"cashback": "percentage", "flat_discount": "amount"}


@dataclass(slots=True, frozen=True)
class Offer:
    offer_id: str
    description: str
    type: str = "other"
    value: float = 0.0
    value_type: str | None = None
    min_spend: float | None = None
    max_discount: float | None = None
    max_discount_credit: float | None = None
    max_discount_debit: float | None = None
    max_discount_emi: float | None = None
    period: str | None = None
    category_affinity: tuple[str, ...] = ()
    applicable_on: tuple[str, ...] = ()
    specific_card_type: str | None = None
    bank: str | None = None
    card_types: tuple[str, ...] = ()
    source: str = ""
    raw_details: str | None = None

    @property
    def effective_value_type(self) -> str | None:
        return self.value_type or DEFAULT_VALUE_TYPES.get(self.type)


@dataclass(slots=True, frozen=True)
class PaymentMethod:
    method_id: str
    name: str
    type: str
    bank_name: str | None = None
    usage_percentage: float | None = None
    wallet_balance: float | None = None
    offers: tuple[Offer, ...] = ()


@dataclass(slots=True, frozen=True)
class CartContext:
    cart_total: float
    category: str | None = None
    on_date: date | None = None


@dataclass(slots=True, frozen=True)
class RecommendationResult:
    payment_method_id: str
    name: str
    offer_type: str
    offer_display: str
    reason: str
    savings: float = 0.0
    offer_id: str | None = None
    basis: str = "savings"
    warnings: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class MethodScore:
    method: PaymentMethod
    position: int
    savings: float = 0.0
    offer: Offer | None = None
    benefit: Offer | None = None


@dataclass(slots=True, frozen=True)
class Ranking:
    winner: MethodScore
    basis: str
    scores: tuple[MethodScore, ...]
    excluded_best: float = 0.0


@dataclass(slots=True, frozen=True)
class CatalogParseWarning:
    bank: str | None
    index: int | None
    message: str


@dataclass(slots=True, frozen=True)
class OfferCatalog:
    offers: tuple[Offer, ...] = ()
    warnings: tuple[CatalogParseWarning, ...] = ()


def mentions_emi(labels: tuple[str, ...] | list[str]) -> bool:
    return any("emi" in label.lower().replace("-", " ").split() for label in labels)


def _optional_float(payload: dict, key: str) -> float | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return float(value)


def _string_tuple(value: object) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(item).strip() for item in value)


def offer_from_dict(payload: dict) -> Offer:
    """Build an Offer from its camelCase JSON form (profile or API payloads)."""
    conditions = payload.get("conditions") or {}
    merged = {**conditions, **payload}
    offer_type = str(merged.get("type") or "other")
    if offer_type not in OFFER_TYPES:
        raise ValueError(f"unknown offer type {offer_type!r}")
    value_type = merged.get("valueType")
    if value_type is not None and value_type not in VALUE_TYPES:
        raise ValueError(f"unknown value type {value_type!r}")
    return Offer(
        offer_id=str(merged["id"]),
        description=str(merged.get("description", "")),
        type=offer_type,
        value=float(merged.get("value") or 0.0),
        value_type=value_type,
        min_spend=_optional_float(merged, "minSpend"),
        max_discount=_optional_float(merged, "maxDiscount"),
        max_discount_credit=_optional_float(merged, "maxDiscountCredit"),
        max_discount_debit=_optional_float(merged, "maxDiscountDebit"),
        max_discount_emi=_optional_float(merged, "maxDiscountEMI"),
        period=merged.get("period"),
        category_affinity=_string_tuple(merged.get("categoryAffinity")),
        applicable_on=_string_tuple(merged.get("applicableOn")),
        specific_card_type=merged.get("specificCardType"),
        bank=merged.get("bank"),
        card_types=_string_tuple(merged.get("cardTypes")),
        source=str(merged.get("source", "")),
        raw_details=merged.get("rawDetails"),
    )


def offer_to_dict(offer: Offer) -> dict:
    return {
        "id": offer.offer_id,
        "description": offer.description,
        "type": offer.type,
        "value": offer.value,
        "valueType": offer.value_type,
        "minSpend": offer.min_spend,
        "maxDiscount": offer.max_discount,
        "maxDiscountCredit": offer.max_discount_credit,
        "maxDiscountDebit": offer.max_discount_debit,
        "maxDiscountEMI": offer.max_discount_emi,
        "period": offer.period,
        "categoryAffinity": list(offer.category_affinity),
        "applicableOn": list(offer.applicable_on),
        "specificCardType": offer.specific_card_type,
        "bank": offer.bank,
        "cardTypes": list(offer.card_types),
        "source": offer.source,
    }


def result_to_dict(result: RecommendationResult) -> dict:
    return {
        "paymentMethodId": result.payment_method_id,
        "name": result.name,
        "offerType": result.offer_type,
        "offerDisplay": result.offer_display,
        "reason": result.reason,
        "savings": result.savings,
        "offerId": result.offer_id,
        "basis": result.basis,
        "warnings": list(result.warnings),
    }
