from __future__ import annotations

from typing import Protocol

from wallet_agent.models import CartContext, Offer, PaymentMethod, mentions_emi


class DiscountEvaluator(Protocol):
    def compute(self, offer: Offer, method: PaymentMethod, cart: CartContext) -> float:
        """Return the monetary saving of an already-eligible offer."""


def applicable_cap(offer: Offer, method: PaymentMethod) -> float | None:
    """Non-EMI cap for this method type; ``max_discount_emi`` never qualifies."""
    if method.type == "credit_card" and offer.max_discount_credit is not None:
        return offer.max_discount_credit
    if method.type == "debit_card" and offer.max_discount_debit is not None:
        return offer.max_discount_debit
    if offer.max_discount is None:
        return None
    if mentions_emi(offer.applicable_on) and offer.max_discount == offer.max_discount_emi:
        return None
    return offer.max_discount


class PercentCashbackEvaluator:
    def compute(self, offer: Offer, method: PaymentMethod, cart: CartContext) -> float:
        raw = offer.value / 100 * cart.cart_total
        cap = applicable_cap(offer, method)
        return min(raw, cap) if cap is not None else raw


class FlatDiscountEvaluator:
    def compute(self, offer: Offer, method: PaymentMethod, cart: CartContext) -> float:
        return offer.value


DEFAULT_EVALUATORS: dict[tuple[str, str], DiscountEvaluator] = {
    ("cashback", "percentage"): PercentCashbackEvaluator(),
    ("flat_discount", "amount"): FlatDiscountEvaluator(),
}


def compute_value(
    offer: Offer,
    method: PaymentMethod,
    cart: CartContext,
    evaluators: dict[tuple[str, str], DiscountEvaluator] | None = None,
) -> float:
    """Capped saving for an offer that already passed min-spend, card, period and EMI checks.

    Miles, vouchers, bonus rewards and other non-monetary types are worth 0 here.
    """
    evaluator = (evaluators or DEFAULT_EVALUATORS).get((offer.type, offer.effective_value_type or ""))
    if evaluator is None:
        return 0.0
    return max(evaluator.compute(offer, method, cart), 0.0)
