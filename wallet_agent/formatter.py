"""Turns a ranking into the user-facing recommendation.

Constraint notes (high credit utilization, short wallet balance) are added to
the reason only; they never influence which method was selected.
"""

from __future__ import annotations

from wallet_agent.config import DEFAULT_CONFIG, EngineConfig
from wallet_agent.models import CartContext, MethodScore, Offer, PaymentMethod, Ranking, RecommendationResult
from wallet_agent.savings import applicable_cap

STANDARD_PAYMENT = "Standard Payment"


def format_money(amount: float, symbol: str = "₹") -> str:
    if float(amount).is_integer():
        return f"{symbol}{amount:.0f}"
    return f"{symbol}{amount:.2f}"


def offer_display(offer: Offer | None, method: PaymentMethod, config: EngineConfig = DEFAULT_CONFIG) -> str:
    if offer is None:
        return STANDARD_PAYMENT
    symbol = config.currency_symbol
    if offer.type == "cashback" and offer.effective_value_type == "percentage":
        text = f"{offer.value:g}% Cashback"
        cap = applicable_cap(offer, method)
        if cap is not None:
            text += f" up to {format_money(cap, symbol)}"
        return text
    if offer.type == "flat_discount" and offer.effective_value_type == "amount":
        text = f"{format_money(offer.value, symbol)} Off"
        if offer.min_spend:
            text += f" on orders above {format_money(offer.min_spend, symbol)}"
        return text
    if offer.type == "miles" and offer.value_type == "multiplier" and offer.value:
        return f"{offer.value:g}x Miles"
    return offer.description or offer.type.replace("_", " ").title()


def constraint_warnings(method: PaymentMethod, cart: CartContext, config: EngineConfig = DEFAULT_CONFIG) -> list[str]:
    warnings: list[str] = []
    if (
        method.type == "credit_card"
        and method.usage_percentage is not None
        and method.usage_percentage > config.high_utilization_threshold
    ):
        warnings.append(f"Note: credit utilization is high at {method.usage_percentage:g}%.")
    if method.type in ("wallet", "gift_card") and method.wallet_balance is not None:
        if method.wallet_balance < cart.cart_total:
            label = "wallet" if method.type == "wallet" else "gift card"
            warnings.append(
                f"Note: {label} balance of {format_money(method.wallet_balance, config.currency_symbol)} "
                f"is less than cart total of {format_money(cart.cart_total, config.currency_symbol)}."
            )
    return warnings


def _category_context(cart: CartContext) -> str:
    return f"'{cart.category}' purchases" if cart.category else "this purchase"


def _default_reason(winner: MethodScore, config: EngineConfig) -> str:
    method = winner.method
    reason = "No payment method offers direct savings for this purchase. "
    if method.type == "upi":
        reason += f"{method.name} is a simple, direct way to pay."
    elif method.type == "credit_card" and method.usage_percentage is not None:
        reason += (
            f"{method.name} has the lowest credit utilization ({method.usage_percentage:g}%) "
            "among your eligible methods."
        )
    else:
        reason += f"{method.name} adds no credit utilization, making it a reasonable default."
    if winner.benefit is not None:
        reason += f" It still carries a non-monetary benefit: {offer_display(winner.benefit, method, config)}."
    return reason


def build_reason(ranking: Ranking, cart: CartContext, config: EngineConfig = DEFAULT_CONFIG) -> tuple[str, list[str]]:
    winner = ranking.winner
    symbol = config.currency_symbol

    if ranking.basis == "default":
        reason = _default_reason(winner, config)
        if ranking.excluded_best > 0:
            reason += " No other payment methods offer significant savings for this transaction."
    else:
        reason = (
            f"Offers the highest savings of {format_money(round(winner.savings, 2), symbol)} for "
            f"{_category_context(cart)} with its '{offer_display(winner.offer, winner.method, config)}' offer."
        )
        if ranking.basis == "fallback_scan":
            if cart.category:
                reason += f" No offer targets '{cart.category}', so offers were compared without the category restriction."
            else:
                reason += " No general offer applied, so category-specific offers were compared as well."

    warnings = constraint_warnings(winner.method, cart, config)
    if warnings:
        reason = " ".join([reason, *warnings])
    return reason, warnings


def format_result(ranking: Ranking, cart: CartContext, config: EngineConfig = DEFAULT_CONFIG) -> RecommendationResult:
    winner = ranking.winner
    shown = winner.offer or winner.benefit
    if winner.offer is not None:
        offer_type = winner.offer.type
    elif winner.benefit is not None:
        offer_type = winner.benefit.type
    else:
        offer_type = "standard_payment"

    reason, warnings = build_reason(ranking, cart, config)
    return RecommendationResult(
        payment_method_id=winner.method.method_id,
        name=winner.method.name,
        offer_type=offer_type,
        offer_display=offer_display(shown, winner.method, config),
        reason=reason,
        savings=round(winner.savings, 2),
        offer_id=shown.offer_id if shown is not None else None,
        basis=ranking.basis,
        warnings=tuple(warnings),
    )
