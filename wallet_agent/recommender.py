from __future__ import annotations

import math
from typing import Sequence

from wallet_agent.config import DEFAULT_CONFIG, EngineConfig
from wallet_agent.eligibility import is_eligible
from wallet_agent.errors import InvalidInputError, NoEligibleMethodError
from wallet_agent.formatter import format_result
from wallet_agent.log import get_logger
from wallet_agent.models import CartContext, MethodScore, PaymentMethod, Ranking, RecommendationResult
from wallet_agent.savings import DEFAULT_EVALUATORS, DiscountEvaluator, compute_value

logger = get_logger("recommender")

NON_MONETARY_TYPES = frozenset({"miles", "voucher", "bonus_reward", "other"})


class Recommender:
    """Deterministic payment-method ranking.

    A request runs a category-gated pass over every method, repeats it with
    the category check suppressed when nothing saved money, then picks the
    best non-excluded method (or a sensible default when nothing saves).
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        discount_evaluators: dict[tuple[str, str], DiscountEvaluator] | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.discount_evaluators = discount_evaluators or DEFAULT_EVALUATORS

    def select_best_offer(
        self, method: PaymentMethod, cart: CartContext, fallback_mode: bool = False, position: int = 0
    ) -> MethodScore:
        best_key: tuple[float, int, int] | None = None
        best_offer = None
        best_value = 0.0
        benefit = None

        for index, offer in enumerate(method.offers):
            if not is_eligible(offer, method, cart, fallback_mode=fallback_mode):
                continue
            value = compute_value(offer, method, cart, self.discount_evaluators)
            if value <= 0:
                if benefit is None and offer.type in NON_MONETARY_TYPES:
                    benefit = offer
                continue
            key = (-value, self.config.offer_rank(offer.type), index)
            if best_key is None or key < best_key:
                best_key, best_offer, best_value = key, offer, value

        return MethodScore(method=method, position=position, savings=best_value, offer=best_offer, benefit=benefit)

    def score_methods(
        self, methods: Sequence[PaymentMethod], cart: CartContext, fallback_mode: bool = False
    ) -> list[MethodScore]:
        return [
            self.select_best_offer(method, cart, fallback_mode=fallback_mode, position=position)
            for position, method in enumerate(methods)
        ]

    def rank(self, methods: Sequence[PaymentMethod], cart: CartContext) -> Ranking:
        self._validate(methods, cart)

        if all(self.config.is_excluded(method.name) for method in methods):
            raise NoEligibleMethodError(
                "Every saved payment method is excluded from recommendations: "
                + ", ".join(method.name for method in methods)
            )

        scores = self.score_methods(methods, cart)
        basis = "savings"
        if max(score.savings for score in scores if not self.config.is_excluded(score.method.name)) <= 0:
            logger.debug("No category-eligible savings for %r; running fallback scan", cart.category)
            scores = self.score_methods(methods, cart, fallback_mode=True)
            basis = "fallback_scan"

        candidates = [score for score in scores if not self.config.is_excluded(score.method.name)]
        excluded_best = max(
            (score.savings for score in scores if self.config.is_excluded(score.method.name)),
            default=0.0,
        )

        winner = min(
            candidates,
            key=lambda score: (-score.savings, self.config.method_rank(score.method.type), score.position),
        )
        if winner.savings <= 0:
            winner = self._default_choice(candidates)
            basis = "default"

        logger.debug(
            "Selected %s (%s) savings=%.2f basis=%s",
            winner.method.method_id,
            winner.method.type,
            winner.savings,
            basis,
        )
        return Ranking(winner=winner, basis=basis, scores=tuple(scores), excluded_best=excluded_best)

    def recommend(self, methods: Sequence[PaymentMethod], cart: CartContext) -> RecommendationResult:
        ranking = self.rank(methods, cart)
        return format_result(ranking, cart, self.config)

    def _default_choice(self, candidates: list[MethodScore]) -> MethodScore:
        for score in candidates:
            if score.method.type == "upi":
                return score
        return min(
            candidates,
            key=lambda score: (
                score.method.usage_percentage if score.method.usage_percentage is not None else 0.0,
                score.position,
            ),
        )

    def _validate(self, methods: Sequence[PaymentMethod], cart: CartContext) -> None:
        if not methods:
            raise InvalidInputError("At least one payment method is required", field="methods")
        total = cart.cart_total
        if isinstance(total, bool) or not isinstance(total, (int, float)) or not math.isfinite(total):
            raise InvalidInputError(f"Cart total must be a finite number, got {total!r}", field="cart_total")
        if total < 0:
            raise InvalidInputError(f"Cart total cannot be negative, got {total}", field="cart_total")


def recommend(
    methods: Sequence[PaymentMethod], cart: CartContext, config: EngineConfig | None = None
) -> RecommendationResult:
    return Recommender(config=config).recommend(methods, cart)
