from __future__ import annotations

import math
import os
from dataclasses import dataclass

from wallet_agent.errors import InvalidInputError


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """Business constants for ranking and reason wording."""

    high_utilization_threshold: float = 80.0
    excluded_method_names: tuple[str, ...] = ("Amazon Pay",)
    method_type_priority: tuple[str, ...] = ("credit_card", "debit_card", "upi", "wallet", "gift_card")
    offer_type_priority: tuple[str, ...] = ("cashback", "flat_discount")
    currency_symbol: str = "₹"

    def is_excluded(self, method_name: str) -> bool:
        name = method_name.strip().casefold()
        return any(name == excluded.strip().casefold() for excluded in self.excluded_method_names)

    def method_rank(self, method_type: str) -> int:
        try:
            return self.method_type_priority.index(method_type)
        except ValueError:
            return len(self.method_type_priority)

    def offer_rank(self, offer_type: str) -> int:
        try:
            return self.offer_type_priority.index(offer_type)
        except ValueError:
            return len(self.offer_type_priority)

    @classmethod
    def from_env(cls) -> EngineConfig:
        defaults = cls()
        threshold = defaults.high_utilization_threshold
        raw_threshold = os.getenv("WALLET_AGENT_UTILIZATION_THRESHOLD")
        if raw_threshold:
            try:
                threshold = float(raw_threshold)
            except ValueError as exc:
                raise InvalidInputError(
                    f"WALLET_AGENT_UTILIZATION_THRESHOLD must be a number, got {raw_threshold!r}",
                    field="utilization_threshold",
                ) from exc
            if not math.isfinite(threshold) or not 0 <= threshold <= 100:
                raise InvalidInputError(
                    "WALLET_AGENT_UTILIZATION_THRESHOLD must be between 0 and 100",
                    field="utilization_threshold",
                )

        excluded = defaults.excluded_method_names
        raw_excluded = os.getenv("WALLET_AGENT_EXCLUDED_METHODS")
        if raw_excluded is not None:
            excluded = tuple(name.strip() for name in raw_excluded.split(",") if name.strip())

        currency = os.getenv("WALLET_AGENT_CURRENCY", "").strip() or defaults.currency_symbol
        return cls(
            high_utilization_threshold=threshold,
            excluded_method_names=excluded,
            currency_symbol=currency,
        )


DEFAULT_CONFIG = EngineConfig()
