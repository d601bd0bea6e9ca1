"""
Configuration — checkout policy and process settings.

CheckoutPolicy is the behavior knob set passed to components.
Settings is the process-level environment (database, logging).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timedelta


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Policy — Behavior Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    Checkout behavior configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            CheckoutPolicy()
            .with_weights(min_grams=1000, grams_per_item=500)
            .with_rate_timeout(seconds=5)
            .with_origin("3171010")
        )

    Note: Immutable — each method returns new CheckoutPolicy.
    """

    min_weight_grams: int = 1000
    grams_per_item: int = 500
    rate_lookup_timeout: timedelta = timedelta(seconds=10)
    phone_settle_delay: timedelta = timedelta(milliseconds=500)
    order_number_prefix: str = "ORD"
    origin_district_id: str | None = None

    def with_weights(
        self,
        *,
        min_grams: int | None = None,
        grams_per_item: int | None = None,
    ) -> CheckoutPolicy:
        """
        Set shipment weight rule: max(min_grams, grams_per_item × item count).

        Example:
            .with_weights(min_grams=1000, grams_per_item=500)
        """
        return replace(
            self,
            min_weight_grams=self.min_weight_grams if min_grams is None else min_grams,
            grams_per_item=self.grams_per_item if grams_per_item is None else grams_per_item,
        )

    def with_rate_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """Set how long a rate lookup may take before it counts as unavailable."""
        timeout = delta if delta else timedelta(seconds=seconds or 10)
        return replace(self, rate_lookup_timeout=timeout)

    def with_phone_settle(
        self,
        *,
        milliseconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """
        Set how long the phone field must stay unchanged before draft lookup runs.

        Example:
            .with_phone_settle(milliseconds=0)  # look up immediately (tests)
        """
        delay = delta if delta is not None else timedelta(milliseconds=milliseconds or 0)
        return replace(self, phone_settle_delay=delay)

    def with_order_prefix(self, prefix: str) -> CheckoutPolicy:
        return replace(self, order_number_prefix=prefix)

    def with_origin(self, district_id: str | None) -> CheckoutPolicy:
        """Set the district shipments leave from (seller warehouse)."""
        return replace(self, origin_district_id=district_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Settings — Process Environment
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            database_url=os.getenv("SELLERDESK_DATABASE_URL", DEFAULT_DATABASE_URL),
            log_level=os.getenv("SELLERDESK_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_format=os.getenv("SELLERDESK_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutPolicy",
    "Settings",
    "DEFAULT_LOG_FORMAT",
)
