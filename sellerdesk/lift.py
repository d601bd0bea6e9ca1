"""
Lift — Helpers for lifting collaborator calls into classified results.

Every call into something outside the core (rate API, renderer,
location service, phone scraper) goes through `collaborator` so
exceptions and timeouts arrive at the orchestrator as CheckoutError.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta

from kungfu import LazyCoroResult

from combinators import timeout, TimeoutError as FlowTimeout
from combinators.lift import catching_async

from sellerdesk._errors import CheckoutError, Errors


# ═══════════════════════════════════════════════════════════════════════════════
# Collaborator calls
# ═══════════════════════════════════════════════════════════════════════════════


def collaborator[T](
    name: str,
    fn: Callable[[], Awaitable[T]],
    *,
    within: timedelta | None = None,
) -> LazyCoroResult[T, CheckoutError]:
    """
    Call an external collaborator, classifying failure as COLLABORATOR_UNAVAILABLE.

    Example:
        quotes = await collaborator(
            "rate lookup",
            lambda: rates.quote(origin, destination, weight, codes),
            within=timedelta(seconds=10),
        )
    """
    call = catching_async(fn, on_error=lambda exc: Errors.unavailable(name, exc))
    if within is None:
        return call

    def classify(err: CheckoutError | FlowTimeout) -> CheckoutError:
        if isinstance(err, FlowTimeout):
            return Errors.unavailable(name, err)
        return err

    return timeout(call, seconds=within.total_seconds()).map_err(classify)


def rendering[T](fn: Callable[[], Awaitable[T]]) -> LazyCoroResult[T, CheckoutError]:
    """Call the invoice renderer; failure is a RENDER_FAILURE warning."""
    return catching_async(fn, on_error=Errors.render_failed)


__all__ = (
    "collaborator",
    "rendering",
)
