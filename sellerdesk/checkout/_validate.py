"""
Checkout validation — which fields a save needs before it may write.
"""

from __future__ import annotations

from collections.abc import Callable

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError, Errors
from sellerdesk.checkout._state import CheckoutForm
from sellerdesk.phone._normalize import digits


type Check = tuple[str, str, Callable[[CheckoutForm], bool]]


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


# Checked in order; the first missing field is reported.
CHECKOUT_CHECKS: tuple[Check, ...] = (
    ("lines", "Cart is empty", lambda f: bool(f.lines)),
    ("payment_method", "Select a payment method", lambda f: _filled(f.payment_method_id)),
    ("carrier", "Select a courier", lambda f: f.shipping.carrier is not None),
    ("service", "Select courier service", lambda f: f.shipping.service is not None),
    ("phone", "Enter the buyer's phone number", lambda f: bool(digits(f.buyer.phone))),
    ("name", "Enter the buyer's name", lambda f: _filled(f.buyer.name)),
    ("address", "Enter the buyer's address", lambda f: _filled(f.buyer.address)),
    (
        "city_district",
        "Enter the buyer's city and district",
        lambda f: _filled(f.buyer.city_district_text),
    ),
)

DRAFT_CHECKS: tuple[Check, ...] = (
    ("phone", "Enter the buyer's phone number", lambda f: bool(digits(f.buyer.phone))),
)


def _run(form: CheckoutForm, checks: tuple[Check, ...]) -> Result[CheckoutForm, CheckoutError]:
    for field, message, ok in checks:
        if not ok(form):
            return Error(Errors.missing(field, message))
    return Ok(form)


def validate_checkout(form: CheckoutForm) -> Result[CheckoutForm, CheckoutError]:
    return _run(form, CHECKOUT_CHECKS)


def validate_draft(form: CheckoutForm) -> Result[CheckoutForm, CheckoutError]:
    """A draft only needs someone to belong to."""
    return _run(form, DRAFT_CHECKS)


__all__ = (
    "CHECKOUT_CHECKS",
    "DRAFT_CHECKS",
    "validate_checkout",
    "validate_draft",
)
