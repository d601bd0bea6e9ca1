"""
Checkout reducer — state × event → state, no I/O.

Totals are never stored: `totals(state)` derives them from the form
every time, so nothing can go stale between edits.
"""

from __future__ import annotations

from dataclasses import replace

from sellerdesk._types import ZERO, merge_line
from sellerdesk.checkout._events import (
    AddLine,
    ApplyQuote,
    Event,
    RemoveLine,
    SelectCarrier,
    SelectService,
    SetAddress,
    SetCityDistrict,
    SetDiscount,
    SetLocation,
    SetManualFee,
    SetName,
    SetNotes,
    SetPartialPayment,
    SetPaymentMethod,
    SetPhone,
    SetQuantity,
)
from sellerdesk.checkout._state import CheckoutForm, CheckoutState, with_form
from sellerdesk.money._calc import compute_totals
from sellerdesk.money._types import Totals


def reduce_form(form: CheckoutForm, event: Event) -> CheckoutForm:
    buyer = form.buyer
    shipping = form.shipping

    match event:
        case SetPhone(phone):
            return replace(form, buyer=replace(buyer, phone=phone))
        case SetName(name):
            return replace(form, buyer=replace(buyer, name=name))
        case SetAddress(address):
            return replace(form, buyer=replace(buyer, address=address))
        case SetCityDistrict(text):
            return replace(form, buyer=replace(buyer, city_district_text=text, location=None))
        case SetLocation(location):
            text = buyer.city_district_text
            if location is not None and not text.strip():
                text = f"{location.city_name}, {location.district_name}"
            return replace(form, buyer=replace(buyer, location=location, city_district_text=text))

        case SelectCarrier(carrier):
            return replace(form, shipping=shipping.with_carrier(carrier))
        case SelectService(service):
            return replace(form, shipping=shipping.with_service(service))
        case ApplyQuote(quote):
            return replace(form, shipping=shipping.with_quote(quote))
        case SetManualFee(fee):
            return replace(form, shipping=shipping.with_manual_fee(fee))

        case SetDiscount(discount):
            if discount.value < ZERO:
                discount = replace(discount, value=ZERO)
            return replace(form, discount=discount)
        case SetPartialPayment(amount):
            return replace(form, partial_payment=max(amount, ZERO))
        case SetPaymentMethod(method_id):
            return replace(form, payment_method_id=method_id or None)
        case SetNotes(notes):
            return replace(form, notes=notes or None)

        case AddLine(line):
            return replace(form, lines=merge_line(form.lines, line))
        case SetQuantity(key, quantity):
            lines = tuple(
                line.with_quantity(quantity) if line.key == key else line
                for line in form.lines
                if line.key != key or quantity > 0
            )
            return replace(form, lines=lines)
        case RemoveLine(key):
            return replace(form, lines=tuple(line for line in form.lines if line.key != key))


def reduce(state: CheckoutState, event: Event) -> CheckoutState:
    """
    Apply one edit.

    Example:
        state = reduce(state, SelectCarrier(jne))
        state.form.shipping.service   # None, always, after a carrier change
    """
    return with_form(state, reduce_form(state.form, event))


def totals(state: CheckoutState | CheckoutForm) -> Totals:
    form = state if isinstance(state, CheckoutForm) else state.form
    return compute_totals(
        form.lines,
        form.discount,
        shipping_fee=form.shipping.fee,
        partial_payment=form.partial_payment,
    )


__all__ = (
    "reduce_form",
    "reduce",
    "totals",
)
