"""
Checkout — form state, edits, validation and the save orchestrator.

    from sellerdesk import checkout as C

    orchestrator = C.CheckoutOrchestrator(seller_id, C.CheckoutServices(backend, overlay, rates))
    await orchestrator.load()
    await orchestrator.dispatch(C.SetPhone("081234567890"))
    await orchestrator.save_draft()
"""

from sellerdesk.checkout._state import (
    Phase,
    BuyerInfo,
    CheckoutForm,
    FreshCart,
    Draft,
    ExistingOrder,
    CheckoutState,
    with_form,
    form_from_order,
    from_order,
    order_write,
    to_snapshot,
    form_from_snapshot,
    from_snapshot,
)
from sellerdesk.checkout._events import (
    SetPhone,
    SetName,
    SetAddress,
    SetCityDistrict,
    SetLocation,
    SelectCarrier,
    SelectService,
    ApplyQuote,
    SetManualFee,
    SetDiscount,
    SetPartialPayment,
    SetPaymentMethod,
    SetNotes,
    AddLine,
    SetQuantity,
    RemoveLine,
    Event,
    LINE_EVENTS,
    REQUOTE_EVENTS,
)
from sellerdesk.checkout._reducer import (
    reduce_form,
    reduce,
    totals,
)
from sellerdesk.checkout._validate import (
    CHECKOUT_CHECKS,
    DRAFT_CHECKS,
    validate_checkout,
    validate_draft,
)
from sellerdesk.checkout._orchestrator import (
    CheckoutServices,
    CheckoutOutcome,
    CheckoutOrchestrator,
)
from sellerdesk.checkout._cart import add_product_to_cart


__all__ = (
    # State
    "Phase",
    "BuyerInfo",
    "CheckoutForm",
    "FreshCart",
    "Draft",
    "ExistingOrder",
    "CheckoutState",
    "with_form",
    "form_from_order",
    "from_order",
    "order_write",
    "to_snapshot",
    "form_from_snapshot",
    "from_snapshot",
    # Events
    "SetPhone",
    "SetName",
    "SetAddress",
    "SetCityDistrict",
    "SetLocation",
    "SelectCarrier",
    "SelectService",
    "ApplyQuote",
    "SetManualFee",
    "SetDiscount",
    "SetPartialPayment",
    "SetPaymentMethod",
    "SetNotes",
    "AddLine",
    "SetQuantity",
    "RemoveLine",
    "Event",
    "LINE_EVENTS",
    "REQUOTE_EVENTS",
    # Reducer
    "reduce_form",
    "reduce",
    "totals",
    # Validation
    "CHECKOUT_CHECKS",
    "DRAFT_CHECKS",
    "validate_checkout",
    "validate_draft",
    # Orchestrator
    "CheckoutServices",
    "CheckoutOutcome",
    "CheckoutOrchestrator",
    "add_product_to_cart",
)
