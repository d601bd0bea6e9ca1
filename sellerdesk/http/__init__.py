"""
HTTP — FastAPI routes over the checkout orchestrator.

    from sellerdesk.http import create_app

    app = create_app()   # uvicorn --factory sellerdesk.http:create_app
"""

from sellerdesk.http._models import (
    LineIn,
    EventIn,
    DraftIn,
    ErrorOut,
    TotalsOut,
    CheckoutOut,
    OrderOut,
    SubmitOut,
    AddedOut,
)
from sellerdesk.http._app import (
    Sessions,
    create_app,
)


__all__ = (
    "LineIn",
    "EventIn",
    "DraftIn",
    "ErrorOut",
    "TotalsOut",
    "CheckoutOut",
    "OrderOut",
    "SubmitOut",
    "AddedOut",
    "Sessions",
    "create_app",
)
