"""
sellerdesk — order-management core for chat-commerce sellers.

    from sellerdesk import phone as P      # Buyer phone normalization
    from sellerdesk import money as M      # Discounts and totals
    from sellerdesk import shipping as S   # Carriers, services, rate quotes
    from sellerdesk import checkout as C   # Draft / order checkout orchestrator
"""

from sellerdesk import lift
from sellerdesk import phone
from sellerdesk import money
from sellerdesk import shipping
from sellerdesk import backend
from sellerdesk import overlay
from sellerdesk import drafts
from sellerdesk import location
from sellerdesk import invoice
from sellerdesk import checkout
from sellerdesk._types import (
    CartLine,
    LineKey,
    SellerId,
    OrderId,
    merge_line,
)
from sellerdesk._errors import (
    ErrorKind,
    CheckoutError,
    Errors,
)
from sellerdesk._config import (
    CheckoutPolicy,
    Settings,
)
from sellerdesk._logging import setup_logging

__version__ = "0.1.0"

__all__ = (
    "lift",
    "phone",
    "money",
    "shipping",
    "backend",
    "overlay",
    "drafts",
    "location",
    "invoice",
    "checkout",
    "CartLine",
    "LineKey",
    "SellerId",
    "OrderId",
    "merge_line",
    "ErrorKind",
    "CheckoutError",
    "Errors",
    "CheckoutPolicy",
    "Settings",
    "setup_logging",
)
