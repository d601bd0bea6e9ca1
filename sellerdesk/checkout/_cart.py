"""
Adding a product from the catalog while a checkout may be open.
"""

from __future__ import annotations

import logging
from typing import Literal

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError
from sellerdesk._types import CartLine, SellerId
from sellerdesk.backend._protocol import Backend
from sellerdesk.overlay._overlay import OverlayStore


logger = logging.getLogger(__name__)


type AddedTo = Literal["session", "cart"]


async def add_product_to_cart(
    seller_id: SellerId,
    line: CartLine,
    *,
    backend: Backend,
    overlay: OverlayStore,
) -> Result[AddedTo, CheckoutError]:
    """
    While an order is being edited the line joins that order's lines;
    otherwise it goes to the seller's cart.

    Only stored state changes. A live CheckoutOrchestrator for the same
    seller must load() again before its next edit: it persists its whole
    form on every dispatch, which would drop the added line, and it
    would check out without it.

    Example:
        match await add_product_to_cart(seller_id, line, backend=b, overlay=o):
            case Ok("session") | Ok("cart"):
                await orchestrator.load()
    """
    match await overlay.merge_added_line(seller_id, line):
        case Ok(True):
            logger.info("[%s] Added %s to the open edit session", seller_id, line.product_id)
            return Ok("session")
        case Ok(False):
            pass
        case Error(err):
            logger.warning("[%s] Edit session unreadable, adding to cart: %s", seller_id, err)

    match await backend.add_cart_line(seller_id, line):
        case Error(err):
            return Error(err)
        case Ok(_):
            return Ok("cart")


__all__ = ("add_product_to_cart",)
