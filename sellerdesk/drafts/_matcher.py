"""
Draft matcher — find the seller's open draft for a buyer phone.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError
from sellerdesk._types import OrderId, SellerId
from sellerdesk.backend._protocol import Backend
from sellerdesk.backend._types import OrderStatus
from sellerdesk.phone._normalize import canonical_forms, digits


logger = logging.getLogger(__name__)


class DraftMatcher:
    """
    One draft per buyer: look it up before creating another.

    Tries every stored phone format in order and stops at the first hit.
    Within one format the most recently updated draft wins.

    Example:
        match await DraftMatcher(backend).find(seller_id, "0812-3456-7890"):
            case Ok(None):
                ...  # no draft, a save will create one
            case Ok(draft_id):
                ...  # offer "resume draft"
    """

    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    async def find(
        self,
        seller_id: SellerId,
        phone: str,
        *,
        exclude: OrderId | None = None,
    ) -> Result[OrderId | None, CheckoutError]:
        if not digits(phone):
            return Ok(None)

        for form in canonical_forms(phone):
            match await self.backend.find_orders(seller_id, status=OrderStatus.DRAFT, phone=form):
                case Error(err):
                    return Error(err)
                case Ok(found):
                    candidates = [o for o in found if o.id != exclude]
                    if candidates:
                        logger.debug("Draft %s matched phone form %r", candidates[0].order_number, form)
                        return Ok(candidates[0].id)

        return Ok(None)


__all__ = ("DraftMatcher",)
