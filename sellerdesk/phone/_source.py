"""
Phone source — best-effort phone detection from an external chat page.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Protocol

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError, Errors
from sellerdesk.lift import collaborator
from sellerdesk.phone._normalize import canonical, digits


logger = logging.getLogger(__name__)


class PhoneSource(Protocol):
    """
    Scraper that reads the buyer's number from whatever page the seller has open.

    Returns a single raw candidate or None. May raise; callers never see it.
    """

    async def detect(self) -> str | None: ...


async def detect_phone(
    source: PhoneSource | None,
    *,
    within: timedelta = timedelta(seconds=3),
) -> Result[str | None, CheckoutError]:
    """
    Ask the scraper for a phone, canonicalized.

    Ok(None) — scraper ran, nothing on the page.
    Error(COLLABORATOR_UNAVAILABLE) — no scraper, or it failed; seller types the number.
    """
    if source is None:
        return Error(Errors.unavailable("phone source"))

    match await collaborator("phone source", source.detect, within=within):
        case Ok(raw) if raw and digits(raw):
            return Ok(canonical(raw))
        case Ok(_):
            return Ok(None)
        case Error(err):
            logger.warning("Phone detection degraded: %s", err.message)
            return Error(err)


__all__ = (
    "PhoneSource",
    "detect_phone",
)
