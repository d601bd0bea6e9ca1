"""
Phone normalization — Indonesian numbers in every format the backend has stored.

Canonical form is digits with the 62 country code: 6281259498653.
Historical rows may hold the display form, the local 0-prefixed form,
a +62 form, or whatever the seller typed.
"""

from __future__ import annotations

import re
from collections.abc import Callable


COUNTRY_CODE = "62"

_NON_DIGIT = re.compile(r"\D")
_MOBILE = re.compile(r"^628\d{8,10}$")


# ═══════════════════════════════════════════════════════════════════════════════
# Single Forms
# ═══════════════════════════════════════════════════════════════════════════════


def digits(raw: str) -> str:
    return _NON_DIGIT.sub("", raw)


def canonical(raw: str) -> str:
    """
    Canonical storage form: digits with country code.

    Example:
        canonical("+62 812-5949-8653")  # "6281259498653"
        canonical("081259498653")       # "6281259498653"
        canonical("81259498653")        # "6281259498653"

    Note: Input without any digit is returned unchanged.
    """
    cleaned = digits(raw)
    if not cleaned:
        return raw
    if cleaned.startswith(COUNTRY_CODE):
        return cleaned
    if cleaned.startswith("0"):
        return COUNTRY_CODE + cleaned[1:]
    if cleaned.startswith("8"):
        return COUNTRY_CODE + cleaned
    return cleaned


def display(raw: str) -> str:
    """
    Human display form: +62 XXX-XXXX-XXXX.

    Numbers too short to split are shown in canonical form.
    """
    cleaned = canonical(raw)
    if len(cleaned) >= 11 and cleaned.startswith(COUNTRY_CODE):
        return f"+{cleaned[:2]} {cleaned[2:5]}-{cleaned[5:9]}-{cleaned[9:]}"
    return cleaned


def local(raw: str) -> str | None:
    cleaned = canonical(raw)
    if cleaned.startswith(COUNTRY_CODE) and len(cleaned) > len(COUNTRY_CODE):
        return "0" + cleaned[len(COUNTRY_CODE):]
    return None


def international(raw: str) -> str | None:
    cleaned = canonical(raw)
    if cleaned.startswith(COUNTRY_CODE):
        return "+" + cleaned
    return None


def is_valid_mobile(raw: str) -> bool:
    """Indonesian mobile: 628 followed by 8 to 10 digits."""
    return _MOBILE.match(canonical(raw)) is not None


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup Forms
# ═══════════════════════════════════════════════════════════════════════════════

type Formatter = Callable[[str], str | None]

# Lookup order. A new historical format is one more entry here.
FORMATTERS: tuple[Formatter, ...] = (
    canonical,
    display,
    local,
    international,
    lambda raw: raw.strip() or None,
)


def canonical_forms(raw: str) -> tuple[str, ...]:
    """
    Every representation a stored phone may have, in lookup order.

    Example:
        canonical_forms("081234567890")
        # ("6281234567890", "+62 812-3456-7890", "081234567890", "+6281234567890")

    Note: Duplicates are collapsed keeping first position.
    A digitless input yields just itself.
    """
    if not digits(raw):
        return (raw,)

    forms: list[str] = []
    for formatter in FORMATTERS:
        form = formatter(raw)
        if form and form not in forms:
            forms.append(form)
    return tuple(forms)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "COUNTRY_CODE",
    "FORMATTERS",
    "Formatter",
    "digits",
    "canonical",
    "display",
    "local",
    "international",
    "is_valid_mobile",
    "canonical_forms",
)
