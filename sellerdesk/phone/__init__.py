"""
Phone — normalization and detection of buyer phone numbers.

    from sellerdesk import phone

    phone.canonical("0812-5949-8653")        # "6281259498653"
    phone.display("6281259498653")           # "+62 812-5949-8653"
    phone.canonical_forms("081259498653")    # every stored variant, lookup order
"""

from sellerdesk.phone._normalize import (
    COUNTRY_CODE,
    FORMATTERS,
    Formatter,
    digits,
    canonical,
    display,
    local,
    international,
    is_valid_mobile,
    canonical_forms,
)
from sellerdesk.phone._source import (
    PhoneSource,
    detect_phone,
)


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
    "PhoneSource",
    "detect_phone",
)
