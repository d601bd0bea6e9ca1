"""
Shipping — carrier/service selection and rate quoting.

    from sellerdesk import shipping

    selection = shipping.ShippingSelection().with_carrier(jne).with_service(jne_reg)
    quotes = await shipping.ShippingResolver(backend, rates).quote(seller_id, district_id, 3)
"""

from sellerdesk.shipping._types import (
    Preference,
    effective,
    Courier,
    CourierService,
    Quote,
    QuoteSet,
    NO_QUOTES,
    ShippingSelection,
)
from sellerdesk.shipping._rates import (
    RateLookup,
    Tariff,
    FlatRateLookup,
)
from sellerdesk.shipping._resolver import (
    CarrierCatalog,
    shipment_weight,
    cheapest,
    match_service,
    ShippingResolver,
)


__all__ = (
    "Preference",
    "effective",
    "Courier",
    "CourierService",
    "Quote",
    "QuoteSet",
    "NO_QUOTES",
    "ShippingSelection",
    "RateLookup",
    "Tariff",
    "FlatRateLookup",
    "CarrierCatalog",
    "shipment_weight",
    "cheapest",
    "match_service",
    "ShippingResolver",
)
