"""Shared seed data for the test suite."""

from decimal import Decimal

from sellerdesk._config import CheckoutPolicy
from sellerdesk._types import CartLine
from sellerdesk.backend import MemoryBackend, PaymentMethod, ResolvedLocation, SellerProfile
from sellerdesk.checkout import (
    AddLine,
    CheckoutOrchestrator,
    CheckoutServices,
    SetAddress,
    SetName,
    SetPaymentMethod,
    SetPhone,
)
from sellerdesk.invoice import TextInvoiceRenderer
from sellerdesk.overlay import MemoryStore, OverlayStore
from sellerdesk.shipping import Courier, CourierService, FlatRateLookup, Tariff


SELLER = "seller-1"

JNE = Courier("c-jne", "jne", "JNE")
JNE_REG = CourierService("s-jne-reg", "c-jne", "REG", "JNE Reguler")
JNE_YES = CourierService("s-jne-yes", "c-jne", "YES", "JNE Yakin Esok Sampai")
SICEPAT = Courier("c-sicepat", "sicepat", "SiCepat")
SICEPAT_BEST = CourierService("s-sicepat-best", "c-sicepat", "BEST", "SiCepat Best")

COBLONG = ResolvedLocation("32", "Jawa Barat", "3273", "Kota Bandung", "3273010", "Coblong")
DEPOK = ResolvedLocation("34", "DI Yogyakarta", "3404", "Kabupaten Sleman", "3404070", "Depok")

TARIFFS = (
    Tariff("jne", "REG", "JNE Reguler", Decimal(9000), "2-3"),
    Tariff("jne", "YES", "JNE Yakin Esok Sampai", Decimal(18000), "1"),
    Tariff("sicepat", "BEST", "SiCepat Best", Decimal(12000), "1-2"),
)

BCA = PaymentMethod("pm-bca", SELLER, "BCA", "1234567890", "Toko Sinar")

# No debounce wait in tests; settle_phone() runs the lookup explicitly.
POLICY = CheckoutPolicy().with_phone_settle(milliseconds=0)


def line(
    product_id: str = "p-tea",
    quantity: int = 1,
    price: int | str = 50000,
    variant_id: str | None = None,
    name: str = "Teh Melati",
) -> CartLine:
    return CartLine(
        product_id=product_id,
        quantity=quantity,
        unit_price=Decimal(price),
        variant_id=variant_id,
        name=name,
    )


def seeded_backend() -> MemoryBackend:
    backend = MemoryBackend()
    backend.add_courier(JNE, JNE_REG, JNE_YES)
    backend.add_courier(SICEPAT, SICEPAT_BEST)
    backend.add_payment_method(BCA)
    backend.add_seller(SellerProfile(SELLER, "Toko Sinar", phone="081200001111"))
    backend.add_region(COBLONG)
    backend.add_region(DEPOK)
    return backend


def make_services(
    backend: MemoryBackend | None = None,
    *,
    rates: FlatRateLookup | None = None,
    overlay: OverlayStore | None = None,
    **kwargs: object,
) -> CheckoutServices:
    kwargs.setdefault("renderer", TextInvoiceRenderer())
    kwargs.setdefault("policy", POLICY)
    return CheckoutServices(
        backend=backend if backend is not None else seeded_backend(),
        overlay=overlay if overlay is not None else OverlayStore(MemoryStore()),
        rates=rates if rates is not None else FlatRateLookup(default=TARIFFS),
        **kwargs,  # type: ignore[arg-type]
    )


async def ready_orchestrator(services: CheckoutServices) -> CheckoutOrchestrator:
    orchestrator = CheckoutOrchestrator(SELLER, services)
    await orchestrator.load()
    return orchestrator


async def fill(orchestrator: CheckoutOrchestrator, phone: str = "081234567890") -> None:
    """Type a complete checkout for one Teh Melati to Coblong, paid by BCA transfer."""
    await orchestrator.dispatch(AddLine(line()))
    await orchestrator.dispatch(SetPhone(phone))
    await orchestrator.dispatch(SetName("Budi"))
    await orchestrator.dispatch(SetAddress("Jl. Dago 1"))
    await orchestrator.resolve_location("Kota Bandung, Kec. Coblong")
    await orchestrator.dispatch(SetPaymentMethod(BCA.id))
