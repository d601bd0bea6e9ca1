"""
Checkout orchestrator — load, edit, validate, save draft or check out.

    orchestrator = CheckoutOrchestrator(seller_id, services)

    await orchestrator.load()                        # pending edit > session > fresh cart
    await orchestrator.dispatch(SetPhone("0812..."))
    await orchestrator.resolve_location("Kota Bandung, Kec. Coblong")
    await orchestrator.dispatch(SetPaymentMethod("pm-1"))

    match await orchestrator.checkout():
        case Ok(outcome):
            outcome.order.order_number
            outcome.warnings          # e.g. invoice render failed
        case Error(err):
            err.field                 # which field is missing

Phases:

    LOADING → READY → VALIDATING → SAVING_DRAFT | CHECKING_OUT → COMPLETED
                ▲                        │              │
                └────────────────────────┴──────────────┘ (on failure / after save)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from kungfu import Result, Ok, Error

from sellerdesk._config import CheckoutPolicy
from sellerdesk._errors import CheckoutError, Errors
from sellerdesk._types import CartLine, CourierId, OrderId, SellerId, ServiceId
from sellerdesk.backend._protocol import Backend
from sellerdesk.backend._types import OrderRecord, OrderStatus, PaymentMethod, ResolvedLocation, SellerProfile
from sellerdesk.checkout._events import (
    AddLine,
    ApplyQuote,
    Event,
    LINE_EVENTS,
    REQUOTE_EVENTS,
    RemoveLine,
    SelectCarrier,
    SelectService,
    SetCityDistrict,
    SetLocation,
    SetPhone,
    SetQuantity,
)
from sellerdesk.checkout._reducer import reduce, totals
from sellerdesk.checkout._state import (
    CheckoutForm,
    CheckoutState,
    Draft,
    ExistingOrder,
    FreshCart,
    Phase,
    form_from_snapshot,
    from_order,
    from_snapshot,
    order_write,
    to_snapshot,
)
from sellerdesk.checkout._validate import validate_checkout, validate_draft
from sellerdesk.drafts._debounce import Debouncer
from sellerdesk.drafts._matcher import DraftMatcher
from sellerdesk.invoice._render import InvoiceRenderer
from sellerdesk.invoice._snapshot import InvoiceSnapshot, assemble_invoice
from sellerdesk.lift import rendering
from sellerdesk.location._resolver import (
    LocationResolver,
    RegionLocationResolver,
    Resolution,
    resolve_location,
)
from sellerdesk.money._types import Totals
from sellerdesk.overlay._overlay import OverlayStore
from sellerdesk.overlay._store import StoreError
from sellerdesk.phone._source import PhoneSource, detect_phone
from sellerdesk.shipping._rates import RateLookup
from sellerdesk.shipping._resolver import ShippingResolver, cheapest, match_service
from sellerdesk.shipping._types import (
    Courier,
    CourierService,
    NO_QUOTES,
    Quote,
    QuoteSet,
)


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Collaborators / Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutServices:
    """Everything the orchestrator talks to. Optional ones degrade when absent."""

    backend: Backend
    overlay: OverlayStore
    rates: RateLookup
    renderer: InvoiceRenderer | None = None
    locations: LocationResolver | None = None
    phone_source: PhoneSource | None = None
    policy: CheckoutPolicy = field(default_factory=CheckoutPolicy)


@dataclass(frozen=True, slots=True)
class CheckoutOutcome:
    """
    A completed checkout.

    The order is written no matter what warnings says: render and
    cleanup failures come after the write and never undo it.
    """

    order: OrderRecord
    invoice: InvoiceSnapshot
    rendered: bytes | str | None = None
    warnings: tuple[CheckoutError, ...] = ()


def _local_state_failure(action: str, err: StoreError) -> CheckoutError:
    return Errors.unavailable(f"local state ({action})", err.cause)


# ═══════════════════════════════════════════════════════════════════════════════
# Orchestrator
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutOrchestrator:
    """
    One seller's checkout session.

    Note: Not safe for concurrent submissions from the same session;
    nothing versions the order row between read and write.
    """

    def __init__(self, seller_id: SellerId, services: CheckoutServices) -> None:
        self.seller_id = seller_id
        self.services = services
        self.backend = services.backend
        self.overlay = services.overlay
        self.shipping = ShippingResolver(services.backend, services.rates, services.policy)
        self.matcher = DraftMatcher(services.backend)
        self.locations = services.locations or RegionLocationResolver(services.backend)

        self.phase = Phase.LOADING
        self.state: CheckoutState = FreshCart()
        self.quotes: QuoteSet = NO_QUOTES
        self.carriers: tuple[Courier, ...] = ()
        self.carrier_services: tuple[CourierService, ...] = ()
        self.draft_candidate: OrderId | None = None
        self.warnings: list[CheckoutError] = []
        self._phone_lookup = Debouncer(services.policy.phone_settle_delay, self._lookup_draft)

    # ── views ─────────────────────────────────────────────────────────────────

    @property
    def form(self) -> CheckoutForm:
        return self.state.form

    @property
    def totals(self) -> Totals:
        return totals(self.state)

    @property
    def editing(self) -> bool:
        return not isinstance(self.state, FreshCart)

    def take_warnings(self) -> tuple[CheckoutError, ...]:
        taken = tuple(self.warnings)
        self.warnings.clear()
        return taken

    def _warn(self, err: CheckoutError) -> None:
        logger.warning("[%s] %s", self.seller_id, err.message)
        self.warnings.append(err)

    # ═══════════════════════════════════════════════════════════════════════════
    # Loading
    # ═══════════════════════════════════════════════════════════════════════════

    async def load(self) -> CheckoutState:
        """
        Restore whatever the seller was doing.

        Priority: one-shot pending edit, then the edit session, then the
        fresh cart. Never fails; unreadable sources are skipped with a warning.
        """
        self.phase = Phase.LOADING
        self.draft_candidate = None
        self._phone_lookup.cancel()

        state = await self._from_pending_edit()
        if state is None:
            state = await self._from_edit_session()
        if state is None:
            state = await self._fresh_cart()
        self.state = state

        await self._refresh_shipping()
        self.phase = Phase.READY
        logger.debug("[%s] Loaded %s", self.seller_id, type(state).__name__)
        return self.state

    async def _from_pending_edit(self) -> CheckoutState | None:
        match await self.overlay.take_pending_edit(self.seller_id):
            case Error(err):
                self._warn(_local_state_failure("pending edit", err))
                return None
            case Ok(None):
                return None
            case Ok(order_id):
                match await self._open(order_id):
                    case Ok(state):
                        return state
                    case Error(err):
                        self._warn(err)
                        return None

    async def _from_edit_session(self) -> CheckoutState | None:
        match await self.overlay.read(self.seller_id):
            case Error(err):
                self._warn(_local_state_failure("edit session", err))
                return None
            case Ok(None):
                return None
            case Ok(snapshot):
                return from_snapshot(snapshot)

    async def _fresh_cart(self) -> CheckoutState:
        lines: tuple[CartLine, ...] = ()
        match await self.backend.list_cart(self.seller_id):
            case Error(err):
                self._warn(err)
            case Ok(found):
                lines = found

        form = CheckoutForm(lines=lines)
        match await self.overlay.read_cart_form(self.seller_id):
            case Error(err):
                self._warn(_local_state_failure("cart form", err))
            case Ok(None):
                pass
            case Ok(snapshot):
                form = replace(form_from_snapshot(snapshot), lines=lines)
        return FreshCart(form)

    async def _open(self, order_id: OrderId) -> Result[CheckoutState, CheckoutError]:
        """Load an order as an edit session and persist the session snapshot."""
        match await self.backend.get_order(order_id):
            case Error(err):
                return Error(err)
            case Ok(None):
                return Error(Errors.not_found(f"Order {order_id} not found"))
            case Ok(order) if order.seller_id != self.seller_id:
                return Error(Errors.not_found(f"Order {order_id} not found"))
            case Ok(order) if not order.status.editable:
                return Error(Errors.invalid(
                    "order",
                    f"Order {order.order_number} is {order.status.value} and can no longer be edited",
                ))
            case Ok(order):
                state = from_order(order)

        match await self.overlay.begin(self.seller_id, to_snapshot(state)):
            case Error(err):
                self._warn(_local_state_failure("begin edit", err))
            case Ok(_):
                pass
        return Ok(state)

    # ═══════════════════════════════════════════════════════════════════════════
    # Entering edit mode
    # ═══════════════════════════════════════════════════════════════════════════

    async def open_order(self, order_id: OrderId) -> Result[CheckoutState, CheckoutError]:
        """Start editing a draft or a placed (still editable) order right now."""
        match await self._open(order_id):
            case Error(err):
                return Error(err)
            case Ok(state):
                self.state = state

        self.draft_candidate = None
        await self._refresh_shipping()
        self.phase = Phase.READY
        return Ok(self.state)

    async def resume_draft(self, order_id: OrderId) -> Result[CheckoutState, CheckoutError]:
        """Continue the draft the matcher found instead of starting a duplicate."""
        match await self.backend.get_order(order_id):
            case Ok(order) if order is not None and order.status is not OrderStatus.DRAFT:
                return Error(Errors.invalid("order", f"Order {order.order_number} is not a draft"))
            case _:
                return await self.open_order(order_id)

    async def request_edit(self, order_id: OrderId) -> Result[None, CheckoutError]:
        """Leave a one-shot instruction for the next load to open this order."""
        match await self.overlay.put_pending_edit(self.seller_id, order_id):
            case Error(err):
                return Error(_local_state_failure("pending edit", err))
            case Ok(_):
                return Ok(None)

    # ═══════════════════════════════════════════════════════════════════════════
    # Field edits
    # ═══════════════════════════════════════════════════════════════════════════

    async def dispatch(self, event: Event) -> Result[CheckoutState, CheckoutError]:
        """
        Apply one edit, then re-quote and persist the full snapshot.

        Error only when a fresh-cart line change could not be written to
        the cart; the edit is rolled back in that case.
        """
        previous = self.state
        self.state = reduce(self.state, event)
        self.phase = Phase.READY

        if isinstance(previous, FreshCart) and isinstance(event, LINE_EVENTS):
            match await self._sync_cart(event):
                case Error(err):
                    self.state = previous
                    return Error(err)
                case Ok(_):
                    pass

        match event:
            case SetPhone():
                self._phone_lookup.trigger()
            case SelectCarrier():
                await self._refresh_services()
            case SelectService(service) if not self.quotes.empty:
                self.state = reduce(self.state, ApplyQuote(self._quote_for(service)))
            case _:
                pass

        if isinstance(event, REQUOTE_EVENTS):
            await self._requote()

        await self._persist()
        return Ok(self.state)

    async def _sync_cart(self, event: Event) -> Result[None, CheckoutError]:
        match event:
            case AddLine(line):
                return await self.backend.add_cart_line(self.seller_id, line)
            case SetQuantity(key, quantity):
                return await self.backend.set_cart_quantity(self.seller_id, key, quantity)
            case RemoveLine(key):
                return await self.backend.set_cart_quantity(self.seller_id, key, 0)
            case _:
                return Ok(None)

    async def _persist(self) -> None:
        snapshot = to_snapshot(self.state)
        if self.editing:
            result = await self.overlay.write(self.seller_id, snapshot)
        else:
            result = await self.overlay.write_cart_form(self.seller_id, snapshot)
        match result:
            case Error(err):
                self._warn(_local_state_failure("save form", err))
            case Ok(_):
                pass

    # ── phone ─────────────────────────────────────────────────────────────────

    async def _lookup_draft(self) -> None:
        exclude = self.state.order_id if isinstance(self.state, (Draft, ExistingOrder)) else None
        match await self.matcher.find(self.seller_id, self.form.buyer.phone, exclude=exclude):
            case Error(err):
                self.draft_candidate = None
                self._warn(err)
            case Ok(candidate):
                self.draft_candidate = candidate

    async def settle_phone(self) -> OrderId | None:
        """Phone field lost focus: look up a matching draft now."""
        await self._phone_lookup.flush()
        return self.draft_candidate

    async def detect_phone(self) -> Result[str | None, CheckoutError]:
        """Fill the phone from the page the seller is chatting on, if possible."""
        match await detect_phone(self.services.phone_source):
            case Error(err):
                self.warnings.append(err)
                return Error(err)
            case Ok(None):
                return Ok(None)
            case Ok(phone):
                await self.dispatch(SetPhone(phone))
                await self.settle_phone()
                return Ok(phone)

    # ── location ──────────────────────────────────────────────────────────────

    async def resolve_location(self, text: str) -> Resolution:
        """Set the destination text and try to resolve it to a district."""
        await self.dispatch(SetCityDistrict(text))
        resolution = await resolve_location(self.locations, text)
        if resolution.error is not None:
            self.warnings.append(resolution.error)
        if resolution.location is not None:
            await self.dispatch(SetLocation(resolution.location))
        return resolution

    async def select_district(self, district_id: str) -> Result[ResolvedLocation, CheckoutError]:
        """Set the destination from a picked search result."""
        match await self.locations.resolve_district(district_id):
            case Error(err):
                return Error(err)
            case Ok(None):
                return Error(Errors.not_found(f"District {district_id} not found"))
            case Ok(location):
                await self.dispatch(SetLocation(location))
                return Ok(location)

    # ═══════════════════════════════════════════════════════════════════════════
    # Shipping
    # ═══════════════════════════════════════════════════════════════════════════

    async def _refresh_carriers(self) -> bool:
        match await self.shipping.enabled_carriers(self.seller_id):
            case Error(err):
                self._warn(err)
                return False
            case Ok(carriers):
                self.carriers = carriers
                return True

    async def _refresh_services(self) -> bool:
        carrier = self.form.shipping.carrier
        if carrier is None:
            self.carrier_services = ()
            return True
        match await self.shipping.services_for(self.seller_id, carrier):
            case Error(err):
                self._warn(err)
                return False
            case Ok(services):
                self.carrier_services = services
                return True

    async def _refresh_shipping(self) -> None:
        await self._refresh_carriers()
        await self._refresh_services()
        self.quotes = NO_QUOTES
        if self.form.buyer.destination is not None and self.form.lines:
            await self._requote()

    def _quote_for(self, service: CourierService | None) -> Quote | None:
        carrier = self.form.shipping.carrier
        if service is None or carrier is None:
            return None
        code = service.code.casefold()
        for quote in self.quotes.quotes:
            if quote.courier_code == carrier.code and quote.service_code.casefold() == code:
                return quote
        return None

    async def _requote(self) -> None:
        form = self.form
        destination = form.buyer.destination
        if destination is None or not form.lines:
            self.quotes = NO_QUOTES
            self.state = reduce(self.state, ApplyQuote(None))
            return

        match await self.shipping.quote(
            self.seller_id, destination, form.item_count, form.shipping.carrier
        ):
            case Error(err):
                self.quotes = NO_QUOTES
                self.state = reduce(self.state, ApplyQuote(None))
                self._warn(err)
            case Ok(quotes):
                self.quotes = quotes
                await self._apply_default_quote()

    async def _apply_default_quote(self) -> None:
        """
        Keep the chosen service's quote; with no carrier chosen, pick the cheapest.

        The default pick sets both carrier and service, and only among
        services the seller has enabled. A carrier the seller chose keeps
        its service unset until one is selected.
        """
        shipping = self.form.shipping
        if shipping.service is not None:
            self.state = reduce(self.state, ApplyQuote(self._quote_for(shipping.service)))
            return
        if shipping.carrier is not None or self.quotes.selected is None:
            self.state = reduce(self.state, ApplyQuote(None))
            return

        courier_code = self.quotes.selected.courier_code
        carrier = next((c for c in self.carriers if c.code == courier_code), None)
        if carrier is None:
            self.state = reduce(self.state, ApplyQuote(None))
            return
        self.state = reduce(self.state, SelectCarrier(carrier))
        await self._refresh_services()

        pick = cheapest([
            q for q in self.quotes.quotes
            if q.courier_code == carrier.code and match_service(self.carrier_services, q) is not None
        ])
        if pick is not None:
            self.state = reduce(self.state, SelectService(match_service(self.carrier_services, pick)))
        self.state = reduce(self.state, ApplyQuote(pick))

    async def set_courier_preference(self, courier_id: CourierId, enabled: bool) -> Result[None, CheckoutError]:
        match await self.backend.set_courier_preference(self.seller_id, courier_id, enabled):
            case Error(err):
                return Error(err)
            case Ok(_):
                pass

        if await self._refresh_carriers():
            carrier = self.form.shipping.carrier
            if carrier is not None and carrier.id not in {c.id for c in self.carriers}:
                self.state = reduce(self.state, SelectCarrier(None))
        await self._after_preference_change()
        return Ok(None)

    async def set_service_preference(self, service_id: ServiceId, enabled: bool) -> Result[None, CheckoutError]:
        match await self.backend.set_service_preference(self.seller_id, service_id, enabled):
            case Error(err):
                return Error(err)
            case Ok(_):
                pass
        await self._after_preference_change()
        return Ok(None)

    async def _after_preference_change(self) -> None:
        if await self._refresh_services():
            service = self.form.shipping.service
            if service is not None and service.id not in {s.id for s in self.carrier_services}:
                self.state = reduce(self.state, SelectService(None))
        if self.form.buyer.destination is not None:
            await self._requote()
        await self._persist()

    # ═══════════════════════════════════════════════════════════════════════════
    # Saving
    # ═══════════════════════════════════════════════════════════════════════════

    async def _write(self, state: CheckoutState, status_for_new: OrderStatus) -> Result[OrderRecord, CheckoutError]:
        form = state.form
        fresh = totals(form)
        match state:
            case ExistingOrder(order_id, _, status):
                return await self.backend.update_order(
                    order_id, order_write(self.seller_id, form, status, fresh)
                )
            case Draft(order_id):
                return await self.backend.update_order(
                    order_id, order_write(self.seller_id, form, status_for_new, fresh)
                )
            case FreshCart():
                return await self.backend.insert_order(
                    order_write(self.seller_id, form, status_for_new, fresh)
                )

    async def save_draft(self, *, exit_edit: bool = False) -> Result[OrderRecord, CheckoutError]:
        """
        Save without placing the order. Only the phone is required.

        FreshCart inserts a draft and becomes that Draft; Draft and
        ExistingOrder update in place. exit_edit ends the session.
        """
        self.phase = Phase.VALIDATING
        match validate_draft(self.form):
            case Error(err):
                self.phase = Phase.READY
                return Error(err)
            case Ok(_):
                pass

        self.phase = Phase.SAVING_DRAFT
        previous = self.state
        match await self._write(previous, OrderStatus.DRAFT):
            case Error(err):
                self.phase = Phase.READY
                return Error(err)
            case Ok(order):
                pass
        logger.info("[%s] Saved draft %s", self.seller_id, order.order_number)

        if exit_edit:
            for err in await self._finish(clear_cart=not isinstance(previous, ExistingOrder)):
                self._warn(err)
        elif isinstance(previous, FreshCart):
            self.state = Draft(order.id, order.order_number, previous.form)
            match await self.overlay.begin(self.seller_id, to_snapshot(self.state)):
                case Error(err):
                    self._warn(_local_state_failure("begin edit", err))
                case Ok(_):
                    pass
            match await self.overlay.clear_cart_form(self.seller_id):
                case Error(err):
                    self._warn(_local_state_failure("cart form", err))
                case Ok(_):
                    pass
        else:
            await self._persist()

        self.phase = Phase.READY
        return Ok(order)

    async def checkout(self) -> Result[CheckoutOutcome, CheckoutError]:
        """
        Place the order.

        ExistingOrder: updated in place, number and status kept.
        Draft: promoted to `new` in place, number kept.
        FreshCart: inserted as `new` with a freshly minted number.
        """
        self.phase = Phase.VALIDATING
        match validate_checkout(self.form):
            case Error(err):
                self.phase = Phase.READY
                return Error(err)
            case Ok(_):
                pass

        warnings: list[CheckoutError] = []
        payment_method: PaymentMethod | None = None
        match await self.backend.get_payment_method(self.form.payment_method_id or ""):
            case Error(err):
                warnings.append(err)
            case Ok(method) if method is not None and method.seller_id == self.seller_id and method.is_active:
                payment_method = method
            case Ok(_):
                self.phase = Phase.READY
                return Error(Errors.invalid("payment_method", "Select a payment method"))

        self.phase = Phase.CHECKING_OUT
        previous = self.state
        match await self._write(previous, OrderStatus.NEW):
            case Error(err):
                self.phase = Phase.READY
                return Error(err)
            case Ok(order):
                pass
        logger.info(
            "[%s] Checked out %s (%s), owed %s",
            self.seller_id, order.order_number, order.status.value, order.data.total_amount,
        )

        seller: SellerProfile | None = None
        match await self.backend.get_seller(self.seller_id):
            case Error(err):
                warnings.append(err)
            case Ok(profile):
                seller = profile
        invoice = assemble_invoice(order, payment_method=payment_method, seller=seller)

        rendered: bytes | str | None = None
        renderer = self.services.renderer
        if renderer is not None:
            match await rendering(lambda: renderer.render(invoice)):
                case Error(err):
                    warnings.append(err)
                case Ok(output):
                    rendered = output

        warnings.extend(await self._finish(clear_cart=not isinstance(previous, ExistingOrder)))
        for warning in warnings:
            logger.warning("[%s] %s", self.seller_id, warning.message)

        self.phase = Phase.COMPLETED
        return Ok(CheckoutOutcome(order, invoice, rendered, tuple(warnings)))

    async def _finish(self, *, clear_cart: bool) -> list[CheckoutError]:
        """End the session: clear cart lines and overlay, back to a fresh cart."""
        problems: list[CheckoutError] = []
        if clear_cart:
            match await self.backend.clear_cart(self.seller_id):
                case Error(err):
                    problems.append(err)
                case Ok(_):
                    pass
            match await self.overlay.clear_cart_form(self.seller_id):
                case Error(err):
                    problems.append(_local_state_failure("cart form", err))
                case Ok(_):
                    pass
        match await self.overlay.clear(self.seller_id):
            case Error(err):
                problems.append(_local_state_failure("edit session", err))
            case Ok(_):
                pass

        self._phone_lookup.cancel()
        self.draft_candidate = None
        self.quotes = NO_QUOTES
        self.carrier_services = ()
        self.state = await self._fresh_cart()
        return problems

    async def cancel(self) -> CheckoutState:
        """Abandon the edit session without saving."""
        match await self.overlay.clear(self.seller_id):
            case Error(err):
                self._warn(_local_state_failure("edit session", err))
            case Ok(_):
                pass
        self._phone_lookup.cancel()
        self.draft_candidate = None
        self.state = await self._fresh_cart()
        await self._refresh_shipping()
        self.phase = Phase.READY
        return self.state


__all__ = (
    "CheckoutServices",
    "CheckoutOutcome",
    "CheckoutOrchestrator",
)
