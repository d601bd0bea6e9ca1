import re
import unittest
from decimal import Decimal

from kungfu import Error, Ok

from sellerdesk._errors import ErrorKind
from sellerdesk.backend import BuyerSnapshot, OrderStatus, OrderWrite, PaymentMethod
from sellerdesk.checkout import (
    AddLine,
    Draft,
    ExistingOrder,
    FreshCart,
    Phase,
    SelectCarrier,
    SelectService,
    SetManualFee,
    SetName,
    SetNotes,
    SetPartialPayment,
    SetPaymentMethod,
    SetPhone,
    SetQuantity,
    add_product_to_cart,
)
from sellerdesk.overlay import FormSnapshot
from sellerdesk.shipping import FlatRateLookup

from support import (
    COBLONG,
    JNE,
    JNE_REG,
    JNE_YES,
    SELLER,
    SICEPAT,
    SICEPAT_BEST,
    TARIFFS,
    fill,
    line,
    make_services,
    ready_orchestrator,
    seeded_backend,
)


ORDER_NUMBER = re.compile(r"^ORD-\d{8}-\d{4}$")


class _BrokenRates:
    async def quote(self, origin, destination, weight_grams, carrier_codes):
        raise ConnectionError("rate api down")


class _BrokenRenderer:
    async def render(self, invoice):
        raise RuntimeError("no fonts")


class _Scraper:
    def __init__(self, phone):
        self.phone = phone

    async def detect(self):
        return self.phone


class TestLoad(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.services = make_services(self.backend)

    async def test_fresh_cart_combines_cart_lines_and_saved_fields(self):
        await self.backend.add_cart_line(SELLER, line(quantity=2))
        await self.services.overlay.write_cart_form(SELLER, FormSnapshot(name="Budi", notes="fragile"))

        orchestrator = await ready_orchestrator(self.services)

        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertEqual(orchestrator.form.lines, (line(quantity=2),))
        self.assertEqual(orchestrator.form.buyer.name, "Budi")
        self.assertEqual(orchestrator.form.notes, "fragile")
        self.assertEqual(orchestrator.phase, Phase.READY)
        self.assertEqual(orchestrator.carriers, (JNE, SICEPAT))

    async def test_pending_edit_wins_over_session_and_is_consumed(self):
        first = await ready_orchestrator(self.services)
        await fill(first)
        placed = (await first.checkout()).unwrap().order
        await first.dispatch(SetPhone("0899 1111 2222"))
        (await first.save_draft()).unwrap()
        await self.services.overlay.put_pending_edit(SELLER, placed.id)

        second = await ready_orchestrator(self.services)

        self.assertIsInstance(second.state, ExistingOrder)
        self.assertEqual(second.state.order_id, placed.id)
        self.assertIsNone((await self.services.overlay.take_pending_edit(SELLER)).unwrap())

    async def test_interrupted_draft_session_resumes(self):
        first = await ready_orchestrator(self.services)
        await fill(first)
        draft = (await first.save_draft()).unwrap()
        await first.dispatch(SetNotes("call before delivery"))

        second = await ready_orchestrator(self.services)

        self.assertIsInstance(second.state, Draft)
        self.assertEqual(second.state.order_number, draft.order_number)
        self.assertEqual(second.form.notes, "call before delivery")

    async def test_pending_edit_of_shipped_order_falls_back(self):
        shipped = (await self.backend.insert_order(OrderWrite(
            seller_id=SELLER,
            status=OrderStatus.SHIPPED,
            buyer=BuyerSnapshot(phone="6281234567890"),
        ))).unwrap()
        await self.services.overlay.put_pending_edit(SELLER, shipped.id)

        orchestrator = await ready_orchestrator(self.services)

        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertTrue(any(w.kind is ErrorKind.VALIDATION for w in orchestrator.take_warnings()))


class TestShippingFlow(unittest.IsolatedAsyncioTestCase):
    async def test_resolved_destination_selects_cheapest_carrier_and_service(self):
        orchestrator = await ready_orchestrator(make_services())
        await fill(orchestrator)

        shipping = orchestrator.form.shipping
        self.assertEqual(orchestrator.form.buyer.location, COBLONG)
        self.assertEqual(shipping.carrier, JNE)
        self.assertEqual(shipping.service, JNE_REG)
        self.assertEqual(shipping.quoted_cost, Decimal(9000))
        self.assertEqual(orchestrator.totals.total, Decimal(59000))

    async def test_more_items_requote_heavier(self):
        orchestrator = await ready_orchestrator(make_services())
        await fill(orchestrator)
        await orchestrator.dispatch(SetQuantity(("p-tea", None), 3))

        self.assertEqual(orchestrator.form.shipping.quoted_cost, Decimal(18000))
        self.assertEqual(orchestrator.totals.total, Decimal(168000))

    async def test_unreachable_district_leaves_service_unselected(self):
        rates = FlatRateLookup(default=TARIFFS, unreachable={COBLONG.district_id})
        orchestrator = await ready_orchestrator(make_services(rates=rates))
        await orchestrator.dispatch(SelectCarrier(JNE))
        await fill(orchestrator)

        self.assertTrue(orchestrator.quotes.empty)
        self.assertIsNone(orchestrator.form.shipping.service)
        match await orchestrator.checkout():
            case Error(err):
                self.assertEqual(err.field, "service")
                self.assertEqual(err.message, "Select courier service")
            case Ok(_):
                self.fail("checkout must block without a service")
        self.assertEqual(orchestrator.phase, Phase.READY)

    async def test_changing_carrier_leaves_service_unset(self):
        orchestrator = await ready_orchestrator(make_services())
        await fill(orchestrator)
        await orchestrator.dispatch(SelectCarrier(JNE))
        await orchestrator.dispatch(SelectService(JNE_YES))
        self.assertEqual(orchestrator.form.shipping.quoted_cost, Decimal(18000))

        await orchestrator.dispatch(SelectCarrier(SICEPAT))

        shipping = orchestrator.form.shipping
        self.assertEqual(shipping.carrier, SICEPAT)
        self.assertIsNone(shipping.service)
        self.assertEqual(shipping.quoted_cost, Decimal(0))
        self.assertEqual(orchestrator.quotes.selected.service_code, "BEST")
        self.assertEqual(orchestrator.carrier_services, (SICEPAT_BEST,))

        await orchestrator.dispatch(SelectService(SICEPAT_BEST))
        self.assertEqual(orchestrator.form.shipping.quoted_cost, Decimal(12000))
        self.assertEqual(orchestrator.totals.total, Decimal(62000))

    async def test_disabling_selected_carrier_moves_to_next_cheapest(self):
        orchestrator = await ready_orchestrator(make_services())
        await fill(orchestrator)

        (await orchestrator.set_courier_preference(JNE.id, False)).unwrap()

        self.assertEqual(orchestrator.carriers, (SICEPAT,))
        self.assertEqual(orchestrator.form.shipping.carrier, SICEPAT)
        self.assertEqual(orchestrator.form.shipping.service, SICEPAT_BEST)

    async def test_disabling_selected_service_clears_it(self):
        orchestrator = await ready_orchestrator(make_services())
        await fill(orchestrator)

        (await orchestrator.set_service_preference(JNE_REG.id, False)).unwrap()

        self.assertEqual(orchestrator.carrier_services, (JNE_YES,))
        self.assertEqual(orchestrator.form.shipping.carrier, JNE)
        self.assertIsNone(orchestrator.form.shipping.service)
        self.assertEqual(orchestrator.form.shipping.quoted_cost, Decimal(0))

        await orchestrator.dispatch(SelectService(JNE_YES))
        self.assertEqual(orchestrator.form.shipping.quoted_cost, Decimal(18000))

    async def test_rate_api_down_degrades_to_manual_fee(self):
        orchestrator = await ready_orchestrator(make_services(rates=_BrokenRates()))
        await fill(orchestrator)

        kinds = {w.kind for w in orchestrator.take_warnings()}
        self.assertIn(ErrorKind.COLLABORATOR_UNAVAILABLE, kinds)
        self.assertIsNone(orchestrator.form.shipping.carrier)

        await orchestrator.dispatch(SelectCarrier(JNE))
        await orchestrator.dispatch(SelectService(JNE_REG))
        await orchestrator.dispatch(SetManualFee(Decimal(15000)))

        outcome = (await orchestrator.checkout()).unwrap()
        self.assertEqual(outcome.order.data.shipping_fee, Decimal(15000))
        self.assertEqual(outcome.order.data.total_amount, Decimal(65000))


class TestCheckout(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.services = make_services(self.backend)

    async def test_fresh_checkout_writes_new_order_and_clears_cart(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)

        outcome = (await orchestrator.checkout()).unwrap()

        order = outcome.order
        self.assertEqual(order.status, OrderStatus.NEW)
        self.assertRegex(order.order_number, ORDER_NUMBER)
        self.assertEqual(order.data.buyer.phone, "6281234567890")
        self.assertEqual(order.data.total_amount, Decimal(59000))
        self.assertEqual(order.data.shipping.service_code, "REG")
        self.assertEqual(outcome.warnings, ())
        self.assertIn(b"INVOICE " + order.order_number.encode(), outcome.rendered)
        self.assertEqual(outcome.invoice.customer_phone, "+62 812-3456-7890")

        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), ())
        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertEqual(orchestrator.form.lines, ())
        self.assertEqual(orchestrator.phase, Phase.COMPLETED)

    async def test_partial_payment_is_netted_into_amount_owed(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)

        await orchestrator.dispatch(SetPartialPayment(Decimal(20000)))
        order = (await orchestrator.checkout()).unwrap().order

        self.assertEqual(order.data.total_amount, Decimal(39000))
        self.assertEqual(order.data.partial_payment.amount, Decimal(20000))
        self.assertEqual(order.data.partial_payment.remaining, Decimal(39000))

    async def test_each_fresh_checkout_mints_a_new_number(self):
        numbers = set()
        for phone in ("081111111111", "082222222222"):
            orchestrator = await ready_orchestrator(self.services)
            await fill(orchestrator, phone)
            numbers.add((await orchestrator.checkout()).unwrap().order.order_number)
        self.assertEqual(len(numbers), 2)

    async def test_draft_keeps_its_number_through_checkout(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)

        draft = (await orchestrator.save_draft()).unwrap()
        self.assertEqual(draft.status, OrderStatus.DRAFT)
        self.assertIsInstance(orchestrator.state, Draft)

        await orchestrator.dispatch(SetNotes("gift wrap"))
        again = (await orchestrator.save_draft()).unwrap()
        self.assertEqual((again.id, again.order_number), (draft.id, draft.order_number))

        order = (await orchestrator.checkout()).unwrap().order
        self.assertEqual((order.id, order.order_number), (draft.id, draft.order_number))
        self.assertEqual(order.status, OrderStatus.NEW)
        self.assertEqual(order.data.notes, "gift wrap")
        self.assertEqual(len((await self.backend.find_orders(SELLER)).unwrap()), 1)
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), ())

    async def test_existing_order_edit_keeps_number_status_and_cart(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)
        placed = (await orchestrator.checkout()).unwrap().order
        await self.backend.add_cart_line(SELLER, line("p-cup", name="Gelas"))

        (await orchestrator.open_order(placed.id)).unwrap()
        self.assertIsInstance(orchestrator.state, ExistingOrder)
        await orchestrator.dispatch(SetName("Budi Santoso"))
        await orchestrator.dispatch(AddLine(line()))

        order = (await orchestrator.checkout()).unwrap().order

        self.assertEqual((order.id, order.order_number), (placed.id, placed.order_number))
        self.assertEqual(order.status, OrderStatus.NEW)
        self.assertEqual(order.data.buyer.name, "Budi Santoso")
        self.assertEqual(order.data.total_amount, Decimal(109000))
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), (line("p-cup", name="Gelas"),))
        self.assertEqual(orchestrator.form.lines, (line("p-cup", name="Gelas"),))

    async def test_render_failure_is_a_warning(self):
        services = make_services(self.backend, renderer=_BrokenRenderer())
        orchestrator = await ready_orchestrator(services)
        await fill(orchestrator)

        outcome = (await orchestrator.checkout()).unwrap()

        self.assertIsNone(outcome.rendered)
        self.assertEqual([w.kind for w in outcome.warnings], [ErrorKind.RENDER_FAILURE])
        self.assertIsNotNone((await self.backend.get_order(outcome.order.id)).unwrap())

    async def test_write_failure_blocks_and_keeps_the_form(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)
        self.backend.fail_writes = True

        result = await orchestrator.checkout()

        self.assertIsInstance(result, Error)
        self.assertIs(result.error.kind, ErrorKind.WRITE_FAILURE)
        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertEqual(orchestrator.form.buyer.name, "Budi")
        self.assertEqual(orchestrator.phase, Phase.READY)
        self.assertEqual((await self.backend.find_orders(SELLER)).unwrap(), ())

    async def test_failed_cart_write_rolls_back_the_line(self):
        orchestrator = await ready_orchestrator(self.services)
        self.backend.fail_writes = True

        result = await orchestrator.dispatch(AddLine(line()))

        self.assertIsInstance(result, Error)
        self.assertEqual(orchestrator.form.lines, ())

    async def test_unknown_payment_method_blocks(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)
        await orchestrator.dispatch(SetPaymentMethod("pm-gone"))

        self.assertEqual((await orchestrator.checkout()).error.field, "payment_method")

    async def test_foreign_or_inactive_payment_method_blocks(self):
        self.backend.add_payment_method(PaymentMethod("pm-other", "seller-2", "BNI", "555", "Toko Lain"))
        self.backend.add_payment_method(
            PaymentMethod("pm-closed", SELLER, "BRI", "777", "Toko Sinar", is_active=False)
        )
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)

        for method_id in ("pm-other", "pm-closed"):
            with self.subTest(method_id=method_id):
                await orchestrator.dispatch(SetPaymentMethod(method_id))
                result = await orchestrator.checkout()

                self.assertIsInstance(result, Error)
                self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
                self.assertEqual(result.error.field, "payment_method")
                self.assertEqual(orchestrator.phase, Phase.READY)
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), (line(),))


class TestDrafts(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.services = make_services(self.backend)

    async def _saved_draft(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator, "+62 812-3456-7890")
        draft = (await orchestrator.save_draft(exit_edit=True)).unwrap()
        return draft, orchestrator

    async def test_draft_needs_a_phone(self):
        orchestrator = await ready_orchestrator(self.services)
        result = await orchestrator.save_draft()
        self.assertEqual(result.error.field, "phone")

    async def test_exit_after_saving_returns_to_empty_cart(self):
        draft, orchestrator = await self._saved_draft()

        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertEqual(orchestrator.form.lines, ())
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), ())
        self.assertIsNone((await self.services.overlay.read(SELLER)).unwrap())
        self.assertEqual((await self.backend.get_order(draft.id)).unwrap().status, OrderStatus.DRAFT)

    async def test_typing_a_known_phone_offers_the_draft(self):
        draft, _ = await self._saved_draft()

        orchestrator = await ready_orchestrator(self.services)
        await orchestrator.dispatch(SetPhone("0812-3456-7890"))
        self.assertEqual(await orchestrator.settle_phone(), draft.id)

        (await orchestrator.resume_draft(draft.id)).unwrap()
        self.assertIsInstance(orchestrator.state, Draft)
        self.assertEqual(orchestrator.state.order_number, draft.order_number)
        self.assertEqual(orchestrator.form.buyer.name, "Budi")

    async def test_detected_phone_offers_the_draft(self):
        draft, _ = await self._saved_draft()
        services = make_services(self.backend, phone_source=_Scraper("wa.me/6281234567890"))

        orchestrator = await ready_orchestrator(services)
        self.assertEqual((await orchestrator.detect_phone()).unwrap(), "6281234567890")
        self.assertEqual(orchestrator.draft_candidate, draft.id)

    async def test_no_scraper_is_a_warning_not_a_failure(self):
        orchestrator = await ready_orchestrator(self.services)
        result = await orchestrator.detect_phone()
        self.assertIs(result.error.kind, ErrorKind.COLLABORATOR_UNAVAILABLE)
        self.assertEqual(orchestrator.form.buyer.phone, "")

    async def test_placed_order_cannot_be_resumed_as_draft(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)
        placed = (await orchestrator.checkout()).unwrap().order

        result = await orchestrator.resume_draft(placed.id)
        self.assertIs(result.error.kind, ErrorKind.VALIDATION)

    async def test_cancel_abandons_the_session(self):
        draft, orchestrator = await self._saved_draft()
        (await orchestrator.open_order(draft.id)).unwrap()
        await orchestrator.dispatch(SetNotes("never saved"))

        await orchestrator.cancel()

        self.assertIsInstance(orchestrator.state, FreshCart)
        self.assertIsNone((await self.services.overlay.read(SELLER)).unwrap())
        self.assertIsNone((await self.backend.get_order(draft.id)).unwrap().data.notes)


class TestCartAddition(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.services = make_services(self.backend)

    async def test_without_session_the_line_goes_to_the_cart(self):
        added = await add_product_to_cart(
            SELLER, line(), backend=self.backend, overlay=self.services.overlay
        )
        self.assertEqual(added.unwrap(), "cart")
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), (line(),))

    async def test_during_an_edit_the_line_joins_the_order(self):
        orchestrator = await ready_orchestrator(self.services)
        await fill(orchestrator)
        placed = (await orchestrator.checkout()).unwrap().order
        (await orchestrator.open_order(placed.id)).unwrap()

        added = await add_product_to_cart(
            SELLER, line(), backend=self.backend, overlay=self.services.overlay
        )
        self.assertEqual(added.unwrap(), "session")
        await add_product_to_cart(
            SELLER, line("p-cup", name="Gelas"), backend=self.backend, overlay=self.services.overlay
        )

        await orchestrator.load()
        self.assertEqual(
            [(x.product_id, x.quantity) for x in orchestrator.form.lines],
            [("p-tea", 2), ("p-cup", 1)],
        )
        self.assertEqual((await self.backend.list_cart(SELLER)).unwrap(), ())

        await orchestrator.dispatch(SetNotes("wrap separately"))
        resumed = await ready_orchestrator(self.services)
        self.assertEqual([x.product_id for x in resumed.form.lines], ["p-tea", "p-cup"])
