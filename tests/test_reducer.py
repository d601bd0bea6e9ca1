import unittest
from dataclasses import replace
from decimal import Decimal

from kungfu import Error, Ok

from sellerdesk.backend import OrderStatus
from sellerdesk.checkout import (
    AddLine,
    ApplyQuote,
    CheckoutForm,
    Draft,
    ExistingOrder,
    FreshCart,
    RemoveLine,
    SelectCarrier,
    SelectService,
    SetAddress,
    SetCityDistrict,
    SetDiscount,
    SetLocation,
    SetManualFee,
    SetName,
    SetPartialPayment,
    SetPaymentMethod,
    SetPhone,
    SetQuantity,
    from_snapshot,
    reduce,
    to_snapshot,
    totals,
    validate_checkout,
    validate_draft,
)
from sellerdesk.money import DiscountSpec
from sellerdesk.shipping import Quote

from support import BCA, COBLONG, JNE, JNE_REG, SICEPAT, line


def _apply(state, *events):
    for event in events:
        state = reduce(state, event)
    return state


class TestReducer(unittest.TestCase):
    def test_second_carrier_clears_the_first_carriers_service(self):
        state = _apply(FreshCart(), SelectCarrier(JNE), SelectService(JNE_REG), SelectCarrier(SICEPAT))
        self.assertEqual(state.form.shipping.carrier, SICEPAT)
        self.assertIsNone(state.form.shipping.service)

    def test_totals_follow_every_edit(self):
        quote = Quote("jne", "REG", "JNE Reguler", Decimal(15000))
        state = _apply(
            FreshCart(),
            AddLine(line(quantity=2, price=50000)),
            SetDiscount(DiscountSpec.percentage(10)),
            SelectCarrier(JNE),
            ApplyQuote(quote),
            SetPartialPayment(Decimal(50000)),
        )
        self.assertEqual(totals(state).total, Decimal(105000))
        self.assertEqual(totals(state).payable_now, Decimal(55000))

        state = reduce(state, SetManualFee(Decimal(5000)))
        self.assertEqual(totals(state).total, Decimal(110000))

    def test_lines_merge_and_remove(self):
        state = _apply(FreshCart(), AddLine(line()), AddLine(line(quantity=2)), AddLine(line("p-cup")))
        self.assertEqual([(x.product_id, x.quantity) for x in state.form.lines], [("p-tea", 3), ("p-cup", 1)])

        state = reduce(state, SetQuantity(("p-tea", None), 0))
        self.assertEqual([x.product_id for x in state.form.lines], ["p-cup"])

        state = reduce(state, RemoveLine(("p-cup", None)))
        self.assertEqual(state.form.lines, ())

    def test_typed_city_text_drops_resolved_location(self):
        state = _apply(FreshCart(), SetLocation(COBLONG))
        self.assertEqual(state.form.buyer.city_district_text, "Kota Bandung, Coblong")

        state = reduce(state, SetCityDistrict("Sleman"))
        self.assertIsNone(state.form.buyer.location)
        self.assertIsNone(state.form.buyer.destination)

    def test_negative_discount_clamps_to_zero(self):
        state = reduce(FreshCart(), SetDiscount(DiscountSpec.nominal(-10)))
        self.assertEqual(state.form.discount.value, Decimal(0))

    def test_session_kind_survives_edits(self):
        state = reduce(Draft("o-1", "ORD-20240309-0001"), SetPhone("0812"))
        self.assertIsInstance(state, Draft)
        self.assertEqual(state.order_number, "ORD-20240309-0001")


class TestSnapshots(unittest.TestCase):
    def test_existing_order_roundtrip(self):
        state = _apply(
            ExistingOrder("o-9", "ORD-20240309-0009", OrderStatus.NEW),
            SetPhone("081234567890"),
            SetLocation(COBLONG),
            SelectCarrier(JNE),
            SelectService(JNE_REG),
            AddLine(line(quantity=2)),
        )
        restored = from_snapshot(to_snapshot(state))
        self.assertEqual(restored, state)

    def test_fresh_cart_roundtrip(self):
        state = _apply(FreshCart(), SetPaymentMethod(BCA.id), AddLine(line()))
        self.assertEqual(from_snapshot(to_snapshot(state)), state)


class TestValidation(unittest.TestCase):
    def _complete(self) -> CheckoutForm:
        state = _apply(
            FreshCart(),
            AddLine(line()),
            SetPaymentMethod(BCA.id),
            SelectCarrier(JNE),
            SelectService(JNE_REG),
            SetPhone("081234567890"),
            SetName("Budi"),
            SetAddress("Jl. Dago 1"),
            SetLocation(COBLONG),
        )
        return state.form

    def test_complete_form_passes(self):
        self.assertIsInstance(validate_checkout(self._complete()), Ok)

    def test_missing_service_is_reported(self):
        form = self._complete()
        form = reduce(FreshCart(form), SelectCarrier(JNE)).form

        match validate_checkout(form):
            case Error(err):
                self.assertEqual(err.field, "service")
                self.assertEqual(err.message, "Select courier service")
            case Ok(_):
                self.fail("expected validation error")

    def test_first_missing_field_wins(self):
        form = CheckoutForm(lines=(line(),))
        self.assertEqual(validate_checkout(form).error.field, "payment_method")

    def test_empty_cart_blocks_checkout(self):
        self.assertEqual(validate_checkout(CheckoutForm()).error.field, "lines")

    def test_city_text_alone_is_enough(self):
        form = self._complete()
        form = reduce(FreshCart(form), SetCityDistrict("Bandung, Coblong")).form
        self.assertIsInstance(validate_checkout(form), Ok)

    def test_resolved_location_without_text_is_rejected(self):
        form = self._complete()
        form = replace(form, buyer=replace(form.buyer, city_district_text="  "))

        self.assertIsNotNone(form.buyer.location)
        self.assertEqual(validate_checkout(form).error.field, "city_district")

    def test_draft_only_needs_phone(self):
        self.assertEqual(validate_draft(CheckoutForm()).error.field, "phone")
        self.assertIsInstance(validate_draft(reduce(FreshCart(), SetPhone("0812")).form), Ok)
