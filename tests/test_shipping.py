import asyncio
import unittest
from decimal import Decimal

from kungfu import Error

from sellerdesk._config import CheckoutPolicy
from sellerdesk._errors import ErrorKind
from sellerdesk.shipping import (
    FlatRateLookup,
    Preference,
    Quote,
    ShippingResolver,
    ShippingSelection,
    cheapest,
    effective,
    match_service,
    shipment_weight,
)

from support import JNE, JNE_REG, JNE_YES, SELLER, SICEPAT, SICEPAT_BEST, TARIFFS, seeded_backend


class TestSelection(unittest.TestCase):
    def test_switching_carrier_drops_the_service(self):
        selection = ShippingSelection().with_carrier(JNE).with_service(JNE_REG)
        self.assertEqual(selection.service, JNE_REG)

        selection = selection.with_carrier(SICEPAT)
        self.assertIsNone(selection.service)
        self.assertEqual(selection.quoted_cost, Decimal(0))

    def test_service_needs_a_carrier(self):
        self.assertIsNone(ShippingSelection().with_service(JNE_REG).service)

    def test_service_of_another_carrier_is_ignored(self):
        selection = ShippingSelection().with_carrier(SICEPAT).with_service(JNE_REG)
        self.assertIsNone(selection.service)

    def test_fee_is_quote_plus_manual(self):
        quote = Quote("jne", "REG", "JNE Reguler", Decimal(9000))
        selection = ShippingSelection().with_carrier(JNE).with_quote(quote).with_manual_fee(Decimal(2000))
        self.assertEqual(selection.fee, Decimal(11000))
        self.assertEqual(selection.with_manual_fee(Decimal(-1)).manual_fee, Decimal(0))


class TestPureRules(unittest.TestCase):
    def test_unset_preference_counts_as_enabled(self):
        self.assertTrue(effective(Preference.of(None)))
        self.assertTrue(effective(Preference.of(True)))
        self.assertFalse(effective(Preference.of(False)))

    def test_weight_has_a_floor(self):
        self.assertEqual(shipment_weight(0), 1000)
        self.assertEqual(shipment_weight(1), 1000)
        self.assertEqual(shipment_weight(5), 2500)
        policy = CheckoutPolicy().with_weights(min_grams=200, grams_per_item=250)
        self.assertEqual(shipment_weight(1, policy), 250)

    def test_cheapest_tie_goes_to_first(self):
        a = Quote("jne", "REG", "A", Decimal(9000))
        b = Quote("pos", "KILAT", "B", Decimal(9000))
        c = Quote("tiki", "ECO", "C", Decimal(12000))
        self.assertIs(cheapest([c, a, b]), a)
        self.assertIsNone(cheapest([]))

    def test_service_match_ignores_case(self):
        quote = Quote("jne", "reg", "JNE Reguler", Decimal(9000))
        self.assertEqual(match_service([JNE_YES, JNE_REG], quote), JNE_REG)


class _BrokenRates:
    async def quote(self, origin, destination, weight_grams, carrier_codes):
        raise ConnectionError("rate api down")


class _SlowRates:
    async def quote(self, origin, destination, weight_grams, carrier_codes):
        await asyncio.sleep(1)
        return []


class TestResolver(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.rates = FlatRateLookup(default=TARIFFS, unreachable={"9471040"})
        self.resolver = ShippingResolver(self.backend, self.rates, CheckoutPolicy().with_origin("3171010"))

    async def test_carriers_without_a_record_are_enabled(self):
        carriers = (await self.resolver.enabled_carriers(SELLER)).unwrap()
        self.assertEqual(carriers, (JNE, SICEPAT))

    async def test_disabled_carrier_is_hidden(self):
        await self.backend.set_courier_preference(SELLER, SICEPAT.id, False)
        carriers = (await self.resolver.enabled_carriers(SELLER)).unwrap()
        self.assertEqual(carriers, (JNE,))

    async def test_disabled_service_is_hidden(self):
        await self.backend.set_service_preference(SELLER, JNE_YES.id, False)
        services = (await self.resolver.services_for(SELLER, JNE)).unwrap()
        self.assertEqual(services, (JNE_REG,))

    async def test_quote_over_enabled_carriers_picks_cheapest(self):
        quotes = (await self.resolver.quote(SELLER, "3273010", 3)).unwrap()
        self.assertEqual(len(quotes.quotes), 3)
        self.assertEqual(quotes.selected.service_code, "REG")
        self.assertEqual(quotes.selected.cost, Decimal(18000))  # 1500g → 2kg
        self.assertEqual(self.rates.calls[-1], ("3171010", "3273010", 1500, ("jne", "sicepat")))

    async def test_quote_restricted_to_chosen_carrier(self):
        quotes = (await self.resolver.quote(SELLER, "3273010", 1, SICEPAT)).unwrap()
        self.assertEqual([q.courier_code for q in quotes.quotes], ["sicepat"])
        self.assertEqual(quotes.selected.service_code, "BEST")

    async def test_unreachable_destination_has_no_selection(self):
        quotes = (await self.resolver.quote(SELLER, "9471040", 1)).unwrap()
        self.assertTrue(quotes.empty)
        self.assertIsNone(quotes.selected)

    async def test_every_carrier_disabled_skips_the_lookup(self):
        await self.backend.set_courier_preference(SELLER, JNE.id, False)
        await self.backend.set_courier_preference(SELLER, SICEPAT.id, False)
        quotes = (await self.resolver.quote(SELLER, "3273010", 1)).unwrap()
        self.assertTrue(quotes.empty)
        self.assertEqual(self.rates.calls, [])

    async def test_rate_api_failure_is_unavailable(self):
        resolver = ShippingResolver(self.backend, _BrokenRates())
        result = await resolver.quote(SELLER, "3273010", 1)
        self.assertIsInstance(result, Error)
        self.assertIs(result.error.kind, ErrorKind.COLLABORATOR_UNAVAILABLE)

    async def test_rate_api_timeout_is_unavailable(self):
        policy = CheckoutPolicy().with_rate_timeout(seconds=0.02)
        resolver = ShippingResolver(self.backend, _SlowRates(), policy)
        result = await resolver.quote(SELLER, "3273010", 1)
        self.assertIsInstance(result, Error)
        self.assertIs(result.error.kind, ErrorKind.COLLABORATOR_UNAVAILABLE)
