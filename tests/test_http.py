import unittest
from decimal import Decimal

from fastapi.testclient import TestClient

from sellerdesk.http import create_app

from support import BCA, SELLER, make_services


TEA = {"product_id": "p-tea", "unit_price": "50000", "name": "Teh Melati"}


class TestCheckoutApi(unittest.TestCase):
    def setUp(self):
        self.services = make_services()
        self.client = self.enterContext(TestClient(create_app(self.services)))
        self.base = f"/sellers/{SELLER}"

    def edit(self, field, **body):
        return self.client.post(f"{self.base}/checkout/events", json={"field": field, **body})

    def fill(self):
        self.edit("add_line", line=TEA)
        self.edit("phone", value="081234567890")
        self.edit("name", value="Budi")
        self.edit("address", value="Jl. Dago 1")
        self.edit("city_district", value="Kota Bandung, Kec. Coblong")
        return self.edit("payment_method", value=BCA.id)

    def test_load_lists_enabled_carriers(self):
        response = self.client.post(f"{self.base}/checkout/load")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["phase"], "ready")
        self.assertEqual([c["code"] for c in body["carriers"]], ["jne", "sicepat"])
        self.assertEqual(body["form"]["mode"], "fresh")

    def test_filled_form_is_quoted(self):
        body = self.fill().json()

        self.assertEqual(body["form"]["carrier"]["code"], "jne")
        self.assertEqual(body["form"]["service"]["code"], "REG")
        self.assertEqual(Decimal(body["totals"]["total"]), Decimal(59000))
        self.assertEqual(body["form"]["location"]["district_id"], "3273010")

    def test_submit_places_order_and_renders_invoice(self):
        self.fill()

        response = self.client.post(f"{self.base}/checkout/submit")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertRegex(body["order"]["order_number"], r"^ORD-\d{8}-\d{4}$")
        self.assertEqual(body["order"]["status"], "new")
        self.assertIn("INVOICE " + body["order"]["order_number"], body["invoice_text"])
        self.assertEqual(body["checkout"]["phase"], "completed")
        self.assertEqual(body["checkout"]["form"]["lines"], [])

        fetched = self.client.get(f"{self.base}/orders/{body['order']['id']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(Decimal(fetched.json()["total_amount"]), Decimal(59000))

    def test_incomplete_submit_names_the_field(self):
        response = self.client.post(f"{self.base}/checkout/submit")

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["field"], "lines")
        self.assertEqual(response.json()["detail"]["kind"], "validation")

    def test_unknown_carrier_is_rejected(self):
        response = self.edit("carrier", value="c-nope")
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["field"], "carrier")

    def test_draft_needs_phone(self):
        response = self.client.post(f"{self.base}/checkout/draft", json={})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["field"], "phone")

    def test_draft_save_switches_to_draft_mode(self):
        self.fill()
        body = self.client.post(f"{self.base}/checkout/draft", json={}).json()

        self.assertEqual(body["form"]["mode"], "draft")
        self.assertRegex(body["form"]["order_number"], r"^ORD-")

    def test_cart_line_without_session_goes_to_cart(self):
        response = self.client.post(f"{self.base}/cart/lines", json={**TEA, "quantity": 2})

        self.assertEqual(response.json(), {"added_to": "cart"})
        body = self.client.post(f"{self.base}/checkout/load").json()
        self.assertEqual([(x["product_id"], x["quantity"]) for x in body["form"]["lines"]], [("p-tea", 2)])

    def test_cart_line_rejects_zero_quantity(self):
        response = self.client.post(f"{self.base}/cart/lines", json={**TEA, "quantity": 0})
        self.assertEqual(response.status_code, 422)

    def test_edit_placed_order_then_add_product(self):
        self.fill()
        order = self.client.post(f"{self.base}/checkout/submit").json()["order"]

        body = self.client.post(f"{self.base}/orders/{order['id']}/edit").json()
        self.assertEqual(body["form"]["mode"], "existing")
        self.assertEqual(body["form"]["order_number"], order["order_number"])

        added = self.client.post(
            f"{self.base}/cart/lines",
            json={"product_id": "p-cup", "unit_price": "20000", "name": "Gelas"},
        )
        self.assertEqual(added.json(), {"added_to": "session"})

        body = self.client.post(f"{self.base}/checkout/load").json()
        self.assertEqual([x["product_id"] for x in body["form"]["lines"]], ["p-tea", "p-cup"])

    def test_other_sellers_order_is_not_found(self):
        self.fill()
        order = self.client.post(f"{self.base}/checkout/submit").json()["order"]

        response = self.client.get(f"/sellers/seller-2/orders/{order['id']}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["kind"], "lookup_miss")
