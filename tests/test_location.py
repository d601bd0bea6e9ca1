import unittest

from kungfu import Ok

from sellerdesk._errors import ErrorKind
from sellerdesk.location import ParsedLocation, RegionLocationResolver, parse_city_district, resolve_location

from support import COBLONG, DEPOK, seeded_backend


class TestParse(unittest.TestCase):
    def test_prefixes_are_stripped(self):
        self.assertEqual(
            parse_city_district("Kota Bandung, Kec. Coblong"),
            ParsedLocation("Bandung", "Coblong"),
        )
        self.assertEqual(
            parse_city_district("Kabupaten Sleman, Kecamatan Depok"),
            ParsedLocation("Sleman", "Depok"),
        )

    def test_plain_names(self):
        self.assertEqual(parse_city_district(" Bandung , Coblong "), ParsedLocation("Bandung", "Coblong"))

    def test_city_only(self):
        self.assertEqual(parse_city_district("Kabupaten Sleman"), ParsedLocation("Sleman", ""))

    def test_blank(self):
        self.assertTrue(parse_city_district("  ").empty)


class _BrokenResolver:
    async def resolve_text(self, text):
        raise TimeoutError("region service down")

    async def resolve_district(self, district_id):
        raise TimeoutError("region service down")


class TestResolve(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.resolver = RegionLocationResolver(seeded_backend())

    async def test_text_resolves_to_district(self):
        resolution = await resolve_location(self.resolver, "Kota Bandung, Kec. Coblong")
        self.assertEqual(resolution.location, COBLONG)
        self.assertIsNone(resolution.error)

    async def test_city_disambiguates_district(self):
        resolution = await resolve_location(self.resolver, "Sleman, Depok")
        self.assertEqual(resolution.location, DEPOK)

    async def test_unknown_place_keeps_parsed_text(self):
        resolution = await resolve_location(self.resolver, "Atlantis, Kec. Laut")
        self.assertIsNone(resolution.location)
        self.assertEqual(resolution.parsed.district_name, "Laut")

    async def test_no_resolver_falls_back_to_text(self):
        resolution = await resolve_location(None, "Bandung, Coblong")
        self.assertIsNone(resolution.location)
        self.assertEqual(resolution.parsed, ParsedLocation("Bandung", "Coblong"))

    async def test_failing_resolver_degrades_with_error(self):
        resolution = await resolve_location(_BrokenResolver(), "Bandung, Coblong")
        self.assertIsNone(resolution.location)
        self.assertIs(resolution.error.kind, ErrorKind.COLLABORATOR_UNAVAILABLE)

    async def test_district_by_id(self):
        self.assertEqual(await self.resolver.resolve_district(COBLONG.district_id), Ok(COBLONG))
