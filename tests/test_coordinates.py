import unittest
from unittest import mock

import requests

from coordinator.models import Coordinates
from coordinator.utils.coordinates import (
    extract_coordinates,
    is_short_link,
    parse_coordinates,
    resolve_short_link,
)


class TestParseCoordinates(unittest.TestCase):
    def test_place_url_with_at_sign(self):
        link = "https://www.google.com/maps/place/Reitoria/@38.7526,-9.1584,17z/data=!3m1"
        self.assertEqual(parse_coordinates(link), Coordinates(38.7526, -9.1584))

    def test_google_maps_query(self):
        link = "https://www.google.com/maps?q=41.1496,-8.6109"
        self.assertEqual(parse_coordinates(link), Coordinates(41.1496, -8.6109))

    def test_maps_google_com_query(self):
        link = "https://maps.google.com/?q=-33.8688,151.2093"
        self.assertEqual(parse_coordinates(link), Coordinates(-33.8688, 151.2093))

    def test_query_param_not_first(self):
        link = "https://maps.google.com/?hl=pt&q=40.2033,-8.4103"
        self.assertEqual(parse_coordinates(link), Coordinates(40.2033, -8.4103))

    def test_ll_parameter(self):
        link = "https://maps.google.com/?ll=37.0194,-7.9304&z=14"
        self.assertEqual(parse_coordinates(link), Coordinates(37.0194, -7.9304))

    def test_plain_coordinates_in_path(self):
        link = "https://www.google.com/maps/search/38.7169,-9.1399"
        self.assertEqual(parse_coordinates(link), Coordinates(38.7169, -9.1399))

    def test_at_sign_takes_priority_over_query(self):
        link = "https://www.google.com/maps/place/X/@10.5,20.5,15z?q=1.5,2.5"
        self.assertEqual(parse_coordinates(link), Coordinates(10.5, 20.5))

    def test_unrecognized_link_returns_none(self):
        self.assertIsNone(parse_coordinates("https://www.google.com/maps/place/Some+Street"))
        self.assertIsNone(parse_coordinates("https://maps.app.goo.gl/AbCdEf123"))

    def test_empty_link_returns_none(self):
        self.assertIsNone(parse_coordinates(""))
        self.assertIsNone(parse_coordinates(None))

    def test_path_pattern_requires_decimals(self):
        self.assertIsNone(parse_coordinates("https://example.com/12,34"))


class TestShortLinks(unittest.TestCase):
    def test_is_short_link(self):
        self.assertTrue(is_short_link("https://goo.gl/maps/abc123"))
        self.assertTrue(is_short_link("https://maps.app.goo.gl/XyZ987"))
        self.assertFalse(is_short_link("https://goo.gl/other"))
        self.assertFalse(is_short_link("https://www.google.com/maps?q=1.0,2.0"))
        self.assertFalse(is_short_link(""))

    @mock.patch("coordinator.utils.coordinates.requests.get")
    def test_short_link_is_resolved_and_parsed(self, mock_get):
        mock_get.return_value.__enter__.return_value.url = (
            "https://www.google.com/maps/place/Campus/@38.7369,-9.1388,17z"
        )

        coords = extract_coordinates("https://maps.app.goo.gl/AbCdEf123")

        self.assertEqual(coords, Coordinates(38.7369, -9.1388))
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "https://maps.app.goo.gl/AbCdEf123")
        self.assertTrue(kwargs["allow_redirects"])

    @mock.patch("coordinator.utils.coordinates.requests.get")
    def test_consent_page_redirect_is_decoded(self, mock_get):
        mock_get.return_value.__enter__.return_value.url = (
            "https://consent.google.com/m?continue=https://www.google.com/maps/place/X/%4038.7,-9.1,17z"
        )

        self.assertEqual(extract_coordinates("https://goo.gl/maps/abc"), Coordinates(38.7, -9.1))

    @mock.patch("coordinator.utils.coordinates.requests.get")
    def test_resolution_failure_returns_none(self, mock_get):
        mock_get.side_effect = requests.Timeout()
        self.assertIsNone(resolve_short_link("https://goo.gl/maps/abc"))
        self.assertIsNone(extract_coordinates("https://goo.gl/maps/abc"))

        mock_get.side_effect = requests.ConnectionError("offline")
        self.assertIsNone(extract_coordinates("https://goo.gl/maps/abc"))

    @mock.patch("coordinator.utils.coordinates.requests.get")
    def test_no_network_for_regular_links(self, mock_get):
        self.assertIsNone(extract_coordinates("https://www.google.com/maps/place/Some+Street"))
        self.assertEqual(extract_coordinates("https://www.google.com/maps?q=1.5,2.5"), Coordinates(1.5, 2.5))
        mock_get.assert_not_called()

    @mock.patch("coordinator.utils.coordinates.requests.get")
    def test_resolution_can_be_disabled(self, mock_get):
        self.assertIsNone(extract_coordinates("https://goo.gl/maps/abc", resolve_short_links=False))
        mock_get.assert_not_called()


if __name__ == "__main__":
    unittest.main()
