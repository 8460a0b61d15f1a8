"""Tests for the Firecrawl-backed fetcher."""

import unittest
from unittest import mock

from listing_scraper.fetchers import CallableFetcher, FirecrawlFetcher
from listing_scraper.models import FetchOptions, FetchResponse


def _make_response(status_code=200, body=None, json_error=None):
    response = mock.Mock()
    response.status_code = status_code
    response.text = "<html>gateway</html>"
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


SUCCESS_BODY = {
    "success": True,
    "data": {
        "markdown": "# Test Product\n\nPrice: $29.99",
        "html": "<h1>Test Product</h1>",
        "metadata": {
            "ogTitle": "Test Product",
            "description": "A product",
            "language": "en",
            "ogImage": "https://cdn.example/og.jpg",
        },
    },
}


class TestFirecrawlFetcher(unittest.TestCase):
    """Verify request payloads and response mapping."""

    def setUp(self):
        self.session = mock.Mock()
        self.fetcher = FirecrawlFetcher(api_key="fc-test", session=self.session)

    def test_requires_api_key(self):
        with self.assertRaises(ValueError):
            FirecrawlFetcher(api_key="")

    def test_posts_scrape_request(self):
        self.session.post.return_value = _make_response(body=SUCCESS_BODY)
        options = FetchOptions(
            timeout_ms=20000,
            wait_for_ms=3000,
            headers={"User-Agent": "test"},
            exclude_tags=("nav",),
        )
        self.fetcher.fetch("https://gumroad.com/l/abc", options)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://api.firecrawl.dev/v1/scrape")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer fc-test")
        self.assertEqual(kwargs["timeout"], 25.0)
        self.assertEqual(
            kwargs["json"],
            {
                "url": "https://gumroad.com/l/abc",
                "formats": ["markdown", "html"],
                "onlyMainContent": True,
                "timeout": 20000,
                "waitFor": 3000,
                "headers": {"User-Agent": "test"},
                "excludeTags": ["nav"],
            },
        )

    def test_optional_payload_fields_omitted(self):
        self.session.post.return_value = _make_response(body=SUCCESS_BODY)
        self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        payload = self.session.post.call_args.kwargs["json"]
        self.assertNotIn("waitFor", payload)
        self.assertNotIn("headers", payload)
        self.assertNotIn("excludeTags", payload)

    def test_success_maps_content(self):
        self.session.post.return_value = _make_response(body=SUCCESS_BODY)
        response = self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertTrue(response.success)
        self.assertEqual(response.data.markdown, "# Test Product\n\nPrice: $29.99")
        self.assertEqual(response.data.metadata.title, "Test Product")
        self.assertEqual(response.data.metadata.description, "A product")
        self.assertEqual(response.data.metadata.og_image, "https://cdn.example/og.jpg")

    def test_service_error_is_reported(self):
        self.session.post.return_value = _make_response(402, {"success": False, "error": "Payment required"})
        response = self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertFalse(response.success)
        self.assertEqual(response.error, "Payment required")

    def test_http_error_without_message(self):
        self.session.post.return_value = _make_response(503, {})
        response = self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertEqual(response.error, "HTTP_503")

    def test_invalid_json(self):
        self.session.post.return_value = _make_response(502, json_error=ValueError("no json"))
        response = self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertFalse(response.success)
        self.assertTrue(response.error.startswith("invalid_json status=502"))

    def test_missing_data_is_failure(self):
        self.session.post.return_value = _make_response(200, {"success": True})
        response = self.fetcher.fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertFalse(response.success)

    def test_close_closes_session(self):
        self.fetcher.close()
        self.session.close.assert_called_once_with()


class TestCallableFetcher(unittest.TestCase):
    def test_delegates_to_function(self):
        seen = []

        def fn(url, options):
            seen.append(url)
            return FetchResponse(success=False, error="nope")

        response = CallableFetcher(fn).fetch("https://etsy.com/listing/1", FetchOptions())
        self.assertEqual(seen, ["https://etsy.com/listing/1"])
        self.assertEqual(response.error, "nope")


if __name__ == "__main__":
    unittest.main()
