"""Tests for the JSONL result writer."""

import json
import os
import tempfile
import unittest

from listing_scraper.models import Pricing, ProductExtract, ScrapingResult
from listing_scraper.storage import JsonlResultWriter


class TestJsonlResultWriter(unittest.TestCase):
    def test_writes_one_line_per_result(self):
        product = ProductExtract(
            title="Test Product",
            description=None,
            source="Etsy",
            pricing=Pricing(type="one-time", amount=29.99, currency="USD"),
            features=("A",),
            url="https://etsy.com/listing/1",
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out", "results.jsonl")
            with JsonlResultWriter(path) as writer:
                writer.write("https://etsy.com/listing/1", ScrapingResult.ok(product, duration_ms=5, attempts=1))
                writer.write("bad", ScrapingResult.failed("Invalid URL provided"))
            self.assertEqual(writer.written, 2)

            with open(path, encoding="utf-8") as f:
                records = [json.loads(line) for line in f]

        self.assertEqual(len(records), 2)
        self.assertEqual(records[0]["url"], "https://etsy.com/listing/1")
        self.assertTrue(records[0]["success"])
        self.assertEqual(records[0]["data"]["pricing"]["amount"], 29.99)
        self.assertIn("timestamp", records[0])
        self.assertFalse(records[1]["success"])
        self.assertEqual(records[1]["error"]["message"], "Invalid URL provided")


if __name__ == "__main__":
    unittest.main()
