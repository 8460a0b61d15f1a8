"""Tests for the PricingParser."""

import unittest

from listing_scraper.pricing import PricingParser, detect_interval, parse_amount


class TestParseAmount(unittest.TestCase):
    """Verify separator disambiguation."""

    def test_two_trailing_digits_are_decimals(self):
        self.assertEqual(parse_amount("29.99"), 29.99)
        self.assertEqual(parse_amount("12,50"), 12.5)

    def test_mixed_separators(self):
        self.assertEqual(parse_amount("1,234.56"), 1234.56)
        self.assertEqual(parse_amount("1.234,56"), 1234.56)

    def test_other_separators_group_thousands(self):
        self.assertEqual(parse_amount("1,299"), 1299.0)
        self.assertEqual(parse_amount("1.000.000"), 1000000.0)

    def test_plain_integer(self):
        self.assertEqual(parse_amount("49"), 49.0)


class TestPricingParser(unittest.TestCase):
    """Verify amount, currency and interval detection."""

    def setUp(self):
        self.parser = PricingParser()

    def test_one_time_dollar_price(self):
        pricing = self.parser.parse("# Test Product\n\nPrice: $29.99")
        self.assertEqual(pricing.amount, 29.99)
        self.assertEqual(pricing.currency, "USD")
        self.assertEqual(pricing.type, "one-time")
        self.assertIsNone(pricing.interval)

    def test_monthly_euro_subscription(self):
        pricing = self.parser.parse("**Price: €49.99/month**")
        self.assertEqual(pricing.amount, 49.99)
        self.assertEqual(pricing.currency, "EUR")
        self.assertEqual(pricing.type, "subscription")
        self.assertEqual(pricing.interval, "monthly")

    def test_yearly_subscription(self):
        pricing = self.parser.parse("Only £120 per year, billed once")
        self.assertEqual(pricing.amount, 120.0)
        self.assertEqual(pricing.currency, "GBP")
        self.assertEqual(pricing.interval, "yearly")

    def test_symbol_after_amount(self):
        pricing = self.parser.parse("Preis: 1.234,56 €")
        self.assertEqual(pricing.amount, 1234.56)
        self.assertEqual(pricing.currency, "EUR")

    def test_iso_code_before_amount(self):
        pricing = self.parser.parse("Licence USD 15 / mo")
        self.assertEqual(pricing.amount, 15.0)
        self.assertEqual(pricing.currency, "USD")
        self.assertEqual(pricing.interval, "monthly")

    def test_yen_with_thousands_separator(self):
        pricing = self.parser.parse("¥1,500")
        self.assertEqual(pricing.amount, 1500.0)
        self.assertEqual(pricing.currency, "JPY")

    def test_free_word(self):
        pricing = self.parser.parse("This template is FREE to download")
        self.assertEqual(pricing.type, "free")
        self.assertEqual(pricing.amount, 0.0)

    def test_first_token_wins(self):
        """Several prices: the first one in document order is used."""
        pricing = self.parser.parse("Starter $10/month\nPro $100/year")
        self.assertEqual(pricing.amount, 10.0)
        self.assertEqual(pricing.interval, "monthly")

    def test_count_before_leading_symbol_price(self):
        """A quantity one space before a price is not read as the amount."""
        pricing = self.parser.parse("Bundle of 5 $49")
        self.assertEqual(pricing.amount, 49.0)
        self.assertEqual(pricing.currency, "USD")

    def test_rating_before_leading_symbol_price(self):
        pricing = self.parser.parse("Rated 4.8 $29.99")
        self.assertEqual(pricing.amount, 29.99)
        self.assertEqual(pricing.currency, "USD")

    def test_code_followed_by_number_leads_that_number(self):
        pricing = self.parser.parse("Pack of 3 EUR 15")
        self.assertEqual(pricing.amount, 15.0)
        self.assertEqual(pricing.currency, "EUR")

    def test_interval_marker_must_follow_the_amount(self):
        """An interval on a later line does not leak into the first price."""
        pricing = self.parser.parse("Bundle $49\nSupport plans billed per month")
        self.assertEqual(pricing.type, "one-time")

    def test_no_price_degrades_to_default(self):
        pricing = self.parser.parse("Nothing priced in 2024 here")
        self.assertEqual(pricing.type, "free")
        self.assertIsNone(pricing.amount)
        self.assertIsNone(pricing.currency)

    def test_empty_text(self):
        self.assertIsNone(self.parser.parse("").amount)
        self.assertIsNone(self.parser.parse(None).amount)

    def test_custom_currency_symbol(self):
        parser = PricingParser(currency_symbols={"R$": "BRL"})
        pricing = parser.parse("Apenas R$ 99,90")
        self.assertEqual(pricing.amount, 99.9)
        self.assertEqual(pricing.currency, "BRL")


class TestDetectInterval(unittest.TestCase):
    def test_earliest_marker_wins(self):
        self.assertEqual(detect_interval("/month or /year"), "monthly")
        self.assertEqual(detect_interval(" annually, or monthly"), "yearly")

    def test_no_marker(self):
        self.assertIsNone(detect_interval(" one-time payment"))


if __name__ == "__main__":
    unittest.main()
