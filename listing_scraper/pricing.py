"""Heuristic price detection in free text.

The parser commits to the first price-like token in document order. Pages
listing several plans are not disambiguated.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Pattern, Tuple

from .models import Pricing

DEFAULT_CURRENCY_SYMBOLS: Dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
}

ISO_CURRENCY_CODES = ("USD", "EUR", "GBP", "JPY", "INR", "CAD", "AUD", "CHF", "CNY", "SEK", "NOK", "DKK", "PLN", "BGN")

_NUMBER = r"\d+(?:[.,]\d+)*"
_DECIMAL_TAIL = re.compile(r"[.,](\d{2})$")

_MONTHLY = re.compile(r"/\s*(?:month|mo)\b|\bper\s+month\b|\ba\s+month\b|\bmonthly\b", re.IGNORECASE)
_YEARLY = re.compile(r"/\s*(?:year|yr)\b|\bper\s+(?:year|annum)\b|\ba\s+year\b|\byearly\b|\bannually\b", re.IGNORECASE)

# Characters after the amount inspected for a billing interval.
INTERVAL_WINDOW = 25


def parse_amount(raw: str) -> Optional[float]:
    """Convert a number token with mixed separators into a float.

    A separator followed by exactly two trailing digits is the decimal
    point; any other separator groups thousands.
    """
    raw = raw.strip()
    if not raw:
        return None
    decimals = ""
    integer_part = raw
    match = _DECIMAL_TAIL.search(raw)
    if match:
        decimals = match.group(1)
        integer_part = raw[: match.start()]
    digits = re.sub(r"[.,]", "", integer_part)
    if not digits.isdigit():
        return None
    return float(f"{digits}.{decimals}") if decimals else float(digits)


def detect_interval(text: str) -> Optional[str]:
    """Return 'monthly' or 'yearly' for whichever marker appears first."""
    monthly = _MONTHLY.search(text)
    yearly = _YEARLY.search(text)
    if monthly and (not yearly or monthly.start() <= yearly.start()):
        return "monthly"
    if yearly:
        return "yearly"
    return None


class PricingParser:
    """Extracts amount, currency and billing interval from text."""

    def __init__(self, currency_symbols: Optional[Dict[str, str]] = None) -> None:
        self._symbols: Dict[str, str] = dict(DEFAULT_CURRENCY_SYMBOLS)
        if currency_symbols:
            self._symbols.update(currency_symbols)
        self._codes: Tuple[str, ...] = tuple(sorted(set(ISO_CURRENCY_CODES) | set(self._symbols.values())))
        self._pattern = self._compile()

    def _compile(self) -> Pattern[str]:
        symbols = "|".join(re.escape(s) for s in sorted(self._symbols, key=len, reverse=True))
        codes = "|".join(self._codes)
        return re.compile(
            rf"(?P<sym_before>{symbols})\s?(?P<num_a>{_NUMBER})"
            rf"|\b(?P<code_before>{codes})\s?(?P<num_b>{_NUMBER})"
            # A trailing currency must not itself lead a number: in "5 $49" the price is $49.
            rf"|(?P<num_c>{_NUMBER})\s?(?:(?P<sym_after>{symbols})|(?P<code_after>{codes})\b)(?!\s?\d)"
            rf"|(?P<free>\bfree\b)",
            re.IGNORECASE,
        )

    def _currency_for(self, token: str) -> Optional[str]:
        if token in self._symbols:
            return self._symbols[token]
        upper = token.upper()
        return upper if upper in self._codes else None

    def parse(self, text: Optional[str]) -> Pricing:
        if not text:
            return Pricing()

        for match in self._pattern.finditer(text):
            if match.group("free"):
                return Pricing(type="free", amount=0.0)

            if match.group("code_before") and not match.group("code_before").isupper():
                continue
            if match.group("code_after") and not match.group("code_after").isupper():
                continue

            raw_number = match.group("num_a") or match.group("num_b") or match.group("num_c")
            currency_token = (
                match.group("sym_before")
                or match.group("code_before")
                or match.group("sym_after")
                or match.group("code_after")
            )
            amount = parse_amount(raw_number)
            if amount is None:
                continue

            tail = text[match.end(): match.end() + INTERVAL_WINDOW].split("\n", 1)[0]
            interval = detect_interval(tail)
            return Pricing(
                type="subscription" if interval else "one-time",
                amount=amount,
                currency=self._currency_for(currency_token),
                interval=interval,
            )

        return Pricing()
