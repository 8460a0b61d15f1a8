from __future__ import annotations


class ListingScraperError(Exception):
    """Base class for errors raised inside the scraping pipeline.

    The agent converts these into failed ScrapingResult values; only
    InvalidInputError ever leaves a public operation."""


class InvalidInputError(ListingScraperError, ValueError):
    """Raised by ScrapingAgent.process() for anything that is not a URL string."""


class InvalidUrlError(ListingScraperError):
    def __init__(self, url: object) -> None:
        super().__init__("Invalid URL provided")
        self.url = url


class UnsupportedSourceError(ListingScraperError):
    def __init__(self, hostname: str) -> None:
        super().__init__(f"Unsupported domain: {hostname}")
        self.hostname = hostname


class RateLimitExceededError(ListingScraperError):
    def __init__(self, source_id: str, wait_seconds: float) -> None:
        minutes = max(1, int(-(-wait_seconds // 60)))
        super().__init__(
            f"Rate limit exceeded for {source_id}. Please try again in {minutes} minutes."
        )
        self.source_id = source_id
        self.wait_seconds = wait_seconds


class FetchFailedError(ListingScraperError):
    def __init__(self, reason: str, attempts: int) -> None:
        super().__init__(f"Fetch service scraping failed: {reason}")
        self.reason = reason
        self.attempts = attempts
