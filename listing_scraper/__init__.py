"""Product-listing acquisition and extraction pipeline.

Fetches third-party listing pages through an external content-extraction
service and turns them into typed product records.

Key modules:
    agent        -- ScrapingAgent, the public facade
    sources      -- registry of supported marketplaces and URL classification
    extractor    -- ContentExtractor building ProductExtract records
    pricing      -- PricingParser for amount/currency/interval detection
    features     -- bullet-list feature extraction from markdown
    fetchers     -- Fetcher contract and the Firecrawl-backed adapter
    retry        -- RetryController wrapping fetch attempts
    backoff      -- BackoffStrategy for exponential retry delays
    rate_limiter -- DomainRateLimiter, per-domain token buckets
    controller   -- BatchController for bounded-concurrency batches
    metrics      -- StatsTracker for usage counters
    config       -- AgentConfig and environment loading
    storage      -- JsonlResultWriter for result audit files
"""

from .agent import ScrapingAgent
from .config import AgentConfig, load_config_from_env
from .errors import InvalidInputError
from .models import (
    FetchedContent,
    FetchOptions,
    FetchResponse,
    PageMetadata,
    Pricing,
    ProductExtract,
    ScrapingOptions,
    ScrapingRequest,
    ScrapingResult,
    ScrapingStats,
    SourceDescriptor,
)

__all__ = [
    "AgentConfig",
    "FetchOptions",
    "FetchResponse",
    "FetchedContent",
    "InvalidInputError",
    "PageMetadata",
    "Pricing",
    "ProductExtract",
    "ScrapingAgent",
    "ScrapingOptions",
    "ScrapingRequest",
    "ScrapingResult",
    "ScrapingStats",
    "SourceDescriptor",
    "load_config_from_env",
]
