"""Registry of recognised listing sources and URL classification.

Sources are plain data: adding a marketplace means adding one
SourceDescriptor to the table, nothing else.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
from urllib.parse import ParseResult, urlparse

from .errors import InvalidUrlError, UnsupportedSourceError
from .models import FetchOverrides, SelectorSet, SourceDescriptor


def _source(
    source_id: str,
    display_name: str,
    domains: tuple,
    categories: tuple,
    rate_limit_per_hour: int,
    selectors: Optional[Dict[str, str]] = None,
    **overrides,
) -> SourceDescriptor:
    return SourceDescriptor(
        id=source_id,
        display_name=display_name,
        domain_patterns=tuple(d.lower() for d in domains),
        categories=categories,
        rate_limit_per_hour=rate_limit_per_hour,
        fetch_overrides=FetchOverrides(**overrides),
        selectors=SelectorSet(**(selectors or {})),
    )


_SOURCE_TABLE = [
    # Creative & design marketplaces
    _source("etsy", "Etsy", ("etsy.com",), ("digital-downloads", "printables", "templates", "graphics"), 100,
            selectors=dict(
                title='[data-test-id="listing-page-title"], h1',
                price=".currency-value, .notranslate",
                description='[data-test-id="listing-page-description"], .shop2-listing-description',
                images=".listing-page-image img, .carousel-image img",
                seller=".shop2-shop-info-name, .shop-name",
                features=".listing-page-overview-component li",
                reviews=".shop2-review-review",
                rating=".stars-svg",
            ),
            headers={"User-Agent": "Mozilla/5.0 (compatible; ProductAnalyzer/1.0)"}),
    _source("gumroad", "Gumroad", ("gumroad.com",), ("software", "ebooks", "courses", "templates", "digital-art"), 200,
            selectors=dict(
                title=".product-title, h1.title",
                price=".price, .product-price",
                description=".product-description, .description",
                images=".product-images img, .gallery img",
                seller=".creator-name, .profile-name",
                features=".product-features li, .feature-list li",
            ),
            wait_for_ms=3000),
    _source("creative_market", "Creative Market", ("creativemarket.com",), ("templates", "graphics", "fonts", "photos"), 50,
            selectors=dict(
                title=".product-title, h1",
                price=".price, .product-price",
                description=".product-description",
                images=".product-gallery img",
                seller=".shop-name, .designer-name",
            )),
    _source("shutterstock", "Shutterstock", ("shutterstock.com",), ("images", "vectors", "templates"), 1000,
            selectors=dict(
                title=".asset-title, h1",
                description=".asset-description",
                images=".asset-image img",
                seller=".contributor-name",
            )),
    _source("dribbble", "Dribbble", ("dribbble.com",), ("design", "templates", "graphics"), 100,
            selectors=dict(title=".shot-title, h1", description=".shot-description", seller=".display-name")),
    _source("figma_community", "Figma Community", ("figma.com",), ("design", "templates", "ui-kits"), 150,
            selectors=dict(title=".file_title, h1", description=".file_description", seller=".profile_name")),
    # Course platforms
    _source("udemy", "Udemy", ("udemy.com",), ("courses", "tutorials"), 100,
            selectors=dict(
                title='[data-purpose="course-title"], h1',
                price=".price-text, .course-price",
                description='[data-purpose="course-description"]',
                images=".course-image img",
                seller=".instructor-name",
                rating=".rating-number",
            ),
            exclude_tags=("script", "style", "nav", "footer")),
    _source("skillshare", "Skillshare", ("skillshare.com",), ("classes", "workshops"), 75,
            selectors=dict(
                title=".class-title, h1",
                description=".class-description",
                images=".class-image img",
                seller=".teacher-name",
            )),
    _source("teachable", "Teachable", ("teachable.com",), ("courses", "education", "digital-products"), 100,
            selectors=dict(
                title=".course-title, h1",
                price=".course-price",
                description=".course-description",
                seller=".instructor-name",
            )),
    _source("thinkific", "Thinkific", ("thinkific.com",), ("courses", "education"), 100,
            selectors=dict(title=".course-title, h1", description=".course-description", seller=".instructor-name")),
    # SaaS & tools
    _source("product_hunt", "Product Hunt", ("producthunt.com",), ("apps", "tools", "productivity"), 500,
            selectors=dict(
                title=".product-name, h1",
                description=".product-description",
                images=".product-gallery img",
                seller=".maker-name",
            )),
    _source("whop", "Whop", ("whop.com",), ("saas", "software", "digital-products", "communities"), 120,
            selectors=dict(
                title=".product-title, h1",
                price=".price, .product-price",
                description=".product-description",
                images=".product-image img",
                seller=".creator-name",
                features=".feature-list li",
            )),
    _source("saas_library", "SaaS Library", ("saaslibrary.com",), ("saas", "software", "tools"), 100,
            selectors=dict(
                title=".tool-title, h1",
                description=".tool-description",
                images=".tool-screenshot img",
                features=".features li",
            )),
    _source("betalist", "BetaList", ("betalist.com",), ("startups", "saas", "beta-products"), 80,
            selectors=dict(title=".startup-name, h1", description=".startup-description", images=".startup-image img")),
    _source("chrome_web_store", "Chrome Web Store", ("chrome.google.com", "chromewebstore.google.com"),
            ("extensions", "apps", "productivity"), 200,
            selectors=dict(title=".e-f-w, h1", description=".C-b-p-j-Pb", rating=".rsw-stars")),
    _source("microsoft_appsource", "Microsoft AppSource", ("appsource.microsoft.com",),
            ("business-apps", "saas", "productivity"), 100,
            selectors=dict(title=".product-title, h1", description=".product-description", seller=".publisher-name")),
    _source("rapidapi", "RapidAPI", ("rapidapi.com",), ("apis", "developer-tools", "saas"), 200,
            selectors=dict(title=".api-title, h1", description=".api-description", seller=".provider-name")),
    _source("github", "GitHub", ("github.com",), ("code", "tools", "open-source"), 5000,
            selectors=dict(title=".js-repo-name, h1", description=".repository-content .f4", seller=".author")),
    # E-commerce & freelance
    _source("shopify", "Shopify", ("themes.shopify.com", "apps.shopify.com"), ("themes", "apps"), 40,
            selectors=dict(
                title=".theme-name, h1",
                price=".theme-price",
                description=".theme-description",
                images=".theme-preview img",
                seller=".theme-author",
            )),
    _source("fiverr", "Fiverr", ("fiverr.com",), ("gigs", "services", "digital-products"), 150,
            selectors=dict(
                title=".gig-title, h1",
                price=".gig-price, .price",
                description=".gig-description",
                images=".gig-gallery img",
                seller=".seller-name",
                rating=".gig-rating",
            )),
    _source("upwork", "Upwork", ("upwork.com",), ("services", "talent", "projects"), 100,
            selectors=dict(title=".job-title, h1", description=".job-description", seller=".freelancer-name")),
    _source("clickbank", "ClickBank", ("clickbank.com",), ("affiliate-products", "digital-products", "marketing"), 60,
            selectors=dict(title=".product-title, h1", description=".product-description", price=".product-price")),
    _source("opensea", "OpenSea", ("opensea.io",), ("nft", "crypto", "digital-collectibles"), 100,
            selectors=dict(title=".collection-name, h1", description=".collection-description", seller=".creator-name")),
    # Indie makers & creators
    _source("indie_hackers", "Indie Hackers", ("indiehackers.com",), ("startups", "saas", "indie-products"), 100,
            selectors=dict(title=".product-name, h1", description=".product-description", seller=".founder-name")),
    _source("makerlog", "Makerlog", ("getmakerlog.com",), ("products", "makers", "saas"), 120,
            selectors=dict(title=".product-title, h1", description=".product-description", seller=".maker-name")),
    _source("patreon", "Patreon", ("patreon.com",), ("subscriptions", "content", "creators"), 80,
            selectors=dict(title=".creator-name, h1", description=".creator-description")),
    _source("substack", "Substack", ("substack.com",), ("newsletters", "content", "subscriptions"), 120,
            selectors=dict(title=".publication-name, h1", description=".publication-description")),
    _source("trend_hunter", "Trend Hunter", ("trendhunter.com",), ("trends", "innovation", "products"), 100,
            selectors=dict(title=".trend-title, h1", description=".trend-description")),
]

SOURCES: Mapping[str, SourceDescriptor] = MappingProxyType({s.id: s for s in _SOURCE_TABLE})

SOURCE_GROUPS: Mapping[str, tuple] = MappingProxyType(
    {
        "creative": ("etsy", "creative_market", "shutterstock", "dribbble", "figma_community"),
        "educational": ("udemy", "skillshare", "teachable", "thinkific"),
        "saas": ("product_hunt", "whop", "saas_library", "betalist", "microsoft_appsource"),
        "ecommerce": ("shopify", "clickbank"),
        "freelance": ("fiverr", "upwork"),
        "software": ("gumroad", "product_hunt", "github", "rapidapi"),
        "indie_makers": ("indie_hackers", "makerlog", "betalist"),
        "content_creators": ("patreon", "substack"),
        "marketplaces": ("chrome_web_store", "opensea", "clickbank"),
        "trends": ("trend_hunter", "product_hunt"),
    }
)


def parse_url(url: object) -> Optional[ParseResult]:
    """Parse an absolute URL; return None for anything unusable."""
    if not isinstance(url, str):
        return None
    candidate = url.strip()
    if not candidate:
        return None
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    return parsed


def _host_matches(hostname: str, pattern: str) -> bool:
    return hostname == pattern or hostname.endswith("." + pattern)


def get_source_by_url(url: object) -> Optional[SourceDescriptor]:
    parsed = parse_url(url)
    if parsed is None:
        return None
    hostname = parsed.hostname.lower()
    for source in SOURCES.values():
        if any(_host_matches(hostname, pattern) for pattern in source.domain_patterns):
            return source
    return None


def classify_url(url: object) -> SourceDescriptor:
    """Resolve the source for a URL, raising on invalid or unknown input."""
    parsed = parse_url(url)
    if parsed is None:
        raise InvalidUrlError(url)
    source = get_source_by_url(url)
    if source is None:
        raise UnsupportedSourceError(parsed.hostname)
    return source


def is_url_supported(url: object) -> bool:
    return get_source_by_url(url) is not None


def get_supported_sources() -> Mapping[str, SourceDescriptor]:
    return SOURCES


def get_sources_by_group(group: str) -> List[SourceDescriptor]:
    ids = SOURCE_GROUPS.get(group.strip().lower(), ())
    return [SOURCES[i] for i in ids if i in SOURCES]

