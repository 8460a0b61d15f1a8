from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

SCRAPING_FAILED = "SCRAPING_FAILED"

PRICING_TYPES = ("free", "one-time", "subscription")
PRICING_INTERVALS = ("monthly", "yearly")


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_drop_none(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form with unset optional members removed."""
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class FetchOverrides(_Serializable):
    wait_for_ms: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    exclude_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SelectorSet(_Serializable):
    """CSS selectors tried against a source's HTML before generic heuristics."""

    title: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None
    images: Optional[str] = None
    seller: Optional[str] = None
    features: Optional[str] = None
    reviews: Optional[str] = None
    rating: Optional[str] = None


@dataclass(frozen=True)
class SourceDescriptor(_Serializable):
    id: str
    display_name: str
    domain_patterns: Tuple[str, ...]
    categories: Tuple[str, ...] = ()
    rate_limit_per_hour: int = 60
    fetch_overrides: FetchOverrides = field(default_factory=FetchOverrides)
    selectors: SelectorSet = field(default_factory=SelectorSet)


@dataclass(frozen=True)
class ScrapingOptions(_Serializable):
    include_images: bool = True
    include_metadata: bool = True
    extract_content: bool = False
    respect_rate_limit: Optional[bool] = None
    timeout_ms: Optional[int] = None
    formats: Tuple[str, ...] = ("markdown", "html")


@dataclass(frozen=True)
class ScrapingRequest(_Serializable):
    url: str
    options: Optional[ScrapingOptions] = None
    priority: str = "normal"


@dataclass(frozen=True)
class PageMetadata(_Serializable):
    title: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    og_image: Optional[str] = None


@dataclass(frozen=True)
class FetchedContent(_Serializable):
    markdown: str = ""
    html: str = ""
    metadata: PageMetadata = field(default_factory=PageMetadata)


@dataclass(frozen=True)
class FetchOptions(_Serializable):
    formats: Tuple[str, ...] = ("markdown", "html")
    only_main_content: bool = True
    timeout_ms: int = 30000
    wait_for_ms: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    exclude_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FetchResponse(_Serializable):
    success: bool
    data: Optional[FetchedContent] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Pricing(_Serializable):
    type: str = "free"
    amount: Optional[float] = None
    currency: Optional[str] = None
    interval: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in PRICING_TYPES:
            raise ValueError(f"unknown pricing type: {self.type}")
        if self.interval is not None and self.interval not in PRICING_INTERVALS:
            raise ValueError(f"unknown pricing interval: {self.interval}")


@dataclass(frozen=True)
class SellerInfo(_Serializable):
    name: str
    verified: bool = False


@dataclass(frozen=True)
class ReviewInfo(_Serializable):
    average_rating: Optional[float] = None
    total_reviews: Optional[int] = None


@dataclass(frozen=True)
class ProductExtract(_Serializable):
    title: Optional[str]
    description: Optional[str]
    source: str
    pricing: Pricing
    features: Tuple[str, ...]
    url: str
    images: Tuple[str, ...] = ()
    category: Optional[str] = None
    tags: Tuple[str, ...] = ()
    seller: Optional[SellerInfo] = None
    reviews: Optional[ReviewInfo] = None
    language: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class ScrapingError(_Serializable):
    code: str
    message: str


@dataclass(frozen=True)
class ScrapingResult(_Serializable):
    """Tagged outcome of one scrape: ``data`` on success, ``error`` otherwise."""

    success: bool
    data: Optional[ProductExtract] = None
    error: Optional[ScrapingError] = None
    duration_ms: int = 0
    attempts: int = 0

    def __post_init__(self) -> None:
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("successful result requires data and no error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("failed result requires error and no data")

    @classmethod
    def ok(cls, data: ProductExtract, duration_ms: int = 0, attempts: int = 0) -> "ScrapingResult":
        return cls(success=True, data=data, duration_ms=duration_ms, attempts=attempts)

    @classmethod
    def failed(
        cls,
        message: str,
        code: str = SCRAPING_FAILED,
        duration_ms: int = 0,
        attempts: int = 0,
    ) -> "ScrapingResult":
        return cls(
            success=False,
            error=ScrapingError(code=code, message=message),
            duration_ms=duration_ms,
            attempts=attempts,
        )


@dataclass(frozen=True)
class SourceStats(_Serializable):
    requests: int = 0
    successes: int = 0
    failures: int = 0
    avg_response_ms: float = 0.0


@dataclass(frozen=True)
class ScrapingStats(_Serializable):
    total_requests: int = 0
    successful_scrapes: int = 0
    failed_scrapes: int = 0
    average_response_ms: float = 0.0
    rate_limit_hits: int = 0
    errors_by_type: Dict[str, int] = field(default_factory=dict)
    source_stats: Dict[str, SourceStats] = field(default_factory=dict)
