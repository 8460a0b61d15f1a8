"""Turns fetched page content into a ProductExtract.

Each field first tries the source's CSS selectors against the page HTML,
then falls back to generic heuristics over metadata, markdown and page
text. Missing or unparsable fields degrade to None or empty collections;
content problems never surface as errors.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .features import DEFAULT_FEATURE_LIMIT, extract_features
from .logging_utils import log_event
from .models import (
    FetchedContent,
    Pricing,
    ProductExtract,
    ReviewInfo,
    ScrapingOptions,
    SelectorSet,
    SellerInfo,
    SourceDescriptor,
)
from .pricing import PricingParser

logger = logging.getLogger(__name__)

MAX_IMAGES = 10
MAX_TAGS = 15

CATEGORY_KEYWORDS = {
    "template": ("template", "design", "layout"),
    "course": ("course", "tutorial", "lesson", "learn"),
    "ebook": ("ebook", "book", "pdf", "guide"),
    "software": ("software", "app", "tool", "program"),
    "graphics": ("graphic", "image", "vector", "illustration"),
    "font": ("font", "typeface", "typography"),
    "music": ("music", "audio", "sound", "track"),
    "video": ("video", "movie", "film", "animation"),
}

STOP_WORDS = frozenset(
    """the a an and or but in on at to for of with by is are was were be been have has had
    do does did will would could should this that these those you your our we they from
    more into than then them their it its can all any about""".split()
)

_TOP_HEADING = re.compile(r"^#\s+(?P<text>.+?)\s*#*\s*$", re.MULTILINE)
_HASHTAG = re.compile(r"(?<![\w#])#(\w+)")
_WORD = re.compile(r"\b[a-z]{4,}\b")
_SKIP_IMAGE = re.compile(r"icon|logo|sprite|pixel|avatar", re.IGNORECASE)
_RATING = re.compile(r"\d+(?:\.\d+)?")


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    cleaned = re.sub(r"\s+", " ", text).strip()
    return cleaned or None


def _text_or_none(value: object) -> Optional[str]:
    return _clean(value) if isinstance(value, str) else None


def _is_paragraph(block: str) -> bool:
    first = block.lstrip()
    if not first:
        return False
    if first.startswith(("#", ">", "|", "![", "---", "***")):
        return False
    return not re.match(r"(?:[-*+]|\d+[.)])\s", first)


def _select_text(soup: Optional[BeautifulSoup], selector: Optional[str]) -> Optional[str]:
    """Cleaned text of the first element matching ``selector``."""
    if soup is None or not selector:
        return None
    element = soup.select_one(selector)
    if element is None:
        return None
    return _clean(element.get_text(" ", strip=True))


def _select_all_text(soup: Optional[BeautifulSoup], selector: Optional[str]) -> List[str]:
    if soup is None or not selector:
        return []
    texts = (_clean(element.get_text(" ", strip=True)) for element in soup.select(selector))
    return [text for text in texts if text]


class ContentExtractor:
    """Builds normalized product records from markdown/HTML page content."""

    def __init__(self, pricing_parser: Optional[PricingParser] = None) -> None:
        self._pricing = pricing_parser or PricingParser()

    def extract(
        self,
        content: FetchedContent,
        source: SourceDescriptor,
        url: str,
        options: Optional[ScrapingOptions] = None,
    ) -> ProductExtract:
        options = options or ScrapingOptions()

        try:
            markdown = content.markdown or ""
            html = content.html or ""
            metadata = content.metadata
            selectors = source.selectors

            soup = BeautifulSoup(html, "html.parser") if html else None
            page_text = soup.get_text(" ", strip=True) if soup else ""

            features = _select_all_text(soup, selectors.features)[:DEFAULT_FEATURE_LIMIT]
            if not features:
                features = extract_features(markdown)

            combined = f"{page_text}\n{markdown}"
            return ProductExtract(
                title=_select_text(soup, selectors.title) or self.extract_title(content, soup),
                description=_select_text(soup, selectors.description) or self.extract_description(content),
                source=source.display_name,
                pricing=self.extract_pricing(markdown, page_text, _select_text(soup, selectors.price)),
                features=tuple(features),
                url=url,
                images=(
                    tuple(self.extract_images(soup, url, metadata.og_image, selectors.images))
                    if options.include_images
                    else ()
                ),
                category=self.detect_category(combined, source),
                tags=tuple(self.extract_tags(combined)),
                seller=self.extract_seller(soup, selectors),
                reviews=self.extract_reviews(soup, selectors),
                language=metadata.language if options.include_metadata else None,
                content=markdown if options.extract_content else None,
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                logging.WARNING,
                "extraction_degraded",
                url=url,
                source=source.id,
                error=f"{type(exc).__name__}: {exc}",
            )
            return self._minimal_record(content, source, url)

    @staticmethod
    def _minimal_record(content: FetchedContent, source: SourceDescriptor, url: str) -> ProductExtract:
        # Only attributes verified to be strings are read here; nothing below can raise.
        metadata = getattr(content, "metadata", None)
        markdown = getattr(content, "markdown", None)
        title = _text_or_none(getattr(metadata, "title", None))
        if title is None and isinstance(markdown, str):
            heading = _TOP_HEADING.search(markdown)
            title = _clean(heading.group("text")) if heading else None
        return ProductExtract(
            title=title,
            description=_text_or_none(getattr(metadata, "description", None)),
            source=source.display_name,
            pricing=Pricing(),
            features=(),
            url=url,
            category=source.categories[0] if source.categories else None,
        )

    def extract_pricing(self, markdown: str, page_text: str, selected: Optional[str] = None) -> Pricing:
        """Selector text first, then markdown, then the whole page text."""
        for text in (selected, markdown, page_text):
            if not text:
                continue
            pricing = self._pricing.parse(text)
            if pricing.amount is not None:
                return pricing
        return Pricing()

    @staticmethod
    def extract_title(content: FetchedContent, soup: Optional[BeautifulSoup] = None) -> Optional[str]:
        title = _clean(content.metadata.title)
        if title:
            return title
        heading = _TOP_HEADING.search(content.markdown or "")
        if heading:
            return _clean(heading.group("text"))
        if soup is not None:
            h1 = soup.find("h1")
            if h1 is not None:
                return _clean(h1.get_text(" ", strip=True))
        return None

    @staticmethod
    def extract_description(content: FetchedContent) -> Optional[str]:
        description = _clean(content.metadata.description)
        if description:
            return description
        for block in re.split(r"\n\s*\n", content.markdown or ""):
            if _is_paragraph(block):
                return _clean(block)
        return None

    @staticmethod
    def extract_images(
        soup: Optional[BeautifulSoup],
        base_url: str,
        og_image: Optional[str] = None,
        selector: Optional[str] = None,
    ) -> List[str]:
        images: List[str] = []
        seen = set()

        def _add(src: Optional[str]) -> None:
            if not src or src.startswith("data:"):
                return
            resolved = urljoin(base_url, src.strip())
            if not resolved.startswith(("http://", "https://")) or resolved in seen:
                return
            seen.add(resolved)
            images.append(resolved)

        _add(og_image)
        if soup is not None:
            candidates = (soup.select(selector) if selector else []) + soup.find_all("img")
            for img in candidates:
                src = img.get("src") or img.get("data-src")
                if src and _SKIP_IMAGE.search(src):
                    continue
                _add(src)
                if len(images) >= MAX_IMAGES:
                    break
        return images[:MAX_IMAGES]

    @staticmethod
    def extract_seller(soup: Optional[BeautifulSoup], selectors: SelectorSet) -> Optional[SellerInfo]:
        name = _select_text(soup, selectors.seller)
        return SellerInfo(name=name) if name else None

    @staticmethod
    def extract_reviews(soup: Optional[BeautifulSoup], selectors: SelectorSet) -> Optional[ReviewInfo]:
        """Average rating from the rating element, count from matching review elements."""
        if soup is None or not (selectors.rating or selectors.reviews):
            return None
        rating = None
        rating_text = _select_text(soup, selectors.rating)
        if rating_text:
            match = _RATING.search(rating_text)
            rating = float(match.group(0)) if match else None
        total = len(soup.select(selectors.reviews)) if selectors.reviews else 0
        if rating is None and total == 0:
            return None
        return ReviewInfo(average_rating=rating, total_reviews=total if selectors.reviews else None)

    @staticmethod
    def detect_category(text: str, source: SourceDescriptor) -> Optional[str]:
        lowered = text.lower()
        for category, keywords in CATEGORY_KEYWORDS.items():
            if any(re.search(rf"\b{keyword}", lowered) for keyword in keywords):
                return category
        return source.categories[0] if source.categories else None

    @staticmethod
    def extract_tags(text: str) -> List[str]:
        tags: List[str] = [tag.lower() for tag in _HASHTAG.findall(text)]
        counts = Counter(w for w in _WORD.findall(text.lower()) if w not in STOP_WORDS)
        tags.extend(word for word, _ in counts.most_common(10))
        return list(dict.fromkeys(tags))[:MAX_TAGS]
