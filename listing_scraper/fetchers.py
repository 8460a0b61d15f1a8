from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import requests

from .models import FetchedContent, FetchOptions, FetchResponse, PageMetadata

DEFAULT_FIRECRAWL_URL = "https://api.firecrawl.dev"


class Fetcher(ABC):
    """Contract for the external content-fetching capability.

    Implementations return FetchResponse(success=False, error=...) for
    failures the remote service reports, and may raise for transport
    errors; the retry controller treats both as transient."""

    @abstractmethod
    def fetch(self, url: str, options: FetchOptions) -> FetchResponse:
        ...

    def close(self) -> None:
        """Release pooled connections, if any."""


class CallableFetcher(Fetcher):
    """Adapts a plain ``fn(url, options) -> FetchResponse`` to the Fetcher contract."""

    def __init__(self, fn: Callable[[str, FetchOptions], FetchResponse]) -> None:
        self._fn = fn

    def fetch(self, url: str, options: FetchOptions) -> FetchResponse:
        return self._fn(url, options)


class FirecrawlFetcher(Fetcher):
    """Fetches page content through the Firecrawl scrape endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_FIRECRAWL_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("fetch service api key is required")
        self._endpoint = base_url.rstrip("/") + "/v1/scrape"
        self._session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def fetch(self, url: str, options: FetchOptions) -> FetchResponse:
        payload: Dict[str, Any] = {
            "url": url,
            "formats": list(options.formats),
            "onlyMainContent": options.only_main_content,
            "timeout": options.timeout_ms,
        }
        if options.wait_for_ms is not None:
            payload["waitFor"] = options.wait_for_ms
        if options.headers:
            payload["headers"] = dict(options.headers)
        if options.exclude_tags:
            payload["excludeTags"] = list(options.exclude_tags)

        # Leave the service room to report its own timeout before ours fires.
        http_timeout = options.timeout_ms / 1000.0 + 5.0
        response = self._session.post(self._endpoint, json=payload, headers=self._headers, timeout=http_timeout)
        return self.parse(response)

    @staticmethod
    def parse(response: Any) -> FetchResponse:
        status_code = getattr(response, "status_code", None)
        try:
            body = response.json()
        except ValueError:
            raw_text = getattr(response, "text", "") or ""
            return FetchResponse(success=False, error=f"invalid_json status={status_code} body={raw_text[:200]}")

        if not isinstance(body, dict):
            return FetchResponse(success=False, error=f"unexpected payload status={status_code}")

        if status_code is None or not 200 <= int(status_code) < 300 or not body.get("success"):
            message = body.get("error") or body.get("message") or f"HTTP_{status_code}"
            return FetchResponse(success=False, error=str(message))

        data = body.get("data")
        if not isinstance(data, dict):
            return FetchResponse(success=False, error="response contained no data")

        meta = data.get("metadata") or {}
        return FetchResponse(
            success=True,
            data=FetchedContent(
                markdown=data.get("markdown") or "",
                html=data.get("html") or "",
                metadata=PageMetadata(
                    title=meta.get("title") or meta.get("ogTitle"),
                    description=meta.get("description") or meta.get("ogDescription"),
                    language=meta.get("language"),
                    og_image=meta.get("ogImage"),
                ),
            ),
        )

    def close(self) -> None:
        self._session.close()
