from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import List

from listing_scraper import ScrapingAgent, ScrapingOptions, ScrapingRequest, load_config_from_env
from listing_scraper.logging_utils import setup_logging
from listing_scraper.sources import get_supported_sources
from listing_scraper.storage import JsonlResultWriter


def _load_urls(path: str) -> list[str]:
    urls: list[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            url = line.strip()
            if not url or url.startswith("#"):
                continue
            urls.append(url)
    return urls


def _print_sources() -> None:
    for source in get_supported_sources().values():
        print(f"{source.id:<22} {source.display_name:<22} {', '.join(source.domain_patterns)}")


def run_batch(args: argparse.Namespace, urls: List[str]) -> int:
    config = load_config_from_env()
    overrides = {}
    if args.concurrency is not None:
        overrides["batch_concurrency"] = args.concurrency
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.timeout_ms is not None:
        overrides["default_timeout"] = args.timeout_ms
    if args.no_rate_limit:
        overrides["respect_rate_limit"] = False
    if overrides:
        config = dataclasses.replace(config, **overrides)
    if not config.fetch_service_api_key:
        print(
            "No fetch service API key configured. Set LISTING_SCRAPER_API_KEY or FIRECRAWL_API_KEY.",
            file=sys.stderr,
        )
        return 2

    options = ScrapingOptions(include_images=not args.no_images, extract_content=args.include_content)
    requests = [ScrapingRequest(url=url, options=options) for url in urls]

    with JsonlResultWriter(args.results) as writer, ScrapingAgent(config) as agent:
        results = agent.scrape_multiple_products(requests)
        for request, result in zip(requests, results):
            writer.write(request.url, result)
            if result.success:
                pricing = result.data.pricing
                print(
                    f"OK   {request.url} title={result.data.title!r} price={pricing.amount} "
                    f"{pricing.currency or ''} type={pricing.type} attempts={result.attempts}"
                )
            else:
                print(f"FAIL {request.url} error={result.error.message}")
        stats = agent.get_stats()

    print(json.dumps(
        {
            "total_requests": stats.total_requests,
            "successful_scrapes": stats.successful_scrapes,
            "failed_scrapes": stats.failed_scrapes,
            "average_response_ms": round(stats.average_response_ms, 1),
            "rate_limit_hits": stats.rate_limit_hits,
        }
    ))
    return 0 if stats.failed_scrapes == 0 else 1


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scrape product listings into structured records")
    parser.add_argument("urls", nargs="*", help="Listing URLs to scrape")
    parser.add_argument("--urls-file", help="File with one URL per line")
    parser.add_argument("--results", default="results.jsonl", help="Output JSONL file path")
    parser.add_argument("--list-sources", action="store_true", help="Print supported sources and exit")

    parser.add_argument("--concurrency", type=int, default=None, help="Batch worker pool size")
    parser.add_argument("--max-retries", type=int, default=None, help="Retries per fetch after the first attempt")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Per-attempt fetch timeout in milliseconds")
    parser.add_argument("--no-rate-limit", action="store_true", help="Disable per-domain rate limiting")
    parser.add_argument("--no-images", action="store_true", help="Skip image extraction")
    parser.add_argument("--include-content", action="store_true", help="Keep raw page markdown in results")

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")

    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    if args.list_sources:
        _print_sources()
        return 0

    urls = list(args.urls)
    if args.urls_file:
        urls.extend(_load_urls(args.urls_file))
    if not urls:
        parser.print_usage()
        print("Nothing to do. Pass URLs or --urls-file.")
        return 2

    return run_batch(args, urls)


if __name__ == "__main__":
    sys.exit(main())
