from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from .assemble import build_assembly
from .config import AppConfig
from .fetcher import Fetch, fetch_html
from .links import extract_links
from .models import ResultSet

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunSummary:
    result_set: ResultSet
    index_fetched: bool = False
    candidates: int = 0
    fetched: int = 0
    fetch_failures: int = 0
    rejections: Counter[str] = field(default_factory=Counter)

    @property
    def accepted(self) -> int:
        return len(self.result_set.opportunities)


def run(config: AppConfig, fetch: Fetch = fetch_html) -> RunSummary:
    crawl = config.crawl
    summary = RunSummary(result_set=ResultSet())

    index_html = fetch(crawl.index_url, config)
    if not index_html:
        logger.warning("Index page %s returned no content", crawl.index_url)
        return summary
    summary.index_fetched = True

    links = extract_links(index_html, crawl.index_url, crawl.trusted_domains)
    summary.candidates = len(links)
    opportunities = summary.result_set.opportunities

    for link in links[: crawl.max_detail_fetches]:
        summary.fetched += 1
        assembly = build_assembly(link.url, link.title, config, fetch)
        if assembly.opportunity is None:
            if assembly.reason == "empty_page":
                summary.fetch_failures += 1
            else:
                summary.rejections[assembly.reason or "unknown"] += 1
            continue
        opportunities.append(assembly.opportunity)
        if len(opportunities) >= crawl.max_results:
            break

    logger.info(
        "Scanned %d of %d candidates: accepted=%d fetch_failures=%d rejected=%d",
        summary.fetched,
        summary.candidates,
        summary.accepted,
        summary.fetch_failures,
        sum(summary.rejections.values()),
    )
    return summary


def list_opportunities(config: AppConfig, fetch: Fetch = fetch_html) -> ResultSet:
    return run(config, fetch).result_set
