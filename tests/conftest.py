from __future__ import annotations

import pytest

from research_feed.config import AppConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "RESEARCH_FEED_CONFIG",
        "RESEARCH_FEED_INDEX_URL",
        "RESEARCH_FEED_CATEGORY",
        "RESEARCH_FEED_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> AppConfig:
    cfg = AppConfig()
    cfg.crawl.index_url = "https://example.edu/awards/"
    cfg.crawl.trusted_domains = ["example.edu"]
    return cfg
