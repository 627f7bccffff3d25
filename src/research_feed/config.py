from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ConfigError(ValueError):
    pass


@dataclass(slots=True)
class CrawlConfig:
    index_url: str = "https://science.ucsc.edu/student-support/awards-research/"
    category: str = "Science"
    max_results: int = 10
    max_detail_fetches: int = 40
    timeout_seconds: float = 8.0
    trusted_domains: list[str] = field(default_factory=lambda: ["ucsc.edu"])


@dataclass(slots=True)
class VocabularyConfig:
    requirement_headings: list[str] = field(
        default_factory=lambda: [
            "requirements",
            "qualifications",
            "eligibility",
            "prerequisites",
            "who should apply",
            "minimum qualifications",
            "criteria",
        ]
    )
    additional_headings: list[str] = field(
        default_factory=lambda: [
            "overview",
            "about",
            "description",
            "program",
            "opportunity",
            "details",
            "how to apply",
            "application",
        ]
    )
    requirement_keywords: list[str] = field(
        default_factory=lambda: [
            "eligible",
            "eligibility",
            "must",
            "minimum",
            "gpa",
            "require",
            "prerequisite",
            "applicant",
            "applicants",
            "coursework",
            "major",
            "standing",
        ]
    )


@dataclass(slots=True)
class LimitsConfig:
    title: int = 120
    requirements: int = 320
    additional_info: int = 360
    default_additional_info: str = "See the official posting for details."


@dataclass(slots=True)
class OutputConfig:
    snapshot_path: str = "public/opportunities.json"


@dataclass(slots=True)
class ServeConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    api_path: str = "/api/research-opportunities"


@dataclass(slots=True)
class AppConfig:
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    serve: ServeConfig = field(default_factory=ServeConfig)
    user_agent: str = "research-feed/0.1 (research opportunities aggregator)"
    show_warnings: bool = False


def _merge(default: Any, override: Any) -> Any:
    if isinstance(default, dict) and isinstance(override, dict):
        merged: dict[str, Any] = {**default}
        for key, value in override.items():
            merged[key] = _merge(default.get(key), value)
        return merged
    return override if override is not None else default


def _normalize_terms(terms: list[str]) -> list[str]:
    return [term.strip().lower() for term in terms if term and term.strip()]


def _normalize_domains(domains: list[str]) -> list[str]:
    return [domain.strip().lower().lstrip(".") for domain in domains if domain and domain.strip()]


def load_config(path: Path) -> AppConfig:
    data: dict[str, Any] = {}
    if path.exists():
        data = _read_toml(path)

    defaults = AppConfig()
    merged = _merge(_as_dict(defaults), data)

    try:
        config = AppConfig(
            crawl=CrawlConfig(**merged.get("crawl", {})),
            vocabulary=VocabularyConfig(**merged.get("vocabulary", {})),
            limits=LimitsConfig(**merged.get("limits", {})),
            output=OutputConfig(**merged.get("output", {})),
            serve=ServeConfig(**merged.get("serve", {})),
            user_agent=merged.get("user_agent", defaults.user_agent),
            show_warnings=merged.get("show_warnings", False),
        )
    except TypeError as exc:
        raise ConfigError(f"Unknown setting in {path}: {exc}") from exc

    if env_index := os.getenv("RESEARCH_FEED_INDEX_URL"):
        config.crawl.index_url = env_index.strip()
    if env_category := os.getenv("RESEARCH_FEED_CATEGORY"):
        config.crawl.category = env_category.strip()
    if env_timeout := os.getenv("RESEARCH_FEED_TIMEOUT"):
        try:
            config.crawl.timeout_seconds = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(f"RESEARCH_FEED_TIMEOUT is not a number: {env_timeout!r}") from exc

    config.crawl.trusted_domains = _normalize_domains(config.crawl.trusted_domains)
    config.vocabulary.requirement_headings = _normalize_terms(config.vocabulary.requirement_headings)
    config.vocabulary.additional_headings = _normalize_terms(config.vocabulary.additional_headings)
    config.vocabulary.requirement_keywords = _normalize_terms(config.vocabulary.requirement_keywords)
    validate_config(config)
    return config


def validate_config(config: AppConfig) -> None:
    if config.crawl.max_results < 1:
        raise ConfigError("crawl.max_results must be at least 1")
    if config.crawl.max_detail_fetches < 1:
        raise ConfigError("crawl.max_detail_fetches must be at least 1")
    if config.crawl.timeout_seconds <= 0:
        raise ConfigError("crawl.timeout_seconds must be positive")
    # Room for at least one character plus the ellipsis.
    for name in ("title", "requirements", "additional_info"):
        if getattr(config.limits, name) < 4:
            raise ConfigError(f"limits.{name} must be at least 4")


def config_path(cli_path: str | None) -> Path:
    if cli_path:
        return Path(cli_path).expanduser()
    if env_path := os.getenv("RESEARCH_FEED_CONFIG"):
        return Path(env_path).expanduser()
    return Path("config.toml")


def _read_toml(path: Path) -> dict[str, Any]:
    import tomllib

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _as_dict(config: AppConfig) -> dict[str, Any]:
    return {
        "user_agent": config.user_agent,
        "show_warnings": config.show_warnings,
        "crawl": {
            "index_url": config.crawl.index_url,
            "category": config.crawl.category,
            "max_results": config.crawl.max_results,
            "max_detail_fetches": config.crawl.max_detail_fetches,
            "timeout_seconds": config.crawl.timeout_seconds,
            "trusted_domains": config.crawl.trusted_domains,
        },
        "vocabulary": {
            "requirement_headings": config.vocabulary.requirement_headings,
            "additional_headings": config.vocabulary.additional_headings,
            "requirement_keywords": config.vocabulary.requirement_keywords,
        },
        "limits": {
            "title": config.limits.title,
            "requirements": config.limits.requirements,
            "additional_info": config.limits.additional_info,
            "default_additional_info": config.limits.default_additional_info,
        },
        "output": {
            "snapshot_path": config.output.snapshot_path,
        },
        "serve": {
            "host": config.serve.host,
            "port": config.serve.port,
            "api_path": config.serve.api_path,
        },
    }
