from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from .config import AppConfig
from .extract import (
    extract_additional_info,
    extract_emails,
    extract_requirements,
    extract_title,
    parse_document,
)
from .fetcher import Fetch, fetch_html
from .ids import encode_id
from .models import Opportunity
from .text import truncate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Assembly:
    opportunity: Opportunity | None
    reason: str | None


def assemble_opportunity(url: str, html: str, fallback_title: str, config: AppConfig) -> Assembly:
    if not html:
        return Assembly(opportunity=None, reason="empty_page")

    document = parse_document(html)
    title = extract_title(document, fallback_title)
    if not title:
        return Assembly(opportunity=None, reason="no_title")

    emails = extract_emails(document)
    if not emails:
        return Assembly(opportunity=None, reason="no_email")

    vocabulary = config.vocabulary
    requirements = extract_requirements(
        document, vocabulary.requirement_headings, vocabulary.requirement_keywords
    )
    if not requirements:
        return Assembly(opportunity=None, reason="no_requirements")

    limits = config.limits
    additional_info = (
        extract_additional_info(document, vocabulary.additional_headings)
        or limits.default_additional_info
    )

    opportunity = Opportunity(
        id=encode_id(url),
        title=truncate(title, limits.title),
        url=url,
        source=urlsplit(url).hostname or "",
        email=emails[0],
        requirements=truncate(requirements, limits.requirements),
        additional_info=truncate(additional_info, limits.additional_info),
        category=config.crawl.category,
    )
    return Assembly(opportunity=opportunity, reason=None)


def build_assembly(
    url: str,
    fallback_title: str,
    config: AppConfig,
    fetch: Fetch = fetch_html,
) -> Assembly:
    html = fetch(url, config)
    assembly = assemble_opportunity(url, html, fallback_title, config)
    if assembly.reason:
        logger.debug("Rejected %s: %s", url, assembly.reason)
    return assembly


def build_opportunity(
    url: str,
    fallback_title: str,
    config: AppConfig,
    fetch: Fetch = fetch_html,
) -> Opportunity | None:
    return build_assembly(url, fallback_title, config, fetch).opportunity
