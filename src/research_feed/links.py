from __future__ import annotations

from html.parser import HTMLParser
from urllib.parse import urljoin, urlsplit

from .models import CandidateLink
from .text import normalize_space

_TITLE_HEADINGS = {"h2", "h3"}


class _AnchorParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.anchors: list[tuple[str, str]] = []
        self._in_anchor = False
        self._href: str | None = None
        self._title: str | None = None
        self._heading_parts: list[str] | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "a":
            # Anchors cannot nest; a new one closes the previous.
            self._finish_anchor()
            self._in_anchor = True
            for key, value in attrs:
                if key == "href" and value:
                    self._href = value.strip()
                    break
            return
        if self._in_anchor and self._title is None and tag in _TITLE_HEADINGS:
            self._heading_parts = []

    def handle_endtag(self, tag: str) -> None:
        if tag == "a":
            self._finish_anchor()
            return
        if tag in _TITLE_HEADINGS and self._heading_parts is not None:
            title = normalize_space(" ".join(self._heading_parts))
            self._heading_parts = None
            if title:
                self._title = title

    def handle_data(self, data: str) -> None:
        if self._heading_parts is not None:
            self._heading_parts.append(data)

    def close(self) -> None:
        super().close()
        self._finish_anchor()

    def _finish_anchor(self) -> None:
        if self._heading_parts is not None and self._title is None:
            self._title = normalize_space(" ".join(self._heading_parts)) or None
        if self._in_anchor and self._href and self._title:
            self.anchors.append((self._href, self._title))
        self._in_anchor = False
        self._href = None
        self._title = None
        self._heading_parts = None


def extract_links(
    html: str,
    base_url: str,
    trusted_domains: list[str] | None = None,
) -> list[CandidateLink]:
    parser = _AnchorParser()
    parser.feed(html)
    parser.close()

    unique: dict[str, str] = {}
    for href, title in parser.anchors:
        url = _resolve(base_url, href)
        if not url:
            continue
        if trusted_domains and not is_trusted_url(url, trusted_domains):
            continue
        unique.setdefault(url, title)

    return [CandidateLink(url=url, title=title) for url, title in unique.items()]


def is_trusted_url(url: str, trusted_domains: list[str]) -> bool:
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return False
    if parts.scheme not in {"http", "https"} or not host:
        return False
    host = host.rstrip(".")
    return any(host == domain or host.endswith("." + domain) for domain in trusted_domains)


def _resolve(base_url: str, href: str) -> str | None:
    try:
        url = urljoin(base_url, href)
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not host:
        return None
    return url
