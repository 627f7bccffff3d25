from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

from .models import Section
from .text import contains_any, normalize_space

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)

_HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_SKIPPED = {"script", "style", "noscript", "template"}
_LISTS = {"ul", "ol"}
_MAX_LIST_ITEMS = 4


@dataclass(slots=True)
class ParsedDocument:
    html: str
    title_text: str = ""
    h1_text: str = ""
    first_paragraph: str | None = None
    sections: list[Section] = field(default_factory=list)
    list_items: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _OpenItem:
    depth: int
    index: int
    parts: list[str] = field(default_factory=list)


class _DocumentParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.title_text = ""
        self.h1_text = ""
        self.first_paragraph: str | None = None
        self.sections: list[Section] = []
        self._items: list[str | None] = []
        self._skip_depth = 0
        self._title_parts: list[str] | None = None
        self._heading_tag: str | None = None
        self._heading_parts: list[str] = []
        self._section_heading: str | None = None
        self._section_parts: list[str] = []
        self._paragraph_parts: list[str] | None = None
        self._list_depth = 0
        self._open_items: list[_OpenItem] = []

    @property
    def list_items(self) -> list[str]:
        return [item for item in self._items if item]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIPPED:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return
        if tag == "title" and not self.title_text:
            self._title_parts = []
        elif tag in _HEADINGS:
            self._finish_heading()
            self._finish_section()
            self._heading_tag = tag
            self._heading_parts = []
        elif tag == "p":
            self._finish_paragraph()
            if self.first_paragraph is None:
                self._paragraph_parts = []
        elif tag in _LISTS:
            self._list_depth += 1
        elif tag == "li":
            # An unclosed <li> ends at the next sibling item.
            if self._open_items and self._open_items[-1].depth == self._list_depth:
                self._finish_item()
            self._open_items.append(_OpenItem(depth=self._list_depth, index=len(self._items)))
            self._items.append(None)

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth:
            return
        if tag == "title" and self._title_parts is not None:
            self.title_text = normalize_space(" ".join(self._title_parts))
            self._title_parts = None
        elif tag in _HEADINGS and self._heading_tag is not None:
            self._finish_heading()
        elif tag == "p":
            self._finish_paragraph()
        elif tag in _LISTS:
            while self._open_items and self._open_items[-1].depth >= self._list_depth:
                self._finish_item()
            self._list_depth = max(0, self._list_depth - 1)
        elif tag == "li" and self._open_items:
            self._finish_item()

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        if self._title_parts is not None:
            self._title_parts.append(data)
            return
        if self._heading_tag is not None:
            self._heading_parts.append(data)
        elif self._section_heading is not None:
            self._section_parts.append(data)
        if self._paragraph_parts is not None:
            self._paragraph_parts.append(data)
        for item in self._open_items:
            item.parts.append(data)

    def close(self) -> None:
        super().close()
        self._finish_heading()
        self._finish_section()
        self._finish_paragraph()
        while self._open_items:
            self._finish_item()

    def _finish_heading(self) -> None:
        if self._heading_tag is None:
            return
        heading = normalize_space(" ".join(self._heading_parts))
        if self._heading_tag == "h1" and not self.h1_text:
            self.h1_text = heading
        self._section_heading = heading
        self._section_parts = []
        self._heading_tag = None
        self._heading_parts = []

    def _finish_section(self) -> None:
        if self._section_heading is None:
            return
        content = normalize_space(" ".join(self._section_parts))
        if self._section_heading and content:
            self.sections.append(Section(heading=self._section_heading, content=content))
        self._section_heading = None
        self._section_parts = []

    def _finish_paragraph(self) -> None:
        if self._paragraph_parts is None:
            return
        self.first_paragraph = normalize_space(" ".join(self._paragraph_parts))
        self._paragraph_parts = None

    def _finish_item(self) -> None:
        item = self._open_items.pop()
        self._items[item.index] = normalize_space(" ".join(item.parts))


def parse_document(html: str) -> ParsedDocument:
    parser = _DocumentParser()
    parser.feed(html)
    parser.close()
    return ParsedDocument(
        html=html,
        title_text=parser.title_text,
        h1_text=parser.h1_text,
        first_paragraph=parser.first_paragraph,
        sections=parser.sections,
        list_items=parser.list_items,
    )


def _as_document(source: ParsedDocument | str) -> ParsedDocument:
    if isinstance(source, ParsedDocument):
        return source
    return parse_document(source)


def extract_title(source: ParsedDocument | str, fallback: str = "") -> str:
    document = _as_document(source)
    return document.title_text or document.h1_text or normalize_space(fallback)


def extract_emails(source: ParsedDocument | str) -> list[str]:
    html = source.html if isinstance(source, ParsedDocument) else source
    matches = (match.lower() for match in EMAIL_PATTERN.findall(html))
    return list(dict.fromkeys(matches))


def extract_sections(source: ParsedDocument | str) -> list[Section]:
    return list(_as_document(source).sections)


def extract_list_items(source: ParsedDocument | str) -> list[str]:
    return list(_as_document(source).list_items)


def find_section_text(sections: list[Section], headings: list[str]) -> str:
    for section in sections:
        if contains_any(section.heading, headings):
            return section.content
    return ""


def extract_requirements(
    source: ParsedDocument | str,
    headings: list[str],
    keywords: list[str],
) -> str:
    document = _as_document(source)
    section_text = find_section_text(document.sections, headings)
    if section_text:
        return section_text

    items = [item for item in document.list_items if contains_any(item, keywords)]
    return " ".join(items[:_MAX_LIST_ITEMS])


def extract_additional_info(source: ParsedDocument | str, headings: list[str]) -> str:
    document = _as_document(source)
    section_text = find_section_text(document.sections, headings)
    if section_text:
        return section_text
    return document.first_paragraph or ""
