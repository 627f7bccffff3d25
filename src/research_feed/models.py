from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(slots=True)
class Opportunity:
    id: str
    title: str
    url: str
    source: str
    email: str
    requirements: str
    additional_info: str
    category: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "email": self.email,
            "requirements": self.requirements,
            "additionalInfo": self.additional_info,
            "category": self.category,
        }


@dataclass(slots=True)
class CandidateLink:
    url: str
    title: str


@dataclass(slots=True)
class Section:
    heading: str
    content: str


@dataclass(slots=True)
class ResultSet:
    opportunities: list[Opportunity] = field(default_factory=list)
    updated_at: str = field(default_factory=lambda: utc_timestamp())

    def to_dict(self) -> dict:
        return {
            "updatedAt": self.updated_at,
            "opportunities": [opp.to_dict() for opp in self.opportunities],
        }


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
