"""Candidate record from the election dataset."""

from dataclasses import dataclass, field
from typing import Optional

from app.exceptions import ParseError


@dataclass
class Candidate:
    """A candidate as published in ``candidates/{filename}``.

    ``race`` holds the race filter string of the contest the candidate
    is running in (e.g. ``ga_governor``), not a nested race object.
    """

    id: str
    name: str
    party: str
    race: str
    is_incumbent: bool = False
    background: str = ""
    experience: list[str] = field(default_factory=list)
    key_issues: list[str] = field(default_factory=list)
    website: Optional[str] = None
    photo_url: Optional[str] = None
    endorsements: list[str] = field(default_factory=list)
    social_media: dict[str, Optional[str]] = field(default_factory=dict)
    sources: list[str] = field(default_factory=list)
    external_ids: dict[str, str] = field(default_factory=dict)

    @property
    def is_federal(self) -> bool:
        return self.race.startswith(("us_senate", "us_house"))

    @classmethod
    def from_dict(cls, data: dict) -> "Candidate":
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                party=data.get("party", ""),
                race=data["race"],
                is_incumbent=bool(data.get("isIncumbent", False)),
                background=data.get("background") or "",
                experience=list(data.get("experience") or []),
                key_issues=list(data.get("keyIssues") or []),
                website=data.get("website"),
                photo_url=data.get("photoUrl"),
                endorsements=list(data.get("endorsements") or []),
                social_media=dict(data.get("socialMedia") or {}),
                sources=list(data.get("sources") or []),
                external_ids=dict(data.get("externalIds") or {}),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed candidate document: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "party": self.party,
            "race": self.race,
            "isIncumbent": self.is_incumbent,
            "background": self.background,
            "experience": self.experience,
            "keyIssues": self.key_issues,
            "website": self.website,
            "photoUrl": self.photo_url,
            "endorsements": self.endorsements,
            "socialMedia": self.social_media,
            "sources": self.sources,
            "externalIds": self.external_ids,
        }
