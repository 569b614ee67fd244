"""Race and race-category records from the election dataset."""

from dataclasses import dataclass, field
from typing import Any

from app.exceptions import ParseError


@dataclass
class Race:
    """One electoral contest.

    ``race_filter`` is unique across races and is what candidates and feeds
    point at. ``race_tags`` are broad labels shared by many races and are
    used for category pages.
    """

    id: str
    title: str
    race_filter: str
    open_seat: bool = False
    subtitle: str = ""
    about_content: str = ""
    candidates_content: str = ""
    news_title: str = ""
    race_tags: list[str] = field(default_factory=list)
    external_ids: dict[str, str] = field(default_factory=dict)
    election_info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Race":
        try:
            return cls(
                id=data["id"],
                title=data.get("title", ""),
                race_filter=data["raceFilter"],
                open_seat=bool(data.get("openSeat", False)),
                subtitle=data.get("subtitle") or "",
                about_content=data.get("aboutContent") or "",
                candidates_content=data.get("candidatesContent") or "",
                news_title=data.get("newsTitle") or "",
                race_tags=list(data.get("raceTags") or []),
                external_ids=dict(data.get("externalIds") or {}),
                election_info=dict(data.get("electionInfo") or {}),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed race document: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "openSeat": self.open_seat,
            "subtitle": self.subtitle,
            "aboutContent": self.about_content,
            "candidatesContent": self.candidates_content,
            "newsTitle": self.news_title,
            "raceFilter": self.race_filter,
            "raceTags": self.race_tags,
            "externalIds": self.external_ids,
            "electionInfo": self.election_info,
        }


@dataclass
class Category:
    """A group of races shown together, selected by ``race_tags``."""

    id: str
    title: str
    subtitle: str = ""
    description_heading: str = ""
    description: str = ""
    news_title: str = ""
    race_tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        try:
            return cls(
                id=data["id"],
                title=data.get("title", ""),
                subtitle=data.get("subtitle") or "",
                description_heading=data.get("descriptionHeading") or "",
                description=data.get("description") or "",
                news_title=data.get("newsTitle") or "",
                race_tags=list(data.get("raceTags") or []),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed category document: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "descriptionHeading": self.description_heading,
            "description": self.description,
            "newsTitle": self.news_title,
            "raceTags": self.race_tags,
        }
