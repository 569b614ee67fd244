"""News feed configuration and article records."""

from dataclasses import dataclass, field
from typing import Optional

from app.exceptions import ParseError


@dataclass
class FeedDescriptor:
    """An RSS source from ``news/rss-feeds.json``.

    ``candidate_id``, ``race_filter`` and ``race_tags`` only drive
    client-side filtering; a feed tagged ``all`` is general interest.
    """

    id: str
    name: str
    url: str
    category: str = ""
    priority: int = 0
    description: Optional[str] = None
    candidate_id: Optional[str] = None
    race_filter: Optional[str] = None
    race_tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "FeedDescriptor":
        try:
            return cls(
                id=data["id"],
                name=data.get("name") or data["id"],
                url=data["url"],
                category=data.get("category") or "",
                priority=int(data.get("priority") or 0),
                description=data.get("description"),
                candidate_id=data.get("candidateId"),
                race_filter=data.get("raceFilter"),
                race_tags=list(data.get("raceTags") or []),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Malformed feed descriptor: {e!r}") from e


@dataclass
class FeedConfig:
    """All configured feeds plus the keywords used to build searches."""

    feeds: list[FeedDescriptor] = field(default_factory=list)
    search_keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "FeedConfig":
        if not isinstance(data, dict):
            raise ParseError("Feed configuration must be an object")
        return cls(
            feeds=[FeedDescriptor.from_dict(f) for f in data.get("feeds") or []],
            search_keywords=list(data.get("searchKeywords") or []),
        )


@dataclass
class NewsArticle:
    """A headline merged from one or more feeds; ``link`` identifies it."""

    title: str
    link: str
    pub_date: str
    source: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "NewsArticle":
        return cls(
            title=data.get("title", ""),
            link=data.get("link", ""),
            pub_date=data.get("pubDate", ""),
            source=data.get("source", ""),
            description=data.get("description"),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.pub_date,
            "source": self.source,
            "description": self.description,
        }


@dataclass
class FeaturedArticle:
    """Hand-picked article from ``news/featured-articles.json``."""

    id: str
    title: str
    link: str
    source: str = ""
    pub_date: str = ""
    description: str = ""
    relevance: str = ""
    category: str = "all"
    image_url: Optional[str] = None
    featured: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "FeaturedArticle":
        try:
            return cls(
                id=data["id"],
                title=data.get("title", ""),
                link=data.get("link", ""),
                source=data.get("source") or "",
                pub_date=data.get("pubDate") or "",
                description=data.get("description") or "",
                relevance=data.get("relevance") or "",
                category=data.get("category") or "all",
                image_url=data.get("imageUrl"),
                featured=bool(data.get("featured", False)),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed featured article: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "source": self.source,
            "pubDate": self.pub_date,
            "description": self.description,
            "relevance": self.relevance,
            "category": self.category,
            "imageUrl": self.image_url,
            "featured": self.featured,
        }
