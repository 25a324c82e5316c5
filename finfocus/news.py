"""News timeframes and the shapes of a third-party news API.

The API types mirror the NewsAPI.org JSON layout for a future integration;
nothing in the application requests them over the network.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from finfocus.domain import NewsArticle, NewsCategory
from finfocus.periods import month_range, start_of_day, week_range


class NewsTimeframe(Enum):
    LAST_HOUR = "Last Hour"
    TODAY = "Today"
    THIS_WEEK = "This Week"
    THIS_MONTH = "This Month"
    ALL = "All Time"

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now()
        if self is NewsTimeframe.LAST_HOUR:
            return now - timedelta(hours=1)
        if self is NewsTimeframe.TODAY:
            return start_of_day(now)
        if self is NewsTimeframe.THIS_WEEK:
            return week_range(now)[0]
        if self is NewsTimeframe.THIS_MONTH:
            return month_range(now)[0]
        return datetime.min


@dataclass(frozen=True)
class NewsAPISource:
    name: str
    id: Optional[str] = None


@dataclass(frozen=True)
class NewsAPIArticle:
    source: NewsAPISource
    title: str
    url: str
    published_at: str
    author: Optional[str] = None
    description: Optional[str] = None
    url_to_image: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NewsAPIArticle":
        source = d.get("source") or {}
        return cls(
            source=NewsAPISource(name=source.get("name", ""), id=source.get("id")),
            title=d["title"],
            url=d["url"],
            published_at=d["publishedAt"],
            author=d.get("author"),
            description=d.get("description"),
            url_to_image=d.get("urlToImage"),
            content=d.get("content"),
        )


@dataclass(frozen=True)
class NewsAPIResponse:
    status: str
    total_results: int
    articles: List[NewsAPIArticle] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NewsAPIResponse":
        return cls(
            status=d["status"],
            total_results=int(d.get("totalResults", 0)),
            articles=[NewsAPIArticle.from_dict(a) for a in d.get("articles", [])],
        )


def convert_api_article(api_article: NewsAPIArticle) -> Optional[NewsArticle]:
    """Map an API article onto ``NewsArticle``; ``None`` when the timestamp is unreadable."""
    stamp = api_article.published_at
    if stamp.endswith("Z"):
        stamp = stamp[:-1] + "+00:00"
    try:
        published = datetime.fromisoformat(stamp)
    except ValueError:
        return None
    # stored dates are naive local time
    if published.tzinfo is not None:
        published = published.astimezone().replace(tzinfo=None)

    return NewsArticle(
        title=api_article.title,
        summary=api_article.description or "No summary available",
        source=api_article.source.name,
        published_date=published,
        category=NewsCategory.BUSINESS,
        image_url=api_article.url_to_image,
        article_url=api_article.url,
    )
