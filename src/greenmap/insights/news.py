"""Parser for the line-oriented news format requested from the model."""

from datetime import date

from .models import NewsArticle

ARTICLE_SEPARATOR = "---"

_FIELDS = {
    "TITLE:": "title",
    "SOURCE:": "source",
    "URL:": "url",
    "PUBLISHED_AT:": "published_at",
    "SUMMARY:": "summary",
    "IMAGE_URL:": "image_url",
}

_REQUIRED = ("title", "source", "url", "summary", "image_url")


def _parse_block(block: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for line in block.strip().splitlines():
        line = line.strip()
        for prefix, name in _FIELDS.items():
            if line.startswith(prefix):
                data[name] = line[len(prefix):].strip()
                break
    return data


def parse_news_articles(text: str, today: date | None = None) -> list[NewsArticle]:
    """Parse ``---``-separated article blocks into NewsArticle objects.

    Blocks missing a title, source, url, summary or image url are dropped.
    A missing publication date defaults to ``today``. Ids are assigned
    sequentially from 1 in the order articles appear.
    """
    fallback_date = (today or date.today()).isoformat()
    articles = []

    for block in text.split(ARTICLE_SEPARATOR):
        if not block.strip():
            continue
        data = _parse_block(block)
        if not all(data.get(name) for name in _REQUIRED):
            continue
        articles.append(NewsArticle(
            id=len(articles) + 1,
            title=data["title"],
            source=data["source"],
            url=data["url"],
            published_at=data.get("published_at") or fallback_date,
            summary=data["summary"],
            image_url=data["image_url"],
        ))

    return articles
