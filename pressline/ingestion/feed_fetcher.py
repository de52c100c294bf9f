"""Feed fetcher for JSON Feed sources, with RSS/Atom support."""

import calendar
import json
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import httpx
import pendulum
from pydantic import ValidationError
from rich.console import Console

from ..config import SectionConfig
from .models import Attachment, FeedItem, FeedResult

console = Console()


class FetchFailure(Exception):
    """A feed or page could not be retrieved or parsed."""


def _parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-like date string, returning None when unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return pendulum.parse(value)
    except ValueError:
        return None


def _author_names(authors: Any) -> List[str]:
    names = []
    for author in authors or []:
        if isinstance(author, dict) and author.get("name"):
            names.append(str(author["name"]))
        elif isinstance(author, str):
            names.append(author)
    return names


def parse_json_feed(data: Any) -> List[FeedItem]:
    """
    Convert a JSON Feed document into feed items.

    Raises:
        FetchFailure: If the document has no ``items`` array
    """
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise FetchFailure("No valid items in feed data")

    items = []
    for raw in data["items"]:
        if not isinstance(raw, dict):
            continue
        url = raw.get("url") or raw.get("external_url") or raw.get("id")
        if not url:
            continue

        attachments = []
        for attachment in raw.get("attachments") or []:
            if isinstance(attachment, dict) and attachment.get("url"):
                attachments.append(
                    Attachment(url=attachment["url"], mime_type=attachment.get("mime_type"))
                )

        try:
            item = FeedItem(
                id=str(raw["id"]) if raw.get("id") is not None else None,
                url=str(url),
                title=raw.get("title") or "",
                content_text=raw.get("content_text"),
                content_html=raw.get("content_html"),
                image=raw.get("image"),
                attachments=attachments,
                authors=_author_names(raw.get("authors")),
                published_at=_parse_date(raw.get("date_published")),
            )
        except ValidationError as e:
            console.print(f"[yellow]Skipping malformed feed item {url}: {e.error_count()} invalid field(s)[/yellow]")
            continue
        items.append(item)
    return items


def parse_rss_feed(text: str) -> List[FeedItem]:
    """
    Convert an RSS/Atom document into feed items.

    Raises:
        FetchFailure: If the document is not a parseable feed
    """
    feed = feedparser.parse(text)
    if feed.bozo and not feed.entries:
        raise FetchFailure(f"Invalid feed: {feed.bozo_exception}")

    items = []
    for entry in feed.entries:
        link = entry.get("link")
        if not link:
            continue

        published = None
        parsed = entry.get("published_parsed") or entry.get("updated_parsed")
        if parsed:
            published = datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)

        content_html = None
        if entry.get("content"):
            content_html = entry.content[0].get("value")
        elif entry.get("summary"):
            content_html = entry.summary

        attachments = []
        for enclosure in entry.get("enclosures") or []:
            href = enclosure.get("href")
            if href and str(enclosure.get("type", "")).startswith("image/"):
                attachments.append(Attachment(url=href, mime_type=enclosure.get("type")))
        for media in entry.get("media_content") or []:
            if media.get("url") and media.get("medium", "image") == "image":
                attachments.append(Attachment(url=media["url"], mime_type=media.get("type")))

        try:
            item = FeedItem(
                id=entry.get("id"),
                url=link,
                title=entry.get("title", ""),
                content_html=content_html,
                attachments=attachments,
                authors=[entry.author] if entry.get("author") else [],
                published_at=published,
            )
        except ValidationError as e:
            console.print(f"[yellow]Skipping malformed feed entry {link}: {e.error_count()} invalid field(s)[/yellow]")
            continue
        items.append(item)
    return items


def parse_feed(body: str, content_type: str = "") -> List[FeedItem]:
    """Parse a feed body, choosing JSON Feed or RSS/Atom by content."""
    stripped = body.lstrip()
    if "json" in content_type.lower() or stripped.startswith("{"):
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise FetchFailure(f"Invalid JSON feed: {e}")
        return parse_json_feed(data)
    return parse_rss_feed(body)


class FeedFetcher:
    """Fetch and parse section feeds."""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        """Initialize feed fetcher."""
        self.timeout = timeout
        self.transport = transport

    async def fetch_feed(self, section: SectionConfig) -> FeedResult:
        """Fetch and parse a single section feed."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(section.feed_url)
                response.raise_for_status()

            items = parse_feed(response.text, response.headers.get("content-type", ""))
            return FeedResult(
                section_id=section.id,
                feed_url=section.feed_url,
                success=True,
                items=items,
                item_count=len(items),
            )

        except FetchFailure as e:
            return FeedResult(
                section_id=section.id,
                feed_url=section.feed_url,
                success=False,
                error=str(e),
            )
        except httpx.HTTPError as e:
            return FeedResult(
                section_id=section.id,
                feed_url=section.feed_url,
                success=False,
                error=f"HTTP error: {e}",
            )
