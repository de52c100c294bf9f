"""Feed ingestion, page fetching and content extraction."""

from .content_fetcher import ContentFetcher
from .extractor import ContentExtractor, extract_embeds, extract_images, extract_text
from .feed_fetcher import FeedFetcher, FetchFailure, parse_feed
from .models import (
    Attachment,
    EmbedLinks,
    ExtractedImage,
    ExtractionResult,
    FeedItem,
    FeedResult,
    PageContent,
)

__all__ = [
    "FeedFetcher",
    "ContentFetcher",
    "ContentExtractor",
    "FetchFailure",
    "parse_feed",
    "extract_text",
    "extract_images",
    "extract_embeds",
    "Attachment",
    "FeedItem",
    "FeedResult",
    "PageContent",
    "ExtractedImage",
    "ExtractionResult",
    "EmbedLinks",
]
