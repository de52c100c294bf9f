"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """Feed item attachment (usually an image)."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Attachment URL")
    mime_type: Optional[str] = Field(None, description="MIME type")


class FeedItem(BaseModel):
    """Parsed feed item."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="Feed-provided identifier")
    url: str = Field(..., description="Article URL (dedup key)")
    title: str = Field("", description="Article title")
    content_text: Optional[str] = Field(None, description="Plain-text content from the feed")
    content_html: Optional[str] = Field(None, description="HTML content from the feed")
    image: Optional[str] = Field(None, description="Lead image URL")
    attachments: List[Attachment] = Field(default_factory=list, description="Attachments")
    authors: List[str] = Field(default_factory=list, description="Author names")
    published_at: Optional[datetime] = Field(None, description="Publication date")

    @property
    def image_urls(self) -> List[str]:
        """Attachment URLs, falling back to the lead image."""
        urls = [a.url for a in self.attachments if a.url]
        if not urls and self.image:
            urls = [self.image]
        return urls


class FeedResult(BaseModel):
    """Result of fetching a feed."""

    section_id: str = Field(..., description="Section ID")
    feed_url: str = Field(..., description="Feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    items: List[FeedItem] = Field(default_factory=list, description="Parsed feed items")
    error: Optional[str] = Field(None, description="Error message if failed")
    item_count: int = Field(0, description="Number of items fetched")


class PageContent(BaseModel):
    """Fetched article page."""

    url: str = Field(..., description="Requested URL")
    final_url: str = Field(..., description="URL after redirects")
    html: str = Field("", description="Raw markup")
    fetch_success: bool = Field(True, description="Whether fetch was successful")
    error: Optional[str] = Field(None, description="Error message if failed")


class ExtractedImage(BaseModel):
    """Captioned image found in article markup."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Image URL")
    alt_text: str = Field("Image", description="Alt text")
    caption: str = Field(..., description="Caption text")


class EmbedLinks(BaseModel):
    """Canonical links to social/video embeds found in the page."""

    model_config = ConfigDict(frozen=True)

    youtube: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None

    def is_empty(self) -> bool:
        """Whether no embed was found."""
        return not any((self.youtube, self.twitter, self.instagram, self.facebook))


class ExtractionResult(BaseModel):
    """Primary text plus captioned images, in document order."""

    plain_text: str = Field("", description="Main article text")
    images: List[ExtractedImage] = Field(default_factory=list, description="Captioned images")
    embeds: EmbedLinks = Field(default_factory=EmbedLinks, description="Embed links")

    @property
    def image_urls(self) -> List[str]:
        """Image URLs in document order."""
        return [image.url for image in self.images]

    @property
    def captions(self) -> List[str]:
        """Captions in document order."""
        return [image.caption for image in self.images]
