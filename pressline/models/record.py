"""Record models produced by the enrichment pipeline."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..ingestion import EmbedLinks


class EnrichedRecord(BaseModel):
    """Assembled draft record, ready for the publish sink."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(..., description="Original article URL (dedup key)")
    title: str = Field(..., description="Headline")
    overline: str = Field(..., description="Short context line above the title")
    excerpt: str = Field(..., description="Summary shown under the title")
    body: str = Field(..., description="Markdown body")
    images: List[str] = Field(default_factory=list, description="Extracted image URLs in document order")
    image_url: Optional[str] = Field(
        None,
        description="Lead image: comma-joined feed attachments, else the first extracted image",
    )
    tags: str = Field("", description="Comma-joined tags")
    social_text: str = Field("", description="Social media post text")
    section_id: str = Field(..., description="Section ID")
    section_label: str = Field(..., description="Section display name")
    embeds: EmbedLinks = Field(default_factory=EmbedLinks, description="Embed links")
    status: str = Field("draft", description="Editorial status")
    generation: Dict[str, str] = Field(
        default_factory=dict,
        description="Stage name to 'ai' or 'fallback'",
    )


class ItemStatus(str, Enum):
    """Result of processing one feed item."""

    PUBLISHABLE = "publishable"
    SKIPPED = "skipped"
    FETCH_FAILED = "fetch_failed"
    FAILED = "failed"


class ItemOutcome(BaseModel):
    """Outcome of one item passing through the orchestrator."""

    url: str = Field(..., description="Item URL")
    status: ItemStatus = Field(..., description="Outcome status")
    record: Optional[EnrichedRecord] = Field(None, description="Record when publishable")
    reason: Optional[str] = Field(None, description="Why the item was not publishable")
    sources: Dict[str, str] = Field(default_factory=dict, description="Stage name to branch taken")
