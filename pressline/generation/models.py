"""Data models for generation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GeneratedMetadata(BaseModel):
    """Title, summary and overline for a record."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Headline")
    summary: str = Field(..., description="Short summary (excerpt)")
    overline: str = Field(..., description="Short context line above the title")
    category: Optional[str] = Field(None, description="Topic id when detected by rules")
