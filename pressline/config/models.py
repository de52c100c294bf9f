"""Configuration models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class SchedulerConfig(BaseModel):
    """Batch scheduler parameters."""

    batch_size: int = Field(2, description="Items per batch", ge=1, le=50)
    feed_size: int = Field(50, description="Max new feed items per section", ge=1, le=1000)
    item_delay: float = Field(3.0, description="Seconds to wait after each item", ge=0.0)
    batch_delay: float = Field(15.0, description="Seconds to wait between batches", ge=0.0)
    section_delay: float = Field(30.0, description="Seconds to wait between sections", ge=0.0)
    mark_unusable_processed: bool = Field(
        False,
        description="Record items with insufficient content as processed",
    )


class FetchConfig(BaseModel):
    """HTTP fetch parameters."""

    feed_timeout: float = Field(30.0, description="Feed request timeout (seconds)", gt=0)
    page_timeout: float = Field(10.0, description="Article page timeout (seconds)", gt=0)
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        description="User agent for page fetches",
    )


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field("openai", description="LLM provider (openai, mock, disabled)")
    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for OpenAI-compatible APIs")
    language: str = Field("formal Rioplatense Spanish", description="Language of generated text")
    max_retries: int = Field(3, description="Retries for transient failures", ge=0, le=10)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(2048, ge=64, le=16000)
    timeout: float = Field(60.0, description="Per-request timeout (seconds)", gt=0)
    backoff_seconds: float = Field(2.0, description="Base backoff between retries", ge=0.0)
    social_text: bool = Field(True, description="Generate social media text per record")


class ValidationConfig(BaseModel):
    """Format contract bounds applied to generated output."""

    min_text_length: int = Field(50, description="Minimum extracted text length", ge=1)
    body_min_words: int = Field(250, ge=1)
    body_max_words: int = Field(600, ge=1)
    title_max_chars: int = Field(80, ge=10)
    summary_min_words: int = Field(40, ge=1)
    summary_max_words: int = Field(50, ge=1)
    overline_max_words: int = Field(4, ge=1)
    min_tags: int = Field(3, ge=1)
    max_tags: int = Field(8, ge=1)
    social_min_chars: int = Field(250, ge=1)
    social_max_chars: int = Field(500, ge=50)

    @field_validator("body_max_words")
    @classmethod
    def validate_body_range(cls, v: int, info) -> int:
        """Validate that the body word range is not empty."""
        if v < info.data.get("body_min_words", 1):
            raise ValueError("body_max_words must be >= body_min_words")
        return v

    @field_validator("summary_max_words")
    @classmethod
    def validate_summary_range(cls, v: int, info) -> int:
        """Validate that the summary word range is not empty."""
        if v < info.data.get("summary_min_words", 1):
            raise ValueError("summary_max_words must be >= summary_min_words")
        return v


class FallbackConfig(BaseModel):
    """Fixed phrases used by the rule-based generators."""

    first_heading: str = Field("Main details")
    second_heading: str = Field("Additional information")
    list_intro: str = Field("Highlights:")
    list_labels: List[str] = Field(
        default_factory=lambda: ["Key point", "Relevant fact", "Context"],
    )
    image_label: str = Field("Image")
    default_title: str = Field("Untitled article")
    default_summary: str = Field("No description available")
    default_category: str = Field("news")
    tag_count: int = Field(5, ge=1, le=20)

    @field_validator("list_labels")
    @classmethod
    def validate_list_labels(cls, v: List[str]) -> List[str]:
        """Three labels are needed to emphasize three list items."""
        if len(v) < 3:
            raise ValueError("list_labels needs at least 3 entries")
        return v


class SinkConfig(BaseModel):
    """Publish sink configuration."""

    kind: str = Field("airtable", description="Sink type (airtable, jsonl)")
    base_id: Optional[str] = Field(None, description="Airtable base ID")
    base_id_env: Optional[str] = Field("AIRTABLE_BASE_ID", description="Environment variable for base ID")
    token: Optional[str] = Field(None, description="Airtable personal access token")
    token_env: Optional[str] = Field("AIRTABLE_TOKEN", description="Environment variable for token")
    api_url: str = Field("https://api.airtable.com/v0", description="Record API root")
    timeout: float = Field(30.0, gt=0)
    output_path: Optional[str] = Field(None, description="JSON-lines output for the jsonl sink")


class ConfigModel(BaseModel):
    """Main configuration model."""

    workspace_root: str = Field("~/Pressline", description="Root directory for state and outputs")
    default_section: Optional[str] = Field(None, description="Section used when none is requested")
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)


class SectionConfig(BaseModel):
    """Newsroom section from sections.yaml."""

    id: str = Field(..., description="Section identifier (state key)")
    name: str = Field(..., description="Display name")
    feed_url: str = Field(..., description="Feed URL")
    table_name: Optional[str] = Field(None, description="Destination table (defaults to name)")
    color: Optional[str] = Field(None, description="Section color")
    priority: int = Field(100, description="Lower runs first")
    enabled: bool = Field(True, description="Whether section is enabled")

    @property
    def destination(self) -> str:
        """Destination table name."""
        return self.table_name or self.name


class SectionsFile(BaseModel):
    """Contents of sections.yaml: section table plus category label lookup."""

    sections: List[SectionConfig] = Field(default_factory=list)
    labels: Dict[str, str] = Field(
        default_factory=dict,
        description="Category id to destination label",
    )

    def get(self, section_id: str) -> Optional[SectionConfig]:
        """Find a section by id."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None
