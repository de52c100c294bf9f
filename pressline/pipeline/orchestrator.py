"""Enrichment orchestrator: turns one feed item into a draft record."""

from typing import Any, Callable, Dict, Optional, Sequence, TypeVar

from rich.console import Console

from ..config import LLMConfig, SectionConfig, ValidationConfig
from ..generation import (
    FallbackGenerators,
    GeneratedMetadata,
    GenerationFailure,
    GenerationOptions,
    TextGenerator,
    ValidationResult,
)
from ..generation import prompts
from ..generation.validators import (
    clean_markdown,
    normalize_tags,
    parse_metadata,
    validate_body,
    validate_metadata,
    validate_social_text,
    validate_tags,
)
from ..ingestion import ContentExtractor, ContentFetcher, FeedItem
from ..models import EnrichedRecord, ItemOutcome, ItemStatus

console = Console()

T = TypeVar("T")


class EnrichmentOrchestrator:
    """Runs fetch, extraction and the generation stages for a single item."""

    def __init__(
        self,
        generator: TextGenerator,
        content_fetcher: ContentFetcher,
        extractor: Optional[ContentExtractor] = None,
        fallbacks: Optional[FallbackGenerators] = None,
        validation: Optional[ValidationConfig] = None,
        llm: Optional[LLMConfig] = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            generator: Text generation capability
            content_fetcher: Article page fetcher
            extractor: Content extractor
            fallbacks: Rule-based generators used when AI output is unusable
            validation: Format contract bounds
            llm: Language, sampling and retry settings
        """
        self.generator = generator
        self.content_fetcher = content_fetcher
        self.extractor = extractor or ContentExtractor()
        self.fallbacks = fallbacks or FallbackGenerators()
        self.validation = validation or ValidationConfig()
        self.llm = llm or LLMConfig()
        self.options = GenerationOptions(
            max_retries=self.llm.max_retries,
            temperature=self.llm.temperature,
            max_tokens=self.llm.max_tokens,
            timeout=self.llm.timeout,
        )

    async def enrich(self, item: FeedItem, section: SectionConfig) -> Optional[EnrichedRecord]:
        """Process an item and return its record, or None when it is not publishable."""
        outcome = await self.process(item, section)
        return outcome.record

    async def process(self, item: FeedItem, section: SectionConfig) -> ItemOutcome:
        """
        Process a single feed item.

        Never raises for ordinary failures: fetch problems, thin content and
        unexpected errors are reported through the outcome status.
        """
        console.print(f"[cyan]Processing:[/cyan] {item.title or item.url}")
        try:
            return await self._process(item, section)
        except Exception as e:
            console.print(f"[red]  Unexpected error processing {item.url}: {e}[/red]")
            return ItemOutcome(url=item.url, status=ItemStatus.FAILED, reason=str(e))

    async def _process(self, item: FeedItem, section: SectionConfig) -> ItemOutcome:
        page = await self.content_fetcher.fetch_page(item.url)
        html = page.html if page.fetch_success else ""
        if not html:
            if not item.content_html:
                console.print(f"[red]  ✗ Fetch failed: {page.error}[/red]")
                return ItemOutcome(url=item.url, status=ItemStatus.FETCH_FAILED, reason=page.error)
            console.print(f"[yellow]  Page unavailable ({page.error}), using feed content[/yellow]")
            html = item.content_html

        extraction = self.extractor.extract(html, page.final_url or item.url)
        text = extraction.plain_text.strip()
        if not text and item.content_text:
            text = item.content_text.strip()

        if len(text) < self.validation.min_text_length:
            reason = f"insufficient content ({len(text)} chars)"
            console.print(f"[yellow]  Skipped: {reason}[/yellow]")
            return ItemOutcome(url=item.url, status=ItemStatus.SKIPPED, reason=reason)

        sources: Dict[str, str] = {}
        body = await self._rewrite_body(text, extraction.captions, sources)
        metadata = await self._generate_metadata(text, sources)
        tags = await self._generate_tags(metadata, body, sources)

        social_text = ""
        if self.llm.social_text:
            category = metadata.category or self.fallbacks.detect_category(text)
            social_text = await self._generate_social_text(metadata, tags, category, sources)

        # Feed attachments lead; extracted images are kept separately
        images = extraction.image_urls
        lead_image = ", ".join(item.image_urls) or (images[0] if images else None)
        record = EnrichedRecord(
            source_url=item.url,
            title=metadata.title,
            overline=metadata.overline,
            excerpt=metadata.summary,
            body=body,
            images=images,
            image_url=lead_image,
            tags=tags,
            social_text=social_text,
            section_id=section.id,
            section_label=section.name,
            embeds=extraction.embeds,
            generation=sources,
        )
        console.print(f"[green]  ✓ Record ready:[/green] {record.title}")
        return ItemOutcome(url=item.url, status=ItemStatus.PUBLISHABLE, record=record, sources=sources)

    async def _attempt(
        self,
        stage: str,
        prompt: str,
        postprocess: Callable[[str], T],
        validate: Callable[[T], ValidationResult],
    ) -> Optional[T]:
        """One generation call; None when it fails, cannot be parsed or is rejected."""
        try:
            raw = await self.generator.generate(prompt, self.options)
        except GenerationFailure as e:
            console.print(f"[dim]  {stage}: generation failed ({e})[/dim]")
            return None

        if not raw or not raw.strip():
            console.print(f"[dim]  {stage}: empty output[/dim]")
            return None

        try:
            value = postprocess(raw)
        except ValueError as e:
            console.print(f"[dim]  {stage}: unreadable output ({e})[/dim]")
            return None

        result = validate(value)
        if not result:
            console.print(f"[dim]  {stage}: rejected ({'; '.join(result.reasons)})[/dim]")
            return None
        return value

    async def _run_stage(
        self,
        stage: str,
        prompt_chain: Sequence[str],
        postprocess: Callable[[str], T],
        validate: Callable[[T], ValidationResult],
        fallback: Callable[[], T],
        sources: Dict[str, str],
    ) -> T:
        """
        Try each prompt in order, then fall back to the rule-based generator.

        Args:
            stage: Stage name, recorded in ``sources``
            prompt_chain: Prompts tried in order
            postprocess: Turns raw output into the stage value (ValueError if unreadable)
            validate: Format check applied before AI output is accepted
            fallback: Deterministic producer used when every prompt fails
            sources: Stage name to branch mapping, updated in place

        Returns:
            Stage value
        """
        for prompt in prompt_chain:
            value = await self._attempt(stage, prompt, postprocess, validate)
            if value is not None:
                sources[stage] = "ai"
                console.print(f"  [green]✓[/green] {stage}: ai")
                return value

        sources[stage] = "fallback"
        console.print(f"  [yellow]↺[/yellow] {stage}: fallback")
        return fallback()

    async def _rewrite_body(self, text: str, captions: Sequence[str], sources: Dict[str, str]) -> str:
        image_label = self.fallbacks.config.image_label
        chain = [
            prompts.build_body_prompt(
                text,
                captions,
                self.llm.language,
                self.validation.body_min_words,
                self.validation.body_max_words,
                image_label,
            ),
            prompts.build_simple_body_prompt(text, captions, self.llm.language, image_label),
        ]
        return await self._run_stage(
            "body",
            chain,
            clean_markdown,
            lambda body: validate_body(body, self.validation),
            lambda: self.fallbacks.body(text, captions),
            sources,
        )

    async def _generate_metadata(self, text: str, sources: Dict[str, str]) -> GeneratedMetadata:
        chain = [prompts.build_metadata_prompt(text, self.llm.language, self.validation.title_max_chars)]
        return await self._run_stage(
            "metadata",
            chain,
            parse_metadata,
            lambda metadata: validate_metadata(metadata, self.validation),
            lambda: self.fallbacks.metadata(text, self.validation.title_max_chars),
            sources,
        )

    async def _generate_tags(self, metadata: GeneratedMetadata, body: str, sources: Dict[str, str]) -> str:
        count = self.fallbacks.config.tag_count
        chain = [prompts.build_tags_prompt(metadata.title, metadata.summary, body, count)]
        return await self._run_stage(
            "tags",
            chain,
            normalize_tags,
            lambda tags: validate_tags(tags, self.validation),
            lambda: self.fallbacks.tags(metadata.title, metadata.summary, body),
            sources,
        )

    async def _generate_social_text(
        self,
        metadata: GeneratedMetadata,
        tags: str,
        category: str,
        sources: Dict[str, str],
    ) -> str:
        max_chars = self.validation.social_max_chars
        chain = [
            prompts.build_social_prompt(metadata.title, metadata.summary, tags, self.llm.language, max_chars)
        ]
        return await self._run_stage(
            "social_text",
            chain,
            _strip,
            lambda text: validate_social_text(text, self.validation),
            lambda: self.fallbacks.social_text(metadata.title, metadata.summary, tags, category, max_chars),
            sources,
        )

    def get_usage_stats(self) -> Dict[str, Any]:
        """Usage statistics of the underlying generator."""
        return self.generator.get_usage_stats()


def _strip(text: str) -> str:
    return text.strip().strip('"').strip()
