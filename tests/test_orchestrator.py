import asyncio

from pressline.config import LLMConfig, ValidationConfig
from pressline.generation import DisabledProvider, FallbackGenerators, MockLLMProvider
from pressline.ingestion import Attachment, ExtractedImage, ExtractionResult, EmbedLinks
from pressline.models import ItemStatus
from pressline.pipeline import EnrichmentOrchestrator
from pressline.publish import to_record_fields

from helpers import (
    ARTICLE_TEXT,
    FakeContentFetcher,
    FakeExtractor,
    ai_handler,
    make_item,
    make_section,
    valid_body,
)

URL = "https://news.example.com/irrigation"
PAGE = "<html>irrigation page</html>"


def _orchestrator(generator, pages=None, results=None, **kwargs) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        generator=generator,
        content_fetcher=FakeContentFetcher({URL: PAGE} if pages is None else pages),
        extractor=FakeExtractor({PAGE: ExtractionResult(plain_text=ARTICLE_TEXT)} if results is None else results),
        fallbacks=kwargs.pop("fallbacks", FallbackGenerators(labels={"agriculture": "Agro"})),
        llm=kwargs.pop("llm", LLMConfig()),
        **kwargs,
    )


def test_ai_output_is_used_when_valid() -> None:
    generator = MockLLMProvider(handler=ai_handler())
    orchestrator = _orchestrator(generator)

    outcome = asyncio.run(orchestrator.process(make_item(URL), make_section("agro")))

    assert outcome.status == ItemStatus.PUBLISHABLE
    record = outcome.record
    assert record.title == "Irrigation plan reaches twelve districts"
    assert record.overline == "Water for farms"
    assert record.body == valid_body()
    assert record.tags == "Irrigation, Agro, Credit"
    assert record.social_text.startswith("🌾")
    assert record.section_id == "agro"
    assert record.status == "draft"
    assert record.generation == {"body": "ai", "metadata": "ai", "tags": "ai", "social_text": "ai"}
    assert len(generator.calls) == 4


def test_body_without_heading_is_replaced_by_fallback() -> None:
    invalid = valid_body().replace("## Irrigation plan\n\n", "")
    generator = MockLLMProvider(handler=ai_handler(body=invalid))
    fallbacks = FallbackGenerators()
    orchestrator = _orchestrator(generator, fallbacks=fallbacks)

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.body == fallbacks.body(ARTICLE_TEXT, [])
    assert record.generation["body"] == "fallback"
    assert record.generation["metadata"] == "ai"
    body_prompts = [p for p in generator.calls if p.startswith("Rewrite")]
    assert len(body_prompts) == 2


def test_simplified_body_prompt_is_tried_second() -> None:
    def handle(prompt: str) -> str:
        if prompt.startswith("Rewrite the following news article"):
            return "not formatted"
        return ai_handler()(prompt)

    generator = MockLLMProvider(handler=handle)
    orchestrator = _orchestrator(generator)

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.body == valid_body()
    assert record.generation["body"] == "ai"
    assert generator.calls[1].startswith("Rewrite this text")


def test_disabled_generation_uses_every_fallback() -> None:
    fallbacks = FallbackGenerators(labels={"agriculture": "Agro"})
    orchestrator = _orchestrator(DisabledProvider(), fallbacks=fallbacks)

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert set(record.generation.values()) == {"fallback"}
    expected = fallbacks.metadata(ARTICLE_TEXT)
    assert record.title == expected.title
    assert record.overline == expected.overline
    assert record.excerpt == expected.summary
    assert record.tags == fallbacks.tags(expected.title, expected.summary, record.body)
    assert len(record.social_text) <= 500


def test_unreadable_metadata_falls_back() -> None:
    def handle(prompt: str) -> str:
        if "Return only JSON" in prompt:
            return "Sure! Here is your metadata."
        return ai_handler()(prompt)

    orchestrator = _orchestrator(MockLLMProvider(handler=handle))

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.generation["metadata"] == "fallback"
    assert record.overline == "Agro"


def test_short_text_is_skipped_without_generation_calls() -> None:
    generator = MockLLMProvider(handler=ai_handler())
    orchestrator = _orchestrator(generator, results={PAGE: ExtractionResult(plain_text="Too short.")})

    outcome = asyncio.run(orchestrator.process(make_item(URL), make_section("agro")))

    assert outcome.status == ItemStatus.SKIPPED
    assert outcome.record is None
    assert generator.calls == []
    assert asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro"))) is None


def test_fetch_failure_without_feed_content() -> None:
    generator = MockLLMProvider(handler=ai_handler())
    orchestrator = _orchestrator(generator, pages={})

    outcome = asyncio.run(orchestrator.process(make_item(URL), make_section("agro")))

    assert outcome.status == ItemStatus.FETCH_FAILED
    assert outcome.reason == "Article not found (404)"
    assert generator.calls == []


def test_feed_html_is_used_when_page_fetch_fails() -> None:
    feed_html = "<p>feed copy</p>"
    orchestrator = _orchestrator(
        MockLLMProvider(handler=ai_handler()),
        pages={},
        results={feed_html: ExtractionResult(plain_text=ARTICLE_TEXT)},
    )

    outcome = asyncio.run(orchestrator.process(make_item(URL, content_html=feed_html), make_section("agro")))

    assert outcome.status == ItemStatus.PUBLISHABLE


def test_feed_text_is_used_when_extraction_is_empty() -> None:
    orchestrator = _orchestrator(DisabledProvider(), results={PAGE: ExtractionResult(plain_text="")})

    record = asyncio.run(
        orchestrator.enrich(make_item(URL, content_text=ARTICLE_TEXT), make_section("agro"))
    )

    assert record is not None
    assert "irrigation" in record.body


def test_images_and_embeds_are_carried_into_the_record() -> None:
    extraction = ExtractionResult(
        plain_text=ARTICLE_TEXT,
        images=[
            ExtractedImage(url="https://cdn.example.com/a.jpg", caption="Canal"),
            ExtractedImage(url="https://cdn.example.com/b.jpg", caption="Pump"),
        ],
        embeds=EmbedLinks(youtube="https://www.youtube.com/watch?v=abcdef"),
    )
    generator = MockLLMProvider(handler=ai_handler())
    orchestrator = _orchestrator(generator, results={PAGE: extraction})

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.images == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
    assert record.image_url == "https://cdn.example.com/a.jpg"
    assert record.embeds.youtube == "https://www.youtube.com/watch?v=abcdef"
    assert "**Image:** Canal" in generator.calls[0]


def test_feed_image_leads_when_the_page_has_none() -> None:
    orchestrator = _orchestrator(DisabledProvider())
    item = make_item(URL, image="https://cdn.example.com/lead.jpg")

    record = asyncio.run(orchestrator.enrich(item, make_section("agro")))

    assert record.image_url == "https://cdn.example.com/lead.jpg"
    assert record.images == []


def test_feed_attachments_stay_the_lead_next_to_page_images() -> None:
    extraction = ExtractionResult(
        plain_text=ARTICLE_TEXT,
        images=[ExtractedImage(url="https://cdn.example.com/x.jpg", caption="Canal")],
    )
    orchestrator = _orchestrator(DisabledProvider(), results={PAGE: extraction})
    item = make_item(URL, attachments=[Attachment(url="https://cdn.example.com/hero.jpg")])

    record = asyncio.run(orchestrator.enrich(item, make_section("agro")))
    fields = to_record_fields(record, make_section("agro"))

    assert record.image_url == "https://cdn.example.com/hero.jpg"
    assert record.images == ["https://cdn.example.com/x.jpg"]
    assert fields["imgUrl"] == "https://cdn.example.com/hero.jpg"
    assert fields["article-images"] == "https://cdn.example.com/x.jpg"


def test_social_text_can_be_disabled() -> None:
    generator = MockLLMProvider(handler=ai_handler())
    orchestrator = _orchestrator(generator, llm=LLMConfig(social_text=False))

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.social_text == ""
    assert "social_text" not in record.generation
    assert len(generator.calls) == 3


def test_unexpected_errors_become_failed_outcomes() -> None:
    class BrokenExtractor:
        def extract(self, html, url=None):
            raise RuntimeError("parser exploded")

    orchestrator = EnrichmentOrchestrator(
        generator=DisabledProvider(),
        content_fetcher=FakeContentFetcher({URL: PAGE}),
        extractor=BrokenExtractor(),
    )

    outcome = asyncio.run(orchestrator.process(make_item(URL), make_section("agro")))

    assert outcome.status == ItemStatus.FAILED
    assert "parser exploded" in outcome.reason


def test_fallback_title_follows_the_configured_limit() -> None:
    orchestrator = _orchestrator(DisabledProvider(), validation=ValidationConfig(title_max_chars=30))

    record = asyncio.run(orchestrator.enrich(make_item(URL), make_section("agro")))

    assert record.generation["metadata"] == "fallback"
    assert 0 < len(record.title) <= 30
