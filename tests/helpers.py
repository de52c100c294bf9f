"""Fakes and builders shared by the test modules."""

from typing import Dict, Iterable, List, Optional, Sequence

from pressline.config import SectionConfig
from pressline.ingestion import ExtractionResult, FeedItem, FeedResult, PageContent
from pressline.models import EnrichedRecord, ItemOutcome, ItemStatus
from pressline.publish import PublishFailure, PublishSink

ARTICLE_TEXT = (
    "The provincial agriculture ministry announced a new irrigation plan for northern farms on Monday.\n\n"
    "Officials said the program will reach twelve districts before the next harvest season.\n\n"
    "Producers welcomed the measure, which includes low interest credit for water pumps and storage tanks.\n\n"
    "The plan also funds training for cooperatives that manage shared canals in the region."
)


def make_section(section_id: str = "agro", priority: int = 1, **kwargs) -> SectionConfig:
    values = {
        "id": section_id,
        "name": section_id.title(),
        "feed_url": f"https://feeds.example.com/{section_id}.json",
        "priority": priority,
    }
    values.update(kwargs)
    return SectionConfig(**values)


def make_item(url: str, **kwargs) -> FeedItem:
    kwargs.setdefault("title", f"Item {url}")
    return FeedItem(url=url, **kwargs)


def make_record(url: str, section_id: str = "agro", **kwargs) -> EnrichedRecord:
    values = {
        "source_url": url,
        "title": "Irrigation plan reaches northern farms",
        "overline": "Agro",
        "excerpt": "The province funds irrigation for twelve districts.",
        "body": "## Main details\n\nText.\n\n- item",
        "section_id": section_id,
        "section_label": section_id.title(),
    }
    values.update(kwargs)
    return EnrichedRecord(**values)


class FakeContentFetcher:
    """Serves markup from a dict; unknown URLs fail like a 404."""

    def __init__(self, pages: Optional[Dict[str, str]] = None) -> None:
        self.pages = dict(pages or {})
        self.calls: List[str] = []

    async def fetch_page(self, url: str) -> PageContent:
        self.calls.append(url)
        if url not in self.pages:
            return PageContent(url=url, final_url=url, html="", fetch_success=False, error="Article not found (404)")
        return PageContent(url=url, final_url=url, html=self.pages[url])


class FakeExtractor:
    """Maps markup to a prepared extraction result."""

    def __init__(self, results: Optional[Dict[str, ExtractionResult]] = None) -> None:
        self.results = dict(results or {})

    def extract(self, html: str, url: Optional[str] = None) -> ExtractionResult:
        return self.results.get(html, ExtractionResult())


class FakeFeedFetcher:
    """Returns prepared items per section and records fetch order."""

    def __init__(self, feeds: Dict[str, Sequence[FeedItem]], failing: Iterable[str] = ()) -> None:
        self.feeds = {key: list(items) for key, items in feeds.items()}
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch_feed(self, section: SectionConfig) -> FeedResult:
        self.calls.append(section.id)
        if section.id in self.failing:
            return FeedResult(section_id=section.id, feed_url=section.feed_url, success=False, error="HTTP error: boom")
        items = self.feeds.get(section.id, [])
        return FeedResult(
            section_id=section.id,
            feed_url=section.feed_url,
            success=True,
            items=items,
            item_count=len(items),
        )


class FakeOrchestrator:
    """Produces a publishable record per item unless a status is scripted."""

    def __init__(self, statuses: Optional[Dict[str, ItemStatus]] = None) -> None:
        self.statuses = dict(statuses or {})
        self.processed: List[str] = []

    async def process(self, item: FeedItem, section: SectionConfig) -> ItemOutcome:
        self.processed.append(item.url)
        status = self.statuses.get(item.url, ItemStatus.PUBLISHABLE)
        if status != ItemStatus.PUBLISHABLE:
            return ItemOutcome(url=item.url, status=status, reason="scripted")
        record = make_record(item.url, section.id)
        return ItemOutcome(url=item.url, status=status, record=record, sources={"body": "ai"})

    def get_usage_stats(self) -> Dict:
        return {"total_tokens": 0, "api_calls": len(self.processed), "failures": 0, "model": "fake"}


class RecordingSink(PublishSink):
    """Keeps published records in memory; listed URLs are rejected."""

    def __init__(self, failing_urls: Iterable[str] = ()) -> None:
        self.failing_urls = set(failing_urls)
        self.records: List[EnrichedRecord] = []
        self.calls = 0

    async def publish(self, records: Sequence[EnrichedRecord], section: SectionConfig) -> List[str]:
        self.calls += 1
        for record in records:
            if record.source_url in self.failing_urls:
                raise PublishFailure(f"rejected {record.source_url}", status_code=422)
        self.records.extend(records)
        return [f"rec{len(self.records)}" for _ in records]


class SleepRecorder:
    """Async sleep replacement that only records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def valid_body(words: int = 300) -> str:
    filler = " ".join(["palabra"] * words)
    return (
        "## Irrigation plan\n\n"
        f"The **province** announced a plan. {filler}\n\n"
        "- **Districts:** twelve\n"
        "- **Credit:** low interest\n"
        "- Training for cooperatives"
    )


def valid_metadata_json() -> str:
    summary = " ".join(["resumen"] * 45)
    return (
        '{"title": "Irrigation plan reaches twelve districts", '
        f'"summary": "{summary}", '
        '"overline": "Water for farms"}'
    )


def valid_social_text() -> str:
    return "🌾 " + " ".join(["The province funds irrigation for northern farms."] * 6) + " #Agro #Riego"


def ai_handler(body: Optional[str] = None):
    """Reply with well-formed output for each stage, detected from the prompt."""

    def handle(prompt: str) -> str:
        if "Return only JSON" in prompt:
            return valid_metadata_json()
        if "topic tags" in prompt:
            return "Irrigation, Agro, Credit"
        if "social media post" in prompt:
            return valid_social_text()
        return body if body is not None else valid_body()

    return handle
