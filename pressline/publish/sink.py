"""Publish sinks: destinations for assembled records."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx
import pendulum
from rich.console import Console

from ..config import SectionConfig
from ..models import EnrichedRecord

console = Console()

# Record store limit per create request
MAX_RECORDS_PER_REQUEST = 10

EMBED_FIELDS = {
    "youtube": "yt-video",
    "twitter": "tw-post",
    "instagram": "ig-post",
    "facebook": "fb-post",
}


class PublishFailure(Exception):
    """The sink rejected or could not receive records."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PublishSink(ABC):
    """Abstract record destination."""

    @abstractmethod
    async def publish(self, records: Sequence[EnrichedRecord], section: SectionConfig) -> List[str]:
        """
        Publish records to the section's destination.

        Args:
            records: Records to create
            section: Section owning the records

        Returns:
            Identifiers assigned by the destination, one per record

        Raises:
            PublishFailure: If any record could not be stored
        """


def to_record_fields(record: EnrichedRecord, section: SectionConfig) -> Dict[str, Any]:
    """Map a record onto the record store's column names, omitting empty values."""
    fields: Dict[str, Any] = {
        "title": record.title,
        "url": record.source_url,
        "article": record.body,
        "bajada": record.excerpt,
        "volanta": record.overline,
        "tags": record.tags,
        "socialMediaText": record.social_text,
        "section": section.id,
        "sectionName": section.name,
        "sectionColor": section.color,
        "status": record.status,
    }
    if record.image_url:
        fields["imgUrl"] = record.image_url
    if record.images:
        fields["article-images"] = ", ".join(record.images)
    for attr, column in EMBED_FIELDS.items():
        value = getattr(record.embeds, attr)
        if value:
            fields[column] = value
    return {key: value for key, value in fields.items() if value}


class AirtableSink(PublishSink):
    """Create records in an Airtable base, one table per section."""

    def __init__(
        self,
        base_id: str,
        token: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize Airtable sink.

        Args:
            base_id: Base identifier
            token: Personal access token
            api_url: API root
            timeout: Request timeout in seconds
            transport: Custom transport (testing)
        """
        if not base_id or not token:
            raise ValueError("Airtable sink needs both a base ID and a token")
        self.base_id = base_id
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def table_url(self, section: SectionConfig) -> str:
        return f"{self.api_url}/{self.base_id}/{section.destination}"

    async def publish(self, records: Sequence[EnrichedRecord], section: SectionConfig) -> List[str]:
        """Create records in chunks of at most ten."""
        if not records:
            return []

        url = self.table_url(section)
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        created: List[str] = []

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=self.transport) as client:
                for start in range(0, len(records), MAX_RECORDS_PER_REQUEST):
                    chunk = records[start : start + MAX_RECORDS_PER_REQUEST]
                    payload = {"records": [{"fields": to_record_fields(r, section)} for r in chunk]}
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict) or not isinstance(data.get("records"), list):
                        raise PublishFailure(
                            f"Unexpected response from record store for '{section.destination}'",
                            status_code=response.status_code,
                        )
                    created.extend(r.get("id", "") for r in data["records"] if isinstance(r, dict))

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = e.response.text[:200]
            if status == 422:
                message = f"Invalid field values for table '{section.destination}' (422): {detail}"
            elif status in (401, 403):
                message = f"Not authorized to write to '{section.destination}' ({status})"
            else:
                message = f"HTTP {status} from record store: {detail}"
            console.print(f"[red]{message}[/red]")
            raise PublishFailure(message, status_code=status) from e
        except (httpx.HTTPError, ValueError) as e:
            console.print(f"[red]Publish to '{section.destination}' failed: {e}[/red]")
            raise PublishFailure(f"Publish failed: {e}") from e

        console.print(f"[green]Published {len(created)} record(s) to {section.destination}[/green]")
        return created


class JsonlSink(PublishSink):
    """Append records to a local JSON-lines file (dry runs)."""

    def __init__(self, output_path: Path) -> None:
        self.output_path = Path(output_path)

    async def publish(self, records: Sequence[EnrichedRecord], section: SectionConfig) -> List[str]:
        """Append one line per record; ids are the source URLs."""
        published_at = pendulum.now("UTC").isoformat()
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, "a", encoding="utf-8") as f:
                for record in records:
                    line = {
                        "published_at": published_at,
                        "table": section.destination,
                        "fields": to_record_fields(record, section),
                        "generation": record.generation,
                    }
                    f.write(json.dumps(line, ensure_ascii=False) + "\n")
        except OSError as e:
            raise PublishFailure(f"Could not write {self.output_path}: {e}") from e

        return [record.source_url for record in records]
