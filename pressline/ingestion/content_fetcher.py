"""Article page fetcher."""

from typing import Optional

import httpx

from .models import PageContent


class ContentFetcher:
    """Fetch raw article markup."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "Mozilla/5.0 (compatible; pressline/1.0)",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize content fetcher."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    def _failure(self, url: str, error: str) -> PageContent:
        return PageContent(url=url, final_url=url, html="", fetch_success=False, error=error)

    async def fetch_page(self, url: str) -> PageContent:
        """Fetch a single article page."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()

            if not response.text.strip():
                return self._failure(url, "Empty response body")

            return PageContent(url=url, final_url=str(response.url), html=response.text)

        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}"
            if e.response.status_code == 404:
                error_msg = "Article not found (404)"
            elif e.response.status_code == 403:
                error_msg = "Access forbidden (403)"
            elif e.response.status_code >= 500:
                error_msg = f"Server error ({e.response.status_code})"
            return self._failure(url, error_msg)
        except httpx.TimeoutException:
            return self._failure(url, "Request timed out")
        except httpx.HTTPError as e:
            return self._failure(url, f"HTTP error: {e}")
