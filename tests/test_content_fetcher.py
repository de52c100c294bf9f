import asyncio

import httpx

from pressline.ingestion import ContentFetcher


def _fetch(respond, url: str = "https://news.example.com/a"):
    fetcher = ContentFetcher(transport=httpx.MockTransport(respond))
    return asyncio.run(fetcher.fetch_page(url))


def test_fetch_page_returns_markup() -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        assert "pressline" in request.headers["user-agent"]
        return httpx.Response(200, text="<html><body><p>Hello</p></body></html>")

    page = _fetch(respond)

    assert page.fetch_success
    assert "<p>Hello</p>" in page.html
    assert page.final_url == "https://news.example.com/a"


def test_not_found_is_a_failed_page() -> None:
    page = _fetch(lambda request: httpx.Response(404))

    assert not page.fetch_success
    assert page.error == "Article not found (404)"


def test_server_error_is_a_failed_page() -> None:
    page = _fetch(lambda request: httpx.Response(502))

    assert not page.fetch_success
    assert page.error == "Server error (502)"


def test_empty_body_is_a_failed_page() -> None:
    page = _fetch(lambda request: httpx.Response(200, text="   "))

    assert not page.fetch_success
    assert page.error == "Empty response body"


def test_timeout_is_a_failed_page() -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    page = _fetch(respond)

    assert not page.fetch_success
    assert page.error == "Request timed out"
