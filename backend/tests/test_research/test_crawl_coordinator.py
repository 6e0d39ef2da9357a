"""Tests for site_research.services.research.crawl_coordinator."""

import asyncio
import time

import httpx
import pytest

from site_research.config import ResearchConfig
from site_research.models.research import CrawlTarget, PageType
from site_research.services.research.crawl_coordinator import (
    CrawlCoordinator,
    classify_page,
    extract_links,
    normalize_url,
)

SEED = "https://example.com"


def _html(*links: str, body: str = "Hello") -> str:
    anchors = "".join(f'<a href="{link}">link</a>' for link in links)
    return f"<html><body><p>{body}</p>{anchors}</body></html>"


def _site_transport(site: dict[str, str]) -> httpx.MockTransport:
    """Serve *site* (url → html); anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        html = site.get(str(request.url))
        if html is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, html=html)

    return httpx.MockTransport(handler)


def _coordinator(transport: httpx.MockTransport, **overrides) -> CrawlCoordinator:
    return CrawlCoordinator(ResearchConfig(**overrides), transport=transport)


class TestClassifyPage:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/", PageType.HOME),
            ("https://example.com", PageType.HOME),
            ("https://example.com/about-us", PageType.ABOUT),
            ("https://example.com/services/consulting", PageType.SERVICES),
            ("https://example.com/contact", PageType.CONTACT),
            ("https://example.com/blog/post-1", PageType.OTHER),
        ],
    )
    def test_classification(self, url, expected):
        assert classify_page(url) is expected


class TestExtractLinks:
    def test_same_host_only_and_deduplicated(self):
        html = _html(
            "/about",
            "https://example.com/about#team",
            "https://other.com/page",
            "mailto:hi@example.com",
            "contact",
        )
        links = extract_links(html, "https://example.com/")
        assert links == ["https://example.com/about", "https://example.com/contact"]

    def test_normalize_bare_host(self):
        assert normalize_url("https://example.com#top") == "https://example.com/"


@pytest.mark.asyncio
class TestCrawlCoordinator:
    async def test_seed_with_three_links(self):
        site = {
            "https://example.com/": _html("/a", "/b", "/c"),
            "https://example.com/a": _html(),
            "https://example.com/b": _html(),
            "https://example.com/c": _html(),
        }
        pages = await _coordinator(_site_transport(site)).crawl(CrawlTarget(seed_url=SEED))

        assert len(pages) == 4
        assert pages[0].url == "https://example.com/"
        assert {p.url for p in pages} == set(site)

    async def test_does_not_follow_links_beyond_depth_one(self):
        site = {
            "https://example.com/": _html("/a"),
            "https://example.com/a": _html("/deep"),
            "https://example.com/deep": _html(),
        }
        pages = await _coordinator(_site_transport(site)).crawl(CrawlTarget(seed_url=SEED))

        assert {p.url for p in pages} == {
            "https://example.com/",
            "https://example.com/a",
        }

    async def test_page_cap(self):
        links = [f"/p{i}" for i in range(30)]
        site = {"https://example.com/": _html(*links)}
        site.update({f"https://example.com/p{i}": _html() for i in range(30)})

        pages = await _coordinator(_site_transport(site)).crawl(CrawlTarget(seed_url=SEED))

        assert len(pages) == 10

    async def test_page_cap_of_one(self):
        site = {
            "https://example.com/": _html("/a", "/b"),
            "https://example.com/a": _html(),
            "https://example.com/b": _html(),
        }
        coordinator = _coordinator(_site_transport(site), max_pages=1)
        pages = await coordinator.crawl(CrawlTarget(seed_url=SEED))

        assert [p.url for p in pages] == ["https://example.com/"]

    async def test_no_links_yields_single_page(self):
        site = {"https://example.com/": _html()}
        pages = await _coordinator(_site_transport(site)).crawl(CrawlTarget(seed_url=SEED))
        assert len(pages) == 1

    async def test_failed_seed_yields_empty_result(self):
        pages = await _coordinator(_site_transport({})).crawl(CrawlTarget(seed_url=SEED))
        assert pages == []

    async def test_page_errors_are_swallowed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            if url == "https://example.com/":
                return httpx.Response(200, html=_html("/ok", "/missing", "/down", "/boom"))
            if url.endswith("/ok"):
                return httpx.Response(200, html=_html())
            if url.endswith("/missing"):
                return httpx.Response(404)
            if url.endswith("/boom"):
                return httpx.Response(500)
            raise httpx.ConnectError("connection refused", request=request)

        pages = await _coordinator(httpx.MockTransport(handler)).crawl(
            CrawlTarget(seed_url=SEED)
        )

        assert {p.url for p in pages} == {"https://example.com/", "https://example.com/ok"}

    async def test_non_html_pages_are_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, html=_html("/brochure.pdf"))
            return httpx.Response(
                200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"}
            )

        pages = await _coordinator(httpx.MockTransport(handler)).crawl(
            CrawlTarget(seed_url=SEED)
        )
        assert len(pages) == 1

    async def test_zero_timeout_returns_immediately(self):
        site = {"https://example.com/": _html()}
        coordinator = _coordinator(_site_transport(site), crawl_timeout=0)
        pages = await coordinator.crawl(CrawlTarget(seed_url=SEED))
        assert pages == []

    async def test_timeout_keeps_completed_pages(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, html=_html("/slow1", "/slow2"))
            await asyncio.sleep(5)
            return httpx.Response(200, html=_html())

        coordinator = _coordinator(httpx.MockTransport(handler), crawl_timeout=0.3)
        started = time.monotonic()
        pages = await coordinator.crawl(CrawlTarget(seed_url=SEED))

        assert time.monotonic() - started < 2
        assert [p.url for p in pages] == ["https://example.com/"]

    async def test_concurrency_is_bounded(self):
        in_flight = 0
        max_in_flight = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, html=_html(*[f"/p{i}" for i in range(9)]))
            return httpx.Response(200, html=_html())

        pages = await _coordinator(httpx.MockTransport(handler)).crawl(
            CrawlTarget(seed_url=SEED)
        )

        assert len(pages) == 10
        assert max_in_flight <= 3

    async def test_pages_are_tagged_with_page_type(self):
        site = {
            "https://example.com/": _html("/about"),
            "https://example.com/about": _html(),
        }
        pages = await _coordinator(_site_transport(site)).crawl(CrawlTarget(seed_url=SEED))
        types = {p.url: p.page_type for p in pages}
        assert types["https://example.com/about"] is PageType.ABOUT
