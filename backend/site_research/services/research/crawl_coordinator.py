"""Bounded concurrent crawler.

Fetches the seed page and the same-host pages it links to, with an
``asyncio.Semaphore`` bounding parallelism. The crawl races three stop
conditions (natural completion, page cap, wall-clock timeout) and always
returns whatever pages completed before the first one fired.
"""

import asyncio
import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from site_research.config import ResearchConfig
from site_research.models.research import CrawledPage, CrawlRun, CrawlTarget, PageType
from site_research.services.research.constants import (
    DEFAULT_PAGE_TYPE,
    PAGE_TYPE_PATTERNS,
)

logger = logging.getLogger(__name__)

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


def classify_page(url: str) -> PageType:
    """Classify *url* as home / about / services / contact / other."""
    parsed = urlparse(url)
    path = parsed.path + (f"?{parsed.query}" if parsed.query else "")
    for page_type, pattern in PAGE_TYPE_PATTERNS.items():
        if re.search(pattern, path, re.IGNORECASE):
            return PageType(page_type)
    return PageType(DEFAULT_PAGE_TYPE)


def normalize_url(url: str) -> str:
    """Drop the fragment and give bare hosts a ``/`` path."""
    parsed = urlparse(urldefrag(url)[0])
    if not parsed.path:
        parsed = parsed._replace(path="/")
    return parsed.geturl()


def extract_links(html: str, page_url: str) -> list[str]:
    """Return absolute same-host http(s) links found in *html*, in order."""
    host = urlparse(page_url).hostname
    soup = BeautifulSoup(html, "html.parser")

    links: list[str] = []
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True):
        absolute = normalize_url(urljoin(page_url, anchor["href"].strip()))
        parsed = urlparse(absolute)
        if parsed.scheme not in ("http", "https") or parsed.hostname != host:
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


class CrawlCoordinator:
    """Crawls at most ``max_pages`` pages within ``max_depth`` hops of a seed."""

    def __init__(
        self,
        config: ResearchConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    async def crawl(self, target: CrawlTarget) -> list[CrawledPage]:
        """Crawl from ``target.seed_url`` and return pages in completion order.

        Never raises for individual page failures. Returns an empty list if
        nothing could be fetched before the timeout.
        """
        if self.config.max_pages <= 0 or self.config.crawl_timeout <= 0:
            return []

        run = CrawlRun(started_at=datetime.utcnow())
        cap_reached = asyncio.Event()

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.page_timeout,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        ) as client:
            crawl_task = asyncio.create_task(
                self._crawl_from_seed(client, target.seed_url, run, cap_reached)
            )
            cap_task = asyncio.create_task(cap_reached.wait())

            done, pending = await asyncio.wait(
                {crawl_task, cap_task},
                timeout=self.config.crawl_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )

            if not done:
                logger.warning(
                    f"Crawl of {target.seed_url} timed out after "
                    f"{self.config.crawl_timeout}s with {run.page_count} pages"
                )
            elif cap_task in done:
                logger.info(f"Page cap of {self.config.max_pages} reached")

            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            if crawl_task in done and crawl_task.exception() is not None:
                logger.error(f"Crawl of {target.seed_url} aborted: {crawl_task.exception()}")

        logger.info(f"Crawled {len(run.pages)} pages from {target.seed_url}")
        return list(run.pages)

    async def _crawl_from_seed(
        self,
        client: httpx.AsyncClient,
        seed_url: str,
        run: CrawlRun,
        cap_reached: asyncio.Event,
    ) -> None:
        """Breadth-first crawl, one depth level at a time."""
        sem = asyncio.Semaphore(self.config.concurrency)
        seed = normalize_url(seed_url)
        visited: set[str] = {seed}
        frontier = [seed]
        depth = 0

        while frontier and not cap_reached.is_set():
            results = await asyncio.gather(
                *(self._fetch_one(client, url, sem, run, cap_reached) for url in frontier)
            )
            pages = [page for page in results if page is not None]
            # Redirect targets count as visited too
            visited.update(normalize_url(page.url) for page in pages)
            if depth >= self.config.max_depth:
                break

            next_frontier: list[str] = []
            for page in pages:
                for link in extract_links(page.html, page.url):
                    if link not in visited:
                        visited.add(link)
                        next_frontier.append(link)
            frontier = next_frontier
            depth += 1

    async def _fetch_one(
        self,
        client: httpx.AsyncClient,
        url: str,
        sem: asyncio.Semaphore,
        run: CrawlRun,
        cap_reached: asyncio.Event,
    ) -> Optional[CrawledPage]:
        """Fetch a single URL, guarded by the semaphore."""
        async with sem:
            if cap_reached.is_set():
                return None

            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.TimeoutException:
                logger.warning(f"Timeout crawling {url}")
                return None
            except httpx.HTTPStatusError as e:
                logger.warning(f"HTTP {e.response.status_code} crawling {url}")
                return None
            except httpx.HTTPError as e:
                logger.warning(f"Error crawling {url}: {e}")
                return None

            content_type = response.headers.get("content-type", "text/html").lower()
            if not content_type.startswith(_HTML_CONTENT_TYPES):
                logger.info(f"Skipping non-HTML page {url} ({content_type})")
                return None

            if run.page_count >= self.config.max_pages:
                return None

            final_url = str(response.url)
            page = CrawledPage(
                url=final_url, html=response.text, page_type=classify_page(final_url)
            )
            run.pages.append(page)
            run.page_count += 1
            logger.info(f"Crawled {final_url} ({page.page_type.value})")

            if run.page_count >= self.config.max_pages:
                cap_reached.set()
            return page
