"""External search snippets for the seed's domain.

The scraping strategy sits behind the narrow ``SnippetFetcher`` protocol so
it can be swapped without touching the pipeline. Fetch failures are not
handled here; they propagate to the caller.
"""

import logging
from typing import Optional, Protocol
from urllib.parse import quote, urlparse

import httpx
from bs4 import BeautifulSoup

from site_research.config import ResearchConfig
from site_research.models.research import SearchSnippet
from site_research.services.research.constants import (
    MAX_SNIPPETS,
    MIN_SNIPPET_LENGTH,
    SNIPPET_SELECTOR,
)

logger = logging.getLogger(__name__)


def bare_domain(seed_url: str) -> str:
    """Strip the leading subdomain label from the seed's hostname.

    ``www.example.com`` → ``example.com``. Hosts with only two labels are
    returned unchanged.
    """
    hostname = urlparse(seed_url).hostname or ""
    labels = hostname.split(".")
    if len(labels) > 2:
        return ".".join(labels[1:])
    return hostname


class SnippetFetcher(Protocol):
    """Anything that can return search snippets for a domain."""

    def search_url(self, domain: str) -> str: ...

    async def fetch_snippets(self, domain: str) -> list[str]: ...


class SearchPageSnippetFetcher:
    """Scrapes snippets from a public search results page."""

    def __init__(
        self,
        config: ResearchConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        selector: str = SNIPPET_SELECTOR,
    ) -> None:
        self.config = config
        self.selector = selector
        self._transport = transport

    def search_url(self, domain: str) -> str:
        return self.config.search_url_template.format(query=quote(domain, safe=""))

    async def fetch_snippets(self, domain: str) -> list[str]:
        """Issue one search for *domain* and return up to 20 snippet texts."""
        url = self.search_url(domain)
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.search_timeout,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

        snippets = self.parse_snippets(response.text)
        logger.info(f"Collected {len(snippets)} search snippets for {domain}")
        return [snippet.text for snippet in snippets]

    def parse_snippets(self, html: str) -> list[SearchSnippet]:
        """Pull snippet elements out of a results page, in document order."""
        soup = BeautifulSoup(html, "html.parser")
        snippets: list[SearchSnippet] = []
        for element in soup.select(self.selector):
            text = element.get_text(" ", strip=True)
            if len(text) > MIN_SNIPPET_LENGTH:
                snippets.append(SearchSnippet(text=text))
        return snippets[:MAX_SNIPPETS]
