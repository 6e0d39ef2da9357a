"""HTML → plain text conversion for crawled pages.

No LLM calls. Layout chrome (navigation, header, footer, menus, sidebars)
and script/style content are removed before conversion.
"""

import html2text
from bs4 import BeautifulSoup

from site_research.models.research import CrawledPage
from site_research.services.research.constants import EXCLUDED_SELECTORS


class ContentExtractor:
    """Extracts clean text content from crawled pages."""

    def __init__(self, excluded_selectors: list[str] | None = None) -> None:
        self.excluded_selectors = excluded_selectors or EXCLUDED_SELECTORS

    def _converter(self) -> html2text.HTML2Text:
        converter = html2text.HTML2Text()
        converter.body_width = 0  # no line wrapping
        converter.ignore_links = True
        converter.ignore_images = True
        converter.ignore_emphasis = True
        return converter

    def extract(self, html: str) -> str:
        """Convert one page of HTML to text."""
        soup = BeautifulSoup(html, "html.parser")
        for selector in self.excluded_selectors:
            for element in soup.select(selector):
                element.decompose()
        return self._converter().handle(str(soup)).strip()

    def extract_pages(self, pages: list[CrawledPage]) -> str:
        """Concatenate the text of every page, in crawl-completion order."""
        return "\n".join(self.extract(page.html) for page in pages)
