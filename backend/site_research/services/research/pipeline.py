"""Slim orchestrator for site research reports.

Coordinates collaborators (crawl + snippets → normalize → token budgets →
prompt → synthesize → sources) without containing their logic itself.
Every run is request-scoped; nothing is kept between runs.
"""

import asyncio
import logging
import time
from typing import Optional
from urllib.parse import urlparse

import anthropic

from site_research.config import ResearchConfig, get_settings
from site_research.models.research import (
    BlockName,
    ContentBlock,
    CrawledPage,
    CrawlTarget,
    ReportResult,
)
from site_research.services.research.content_extractor import ContentExtractor
from site_research.services.research.crawl_coordinator import CrawlCoordinator
from site_research.services.research.errors import (
    ContentTooLargeError,
    InvalidSeedUrlError,
)
from site_research.services.research.prompts import (
    build_combined_content,
    build_research_prompt,
)
from site_research.services.research.snippet_fetcher import (
    SearchPageSnippetFetcher,
    SnippetFetcher,
    bare_domain,
)
from site_research.services.research.synthesizer import ReportSynthesizer
from site_research.services.research.token_budget import TokenBudgetOptimizer

logger = logging.getLogger(__name__)

# Singleton state
_pipeline: Optional["ResearchPipeline"] = None
_lock = asyncio.Lock()


def validate_seed_url(url: Optional[str]) -> CrawlTarget:
    """Return a ``CrawlTarget`` for *url* or raise ``InvalidSeedUrlError``."""
    if not url or not url.strip():
        raise InvalidSeedUrlError("URL is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidSeedUrlError(f"Invalid URL: {url}")
    return CrawlTarget(seed_url=url)


def build_sources(pages: list[CrawledPage], search_url: str) -> list[str]:
    """Deduplicated hostnames of every crawled page plus the search host."""
    hostnames = [urlparse(page.url).hostname for page in pages]
    hostnames.append(urlparse(search_url).hostname)
    return list(dict.fromkeys(host for host in hostnames if host))


def append_sources(report: str, sources: list[str]) -> str:
    """Append a markdown ``Sources`` section listing each source as a bullet."""
    lines = ["\n---", "**Sources**:"] + [f"- {source}" for source in sources]
    return report + "\n".join(lines)


class ResearchPipeline:
    """Runs the full crawl → synthesis pipeline for one seed URL."""

    def __init__(
        self,
        config: ResearchConfig,
        synthesizer: ReportSynthesizer,
        *,
        crawl_coordinator: Optional[CrawlCoordinator] = None,
        snippet_fetcher: Optional[SnippetFetcher] = None,
        content_extractor: Optional[ContentExtractor] = None,
        optimizer: Optional[TokenBudgetOptimizer] = None,
    ) -> None:
        self.config = config
        self.synthesizer = synthesizer

        # Collaborators (injectable for testing)
        self.crawl_coordinator = crawl_coordinator or CrawlCoordinator(config)
        self.snippet_fetcher = snippet_fetcher or SearchPageSnippetFetcher(config)
        self.content_extractor = content_extractor or ContentExtractor()
        self.optimizer = optimizer or TokenBudgetOptimizer(
            encoding_name=config.token_encoding,
            sentence_boundary_ratio=config.sentence_boundary_ratio,
        )

    async def run(self, seed_url: Optional[str]) -> ReportResult:
        """Main entry point: research *seed_url* and return the report.

        Raises:
            InvalidSeedUrlError: Before any network activity.
            ContentTooLargeError: If the assembled prompt is over the ceiling.
        """
        target = validate_seed_url(seed_url)
        start_time = time.time()
        domain = bare_domain(target.seed_url)

        # Phase 1: Crawl and search concurrently
        logger.info(f"Starting research for {target.seed_url}")
        crawl_task = asyncio.create_task(self.crawl_coordinator.crawl(target))
        try:
            snippets = await self.snippet_fetcher.fetch_snippets(domain)
        except Exception:
            crawl_task.cancel()
            await asyncio.gather(crawl_task, return_exceptions=True)
            raise
        pages = await crawl_task
        logger.info(f"Crawled {len(pages)} pages, {len(snippets)} snippets")

        # Phase 2: Normalize and bound each source, then the combination
        prompt = self.build_prompt(pages, snippets, domain)

        # Phase 3: Synthesize
        report = await self.synthesizer.generate_report(prompt)

        # Phase 4: Sources
        sources = build_sources(pages, self.snippet_fetcher.search_url(domain))
        logger.info(
            f"Research for {target.seed_url} completed in "
            f"{int((time.time() - start_time) * 1000)}ms"
        )

        return ReportResult(
            markdown_body=append_sources(report, sources),
            sources=sources,
            company_url=target.seed_url,
            pages_analyzed=len(pages),
            page_types=list(dict.fromkeys(page.page_type for page in pages)),
        )

    def build_prompt(
        self, pages: list[CrawledPage], snippets: list[str], domain: str
    ) -> str:
        """Apply the three token tiers and assemble the guarded prompt."""
        crawled = self.optimizer.optimize_block(
            ContentBlock(
                name=BlockName.CRAWLED,
                text=self.content_extractor.extract_pages(pages),
                ceiling=self.config.crawled_token_ceiling,
            )
        )
        external = self.optimizer.optimize_block(
            ContentBlock(
                name=BlockName.EXTERNAL,
                text="\n".join(snippets),
                ceiling=self.config.external_token_ceiling,
            )
        )
        combined = self.optimizer.optimize_block(
            ContentBlock(
                name=BlockName.COMBINED,
                text=build_combined_content(crawled.text, external.text, domain),
                ceiling=self.config.combined_token_ceiling,
            )
        )

        prompt = build_research_prompt(combined.text)
        token_count = self.optimizer.count_tokens(prompt)
        logger.info(f"Final prompt token count: {token_count}")
        if token_count > self.config.prompt_token_ceiling:
            logger.error(f"Prompt exceeds token limit: {token_count}")
            raise ContentTooLargeError(token_count, self.config.prompt_token_ceiling)
        return prompt


# =====================================================================
# Singleton factory (thread-safe via asyncio.Lock)
# =====================================================================


async def get_research_pipeline() -> ResearchPipeline:
    """Get or create the singleton ``ResearchPipeline``."""
    global _pipeline
    if _pipeline is not None:
        return _pipeline

    async with _lock:
        # Double-checked locking
        if _pipeline is not None:
            return _pipeline

        settings = get_settings()
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required for report generation")

        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        synthesizer = ReportSynthesizer(
            client,
            settings.claude_model,
            max_tokens=settings.report_max_tokens,
            temperature=settings.report_temperature,
        )
        _pipeline = ResearchPipeline(ResearchConfig.from_settings(settings), synthesizer)

    return _pipeline


def reset_research_pipeline() -> None:
    """Reset pipeline for testing."""
    global _pipeline
    _pipeline = None
