from site_research.models.research import (
    BlockName,
    ContentBlock,
    CrawledPage,
    CrawlRun,
    CrawlTarget,
    PageType,
    ReportMetadata,
    ReportResult,
    ResearchPreviewResponse,
    ResearchRequest,
    SearchSnippet,
)

__all__ = [
    "BlockName",
    "ContentBlock",
    "CrawledPage",
    "CrawlRun",
    "CrawlTarget",
    "PageType",
    "ReportMetadata",
    "ReportResult",
    "ResearchPreviewResponse",
    "ResearchRequest",
    "SearchSnippet",
]
