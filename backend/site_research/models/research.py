"""Data models for the site research pipeline."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PageType(str, Enum):
    """Coarse classification of a crawled page by its URL path."""

    HOME = "home"
    ABOUT = "about"
    SERVICES = "services"
    CONTACT = "contact"
    OTHER = "other"


class BlockName(str, Enum):
    """Names of the token-budgeted content blocks."""

    CRAWLED = "crawled"
    EXTERNAL = "external"
    COMBINED = "combined"


# =============================================================================
# Crawl Models
# =============================================================================


class CrawlTarget(BaseModel):
    """Immutable crawl input."""

    model_config = ConfigDict(frozen=True)

    seed_url: str = Field(..., description="Absolute http(s) URL to start from")


class CrawledPage(BaseModel):
    """A single successfully fetched page."""

    url: str = Field(..., description="Final URL of the fetched page")
    html: str = Field(..., description="Raw HTML body")
    page_type: PageType = Field(
        default=PageType.OTHER, description="Classification from the URL path"
    )


class CrawlRun(BaseModel):
    """Aggregate state of one crawl. Request-scoped, never persisted."""

    pages: list[CrawledPage] = Field(default_factory=list)
    page_count: int = Field(default=0, description="Successful fetches so far")
    started_at: datetime = Field(default_factory=datetime.utcnow)


class SearchSnippet(BaseModel):
    """One text fragment scraped from the search results page."""

    text: str


@dataclass
class ContentBlock:
    """A named text buffer bounded by a token ceiling."""

    name: BlockName
    text: str
    ceiling: int


# =============================================================================
# Report Models
# =============================================================================


class ReportResult(BaseModel):
    """Terminal artifact of one pipeline run."""

    markdown_body: str = Field(..., description="Report prose plus Sources section")
    sources: list[str] = Field(
        default_factory=list, description="Deduplicated source hostnames"
    )
    company_url: str = Field(..., description="Seed URL the report is about")
    pages_analyzed: int = Field(default=0)
    page_types: list[PageType] = Field(default_factory=list)


# =============================================================================
# API Request/Response Models
# =============================================================================


class ResearchRequest(BaseModel):
    """Request body for report generation.

    ``url`` is optional in the schema so a missing value is answered with a
    400 rather than a validation error.
    """

    url: Optional[str] = Field(None, description="Seed URL of the site to research")


class ReportMetadata(BaseModel):
    """Summary of what went into a report."""

    pages_analyzed: int
    page_types: list[PageType] = Field(default_factory=list)
    company_url: str
    sources: list[str] = Field(default_factory=list)


class ResearchPreviewResponse(BaseModel):
    """Preview-mode response: the final markdown instead of a PDF."""

    markdown: str
    metadata: ReportMetadata
