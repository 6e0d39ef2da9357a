"""Research report API router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from site_research.models.research import (
    ReportMetadata,
    ResearchPreviewResponse,
    ResearchRequest,
)
from site_research.services.research.constants import REPORT_FILENAME
from site_research.services.research.errors import (
    ContentTooLargeError,
    InvalidSeedUrlError,
)
from site_research.services.research.pipeline import (
    ResearchPipeline,
    get_research_pipeline,
)
from site_research.services.research.report_renderer import render_to_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/research", tags=["research"])


@router.post(
    "/generate",
    response_model=ResearchPreviewResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def generate_research_report(
    request: ResearchRequest,
    preview: bool = Query(False, description="Return markdown JSON instead of a PDF"),
    pipeline: ResearchPipeline = Depends(get_research_pipeline),
):
    """
    Generate a research report for a website.

    Crawls the site, adds external search snippets about its domain and
    sends the token-bounded content to the report backend.

    - preview=true: returns ``{"markdown", "metadata"}``
    - otherwise: returns the report as a PDF attachment
    """
    if not request.url:
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        result = await pipeline.run(request.url)
    except InvalidSeedUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContentTooLargeError as e:
        logger.error(f"Research content too large for {request.url}: {e}")
        raise HTTPException(
            status_code=400,
            detail="Content too large to process. Please try a smaller site.",
        )
    except Exception as e:
        logger.exception(f"Failed to generate research report for {request.url}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate research report")

    if preview:
        return ResearchPreviewResponse(
            markdown=result.markdown_body,
            metadata=ReportMetadata(
                pages_analyzed=result.pages_analyzed,
                page_types=result.page_types,
                company_url=result.company_url,
                sources=result.sources,
            ),
        )

    try:
        pdf = await render_to_document(result.markdown_body)
    except Exception as e:
        logger.exception(f"PDF rendering failed for {request.url}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate research report")

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={REPORT_FILENAME}"},
    )
