"""Markdown → PDF rendering for final-mode reports."""

import asyncio
import logging

import markdown

logger = logging.getLogger(__name__)

PDF_STYLE = """
<style>
    @page { size: A4; margin: 2cm; }
    body { font-family: Arial, sans-serif; font-size: 11pt; line-height: 1.5; }
    h1, h2, h3, h4, h5, h6 { font-weight: bold; }
    pre { background: #f4f4f4; padding: 10px; }
    code { background: #f4f4f4; padding: 2px 4px; }
    table { border-collapse: collapse; }
    th, td { border: 1px solid #ccc; padding: 4px 8px; }
</style>
"""


def markdown_to_html(markdown_text: str) -> str:
    """Render report markdown as a standalone HTML document."""
    body = markdown.markdown(markdown_text, extensions=["extra", "tables", "fenced_code"])
    return (
        "<!doctype html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"{PDF_STYLE}</head>\n<body>{body}</body>\n</html>"
    )


def _write_pdf(html: str) -> bytes:
    # WeasyPrint loads native libraries on import
    from weasyprint import HTML

    return HTML(string=html).write_pdf()


async def render_to_document(markdown_text: str) -> bytes:
    """Render *markdown_text* to PDF bytes off the event loop."""
    pdf = await asyncio.to_thread(_write_pdf, markdown_to_html(markdown_text))
    logger.info(f"Rendered report PDF: {len(pdf)} bytes")
    return pdf
