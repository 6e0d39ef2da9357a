"""Report synthesis via the Anthropic Messages API.

Thin collaborator: it does not bound its input. The pipeline checks the
prompt against the token ceiling before calling it. No retries.
"""

import logging

import anthropic

from site_research.services.research.constants import (
    REPORT_MAX_TOKENS,
    REPORT_TEMPERATURE,
)
from site_research.services.research.errors import ResearchError

logger = logging.getLogger(__name__)


class ReportSynthesizer:
    """Turns an assembled prompt into report prose."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        model: str,
        *,
        max_tokens: int = REPORT_MAX_TOKENS,
        temperature: float = REPORT_TEMPERATURE,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate_report(self, prompt: str) -> str:
        """Send *prompt* and return the text of the reply.

        Raises:
            anthropic.APIError: On any API failure.
            ResearchError: If the reply contains no text.
        """
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        if not text.strip():
            raise ResearchError("Report backend returned an empty response")

        logger.info(f"Generated report: {len(text)} characters")
        return text
