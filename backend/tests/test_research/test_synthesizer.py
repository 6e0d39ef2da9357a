"""Tests for site_research.services.research.synthesizer."""

from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from site_research.services.research.errors import ResearchError
from site_research.services.research.synthesizer import ReportSynthesizer


def _mock_client(*texts: str) -> MagicMock:
    """Create a mock Anthropic client that returns *texts* as text blocks."""
    mock_msg = MagicMock()
    mock_msg.content = [MagicMock(type="text", text=text) for text in texts]
    client = MagicMock()
    client.messages = MagicMock()
    client.messages.create = AsyncMock(return_value=mock_msg)
    return client


@pytest.mark.asyncio
class TestReportSynthesizer:
    async def test_returns_report_text(self):
        client = _mock_client("# Report\n", "Body text")
        synthesizer = ReportSynthesizer(client, "test-model")

        assert await synthesizer.generate_report("prompt") == "# Report\nBody text"

    async def test_call_parameters(self):
        client = _mock_client("ok")
        synthesizer = ReportSynthesizer(
            client, "my-model", max_tokens=1234, temperature=0.3
        )
        await synthesizer.generate_report("the prompt")

        call_kwargs = client.messages.create.call_args.kwargs
        assert call_kwargs["model"] == "my-model"
        assert call_kwargs["max_tokens"] == 1234
        assert call_kwargs["temperature"] == 0.3
        assert call_kwargs["messages"] == [{"role": "user", "content": "the prompt"}]

    async def test_default_generation_settings(self):
        client = _mock_client("ok")
        await ReportSynthesizer(client, "m").generate_report("p")

        call_kwargs = client.messages.create.call_args.kwargs
        assert call_kwargs["max_tokens"] == 2000
        assert call_kwargs["temperature"] == 0.7

    async def test_empty_response_raises(self):
        synthesizer = ReportSynthesizer(_mock_client("   "), "test-model")
        with pytest.raises(ResearchError):
            await synthesizer.generate_report("prompt")

    async def test_api_error_propagates_without_retry(self):
        client = MagicMock()
        client.messages = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(
                request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
            )
        )
        synthesizer = ReportSynthesizer(client, "test-model")

        with pytest.raises(anthropic.APIConnectionError):
            await synthesizer.generate_report("prompt")
        assert client.messages.create.await_count == 1
