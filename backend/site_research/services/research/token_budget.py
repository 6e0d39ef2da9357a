"""Token-budget optimizer.

Cleans a text block and, when it is over its ceiling, truncates it on a
token boundary using the same encoding the report backend counts with.

Truncation keeps the hard token cut unless a sentence end (``.``) lies
strictly beyond ``sentence_boundary_ratio`` of the cut text, in which case
the text is trimmed back to that sentence end.
"""

import logging
import re
from typing import Optional, Protocol, Sequence

import tiktoken

from site_research.models.research import ContentBlock
from site_research.services.research.constants import (
    SENTENCE_BOUNDARY_RATIO,
    TOKEN_ENCODING,
)

logger = logging.getLogger(__name__)

_ELLIPSIS_RE = re.compile(r"\s*\.{3,}\s*")
_EXCLAMATIONS_RE = re.compile(r"!{2,}")
_QUESTIONS_RE = re.compile(r"\?{2,}")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")
_WHITESPACE_RE = re.compile(r"\s+")


class Encoding(Protocol):
    """The subset of ``tiktoken.Encoding`` the optimizer relies on."""

    def encode(self, text: str, **kwargs) -> list[int]: ...

    def decode(self, tokens: Sequence[int]) -> str: ...


def clean_text(text: str) -> str:
    """Normalize whitespace and repeated punctuation.

    Punctuation runs are collapsed before whitespace so the result is a
    fixed point: ``clean_text(clean_text(x)) == clean_text(x)``.
    """
    cleaned = _ELLIPSIS_RE.sub(" ", text)
    cleaned = _EXCLAMATIONS_RE.sub("!", cleaned)
    cleaned = _QUESTIONS_RE.sub("?", cleaned)
    cleaned = _BLANK_LINES_RE.sub("\n", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


class TokenBudgetOptimizer:
    """Bounds text blocks to a token ceiling."""

    def __init__(
        self,
        encoding: Optional[Encoding] = None,
        *,
        encoding_name: str = TOKEN_ENCODING,
        sentence_boundary_ratio: float = SENTENCE_BOUNDARY_RATIO,
    ) -> None:
        self._encoding = encoding or tiktoken.get_encoding(encoding_name)
        self.sentence_boundary_ratio = sentence_boundary_ratio

    def encode(self, text: str) -> list[int]:
        # Crawled pages may contain special-token text; count it as plain text
        return self._encoding.encode(text, disallowed_special=())

    def count_tokens(self, text: str) -> int:
        """Count tokens in text using the backend's encoding."""
        return len(self.encode(text))

    def trim_to_sentence(self, text: str) -> str:
        """Cut *text* after its last ``.`` if that lies past the ratio mark."""
        last_period = text.rfind(".")
        if last_period > len(text) * self.sentence_boundary_ratio:
            return text[: last_period + 1]
        return text

    def optimize(self, text: str, max_tokens: int) -> str:
        """Return *text* cleaned and bounded to *max_tokens* tokens.

        Text already within budget comes back as ``clean_text(text)``
        unchanged.
        """
        cleaned = clean_text(text)
        token_ids = self.encode(cleaned)
        if len(token_ids) <= max_tokens:
            return cleaned

        logger.info(
            f"Content token count ({len(token_ids)}) exceeds limit "
            f"({max_tokens}), truncating..."
        )

        keep = max_tokens
        while True:
            truncated = self._encoding.decode(token_ids[:keep])
            truncated = clean_text(self.trim_to_sentence(truncated))
            count = self.count_tokens(truncated)
            if count <= max_tokens or keep <= 0:
                break
            # Re-encoding a decoded prefix can merge differently; shrink and retry
            keep = max(0, keep - (count - max_tokens))

        logger.info(f"Content truncated to {count} tokens")
        return truncated

    def optimize_block(self, block: ContentBlock) -> ContentBlock:
        """Optimize a named block against its own ceiling."""
        return ContentBlock(
            name=block.name,
            text=self.optimize(block.text, block.ceiling),
            ceiling=block.ceiling,
        )
