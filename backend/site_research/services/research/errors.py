"""Exceptions raised by the research pipeline.

Client-facing failures get their own types so the router can map them to
4xx responses; everything else propagates as-is and becomes a 500.
"""


class ResearchError(Exception):
    """Base class for research pipeline errors."""


class InvalidSeedUrlError(ResearchError):
    """The seed URL is missing or not an absolute http(s) URL."""


class ContentTooLargeError(ResearchError):
    """The assembled prompt exceeds the report backend's token ceiling."""

    def __init__(self, token_count: int, ceiling: int) -> None:
        self.token_count = token_count
        self.ceiling = ceiling
        super().__init__(
            f"Prompt token count {token_count} exceeds ceiling {ceiling}"
        )
