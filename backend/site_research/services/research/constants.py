"""Named constants for the research pipeline.

Centralizes all magic numbers so they can be tuned from one place.
"""

# ---------------------------------------------------------------------------
# Crawl behaviour
# ---------------------------------------------------------------------------
CRAWL_MAX_DEPTH = 1  # Seed is depth 0, links found on the seed are depth 1
CONCURRENT_CRAWL_LIMIT = 3  # Max pages fetched concurrently
MAX_CRAWL_PAGES = 10  # Crawl stops as soon as this many pages succeed
CRAWL_TIMEOUT_SECONDS = 15.0  # Wall-clock budget for one crawl
PAGE_TIMEOUT_SECONDS = 10.0  # Timeout per individual page fetch
CRAWL_USER_AGENT = "Mozilla/5.0 (compatible; SiteResearchBot/0.1)"

# Elements skipped when converting a page to text
EXCLUDED_SELECTORS = [
    "nav",
    "header",
    "footer",
    ".navigation",
    ".menu",
    ".sidebar",
    "script",
    "style",
]

# ---------------------------------------------------------------------------
# External search snippets
# ---------------------------------------------------------------------------
SEARCH_URL_TEMPLATE = "https://www.google.com/search?q={query}"
SEARCH_TIMEOUT_SECONDS = 15.0
SNIPPET_SELECTOR = "div.BNeawe"
MIN_SNIPPET_LENGTH = 10  # Snippets must be strictly longer than this
MAX_SNIPPETS = 20

# ---------------------------------------------------------------------------
# Token budgets (cl100k_base tokens)
# ---------------------------------------------------------------------------
TOKEN_ENCODING = "cl100k_base"
CRAWLED_TOKEN_CEILING = 400_000
EXTERNAL_TOKEN_CEILING = 50_000
COMBINED_TOKEN_CEILING = 600_000
PROMPT_TOKEN_CEILING = 1_048_575  # Hard input limit of the report backend
SENTENCE_BOUNDARY_RATIO = 0.8  # Only trim to a "." found beyond this fraction

# ---------------------------------------------------------------------------
# Report synthesis
# ---------------------------------------------------------------------------
REPORT_MAX_TOKENS = 2_000
REPORT_TEMPERATURE = 0.7
REPORT_FILENAME = "research-report.pdf"

# ---------------------------------------------------------------------------
# Page type classification (URL path -> page type)
# ---------------------------------------------------------------------------
PAGE_TYPE_PATTERNS: dict[str, str] = {
    "home": r"^(/|/home|/index|/main)?(\?.*)?$",
    "about": r"/(about|company|who-we-are|our-company|mission|vision|team)",
    "services": r"/(services|solutions|products|offerings|what-we-do|capabilities)",
    "contact": r"/(contact|get-in-touch|reach-us|contact-us|support)",
}
DEFAULT_PAGE_TYPE = "other"
