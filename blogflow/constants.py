"""Shared constants for blogflow."""

PHASE_NAMES = (
    "Ideation & Planning",
    "Research & Structuring",
    "SEO & Keyword Preparation",
    "Drafting & Content Generation",
    "Content Enrichment",
    "SEO Optimization & Linking",
    "Editing & Validation",
    "Plagiarism Check",
    "Publishing Preparation",
)

# Seconds the simulated runner waits after each progress event.
DEFAULT_PHASE_INTERVAL = 0.8

MIN_CONCURRENT_AGENTS = 5
MAX_CONCURRENT_AGENTS = 50
DEFAULT_CONCURRENT_AGENTS = 25

MIN_AGENT_TIMEOUT_SECONDS = 30
MAX_AGENT_TIMEOUT_SECONDS = 300
DEFAULT_AGENT_TIMEOUT_SECONDS = 120

# Target word-count bands per requested length; ``None`` means open ended.
WORD_COUNT_BANDS = {
    "short": (500, 800),
    "medium": (800, 1500),
    "long": (1500, None),
}
