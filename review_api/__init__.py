"""Review API: item reviews, responses, helpful votes and rating summaries."""

__version__ = "1.0.0"
