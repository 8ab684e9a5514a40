"""page-fetcher: headless-browser page retrieval with HTML, text, JSON and Markdown output."""

__version__ = "1.0.8"
