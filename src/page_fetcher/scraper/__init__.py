"""Browser-based page fetching and content transformation.

Sub-modules:
- ``config``             — fixed retry / timeout / redirect policy constants
- ``allow_list``         — hostname allow-list gate with a TTL cache file
- ``playwright_fetcher`` — bounded headless-Chromium fetch procedure
- ``markdown``           — markdownify converter, escaping and clean-up
- ``content_extractor``  — text, JSON and trafilatura-based Markdown extraction
- ``service``            — the four public operations returning result envelopes
"""
