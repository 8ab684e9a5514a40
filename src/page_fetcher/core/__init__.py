"""Core building blocks shared by the scraper and the tool server.

Sub-modules:
- ``exceptions``      — application exception hierarchy
- ``logging_config``  — structlog configuration
- ``schemas``         — pydantic request / result models
"""
