"""Unit tests for the fetch request and result envelope schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from page_fetcher.core.schemas import FetchRequest, ResultEnvelope


class TestFetchRequest:
    def test_url_is_stripped(self) -> None:
        assert FetchRequest(url="  https://example.com/a  ").url == "https://example.com/a"

    def test_headers_are_optional(self) -> None:
        request = FetchRequest.model_validate(
            {"url": "http://example.com", "headers": {"Accept-Language": "zh-TW"}}
        )
        assert request.headers == {"Accept-Language": "zh-TW"}
        assert FetchRequest(url="http://example.com").headers is None

    @pytest.mark.parametrize(
        "url", ["example.com", "/relative/path", "ftp://example.com/file", "https://", ""]
    )
    def test_rejects_non_absolute_http_urls(self, url: str) -> None:
        with pytest.raises(ValidationError):
            FetchRequest(url=url)

    def test_missing_url_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FetchRequest.model_validate({})

    def test_header_values_must_be_strings(self) -> None:
        with pytest.raises(ValidationError):
            FetchRequest.model_validate({"url": "https://example.com", "headers": {"X": [1]}})


class TestResultEnvelope:
    def test_success_shape(self) -> None:
        assert ResultEnvelope.success("hello").model_dump(by_alias=True) == {
            "content": [{"type": "text", "text": "hello"}],
            "isError": False,
        }

    def test_failure_shape(self) -> None:
        envelope = ResultEnvelope.failure("boom")
        assert envelope.is_error is True
        assert envelope.text == "boom"
        assert envelope.model_dump(by_alias=True)["isError"] is True

    def test_accepts_camel_case_input(self) -> None:
        envelope = ResultEnvelope.model_validate(
            {"content": [{"type": "text", "text": "x"}], "isError": True}
        )
        assert envelope.is_error is True
