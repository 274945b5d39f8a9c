"""Pipeline tests with a fake extractor and a fake reasoning engine."""
import pytest

from analysis_service import preview_extraction, run_analysis, validate_url
from conftest import FakeEngine
from errors import (
    EngineNotConfiguredError,
    ExtractionError,
    InvalidInputError,
    ReasoningEngineError,
    UnexpectedAnalysisError,
)

URL = "https://acme.example.com"


class RecordingExtractor:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def __call__(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.content


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://acme.example.com", "https://acme.example.com"),
        ("  http://acme.example.com/a?b=c  ", "http://acme.example.com/a?b=c"),
        ("HTTPS://ACME.EXAMPLE.COM", "HTTPS://ACME.EXAMPLE.COM"),
    ],
)
def test_validate_url_accepts(url, expected):
    assert validate_url(url) == expected


@pytest.mark.parametrize(
    "url,message",
    [
        ("", "URL is required"),
        ("   ", "URL is required"),
        (None, "URL is required"),
        ("acme.example.com", "Invalid URL format"),
        ("ftp://acme.example.com", "Invalid URL format"),
        ("https://", "Invalid URL format"),
        ("javascript:alert(1)", "Invalid URL format"),
        ("http://[::1", "Invalid URL format"),
    ],
)
def test_validate_url_rejects(url, message):
    with pytest.raises(InvalidInputError) as excinfo:
        validate_url(url)

    assert excinfo.value.user_message == message
    assert excinfo.value.status_code == 400


def test_run_analysis_pipeline(fake_engine, extracted_content):
    extractor = RecordingExtractor(extracted_content)
    result = run_analysis(" " + URL + " ", fake_engine, fetch_timeout=7, extractor=extractor)

    assert extractor.calls == [(URL, 7)]
    assert len(fake_engine.requests) == 1
    assert "Title: Acme Widgets" in fake_engine.requests[0]["user"]
    assert result.url == URL
    assert result.overall_score == 69
    assert result.pillar_scores.crawlability.score == 91
    assert len(result.recommendations) == 3
    assert result.detected_entities[0].name == "Acme"
    assert result.content_extracted.title == "Acme Widgets"


def test_invalid_url_never_reaches_the_network(fake_engine, extracted_content):
    extractor = RecordingExtractor(extracted_content)

    with pytest.raises(InvalidInputError):
        run_analysis("not a url", fake_engine, extractor=extractor)

    assert extractor.calls == []
    assert fake_engine.requests == []


def test_unconfigured_engine_fails_before_extraction(extracted_content):
    extractor = RecordingExtractor(extracted_content)
    engine = FakeEngine(configured=False)

    with pytest.raises(EngineNotConfiguredError) as excinfo:
        run_analysis(URL, engine, extractor=extractor)

    assert excinfo.value.user_message == "AI analysis service is not configured"
    assert extractor.calls == []


def test_extraction_failure_aborts(fake_engine):
    extractor = RecordingExtractor(error=ExtractionError("Connection failed: nope", kind="connection"))

    with pytest.raises(ExtractionError):
        run_analysis(URL, fake_engine, extractor=extractor)

    assert fake_engine.requests == []


def test_engine_failure_aborts(extracted_content):
    engine = FakeEngine(error=ReasoningEngineError("boom"))

    with pytest.raises(ReasoningEngineError):
        run_analysis(URL, engine, extractor=RecordingExtractor(extracted_content))


def test_garbled_reply_yields_fallback_result(extracted_content):
    engine = FakeEngine(reply="Sorry, I can't help with that.")
    result = run_analysis(URL, engine, extractor=RecordingExtractor(extracted_content))

    assert result.overall_score == 50
    assert {pillar.score for _, pillar in result.pillar_scores.items()} == {50}
    assert result.recommendations[0].id == "fallback-1"


def test_unexpected_failure_is_wrapped(fake_engine):
    extractor = RecordingExtractor(error=RuntimeError("parser exploded"))

    with pytest.raises(UnexpectedAnalysisError) as excinfo:
        run_analysis(URL, fake_engine, extractor=extractor)

    assert excinfo.value.user_message == "An unexpected error occurred during analysis"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_preview_extraction(extracted_content):
    extractor = RecordingExtractor(extracted_content)
    preview = preview_extraction(URL, fetch_timeout=3, extractor=extractor)

    assert extractor.calls == [(URL, 3)]
    assert preview.title == "Acme Widgets"
    assert preview.link_count == 2
    assert preview.image_count == 1
    assert preview.text_length == len(extracted_content["text_content"])
    assert preview.structure["headingCount"] == 2
    assert preview.structure["hasSchemaMarkup"] is True
    assert preview.key_entities == ("Widgets", "everyone", "Pricing", "Acme")


def test_preview_rejects_invalid_url(extracted_content):
    with pytest.raises(InvalidInputError):
        preview_extraction("mailto:someone@example.com", extractor=RecordingExtractor(extracted_content))
