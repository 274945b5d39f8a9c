"""Tests for page extraction; the network is replaced by a fake requests.get."""
import pytest
import requests

import scraper
from conftest import FakeResponse
from errors import ExtractionError
from scraper import analyze_content_structure, extract_content, extract_key_entities, parse_html


@pytest.fixture
def fake_get(monkeypatch):
    """Install a scripted requests.get; each outcome is a response or an exception."""

    def install(*outcomes):
        calls = []
        queue = list(outcomes)

        def get(url, timeout=None, headers=None):
            calls.append({"url": url, "timeout": timeout, "headers": headers})
            outcome = queue.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(scraper.requests, "get", get)
        return calls

    return install


def test_parse_html_fields(sample_html):
    content = parse_html(sample_html)

    assert content["title"] == "Acme Widgets"
    assert content["meta_description"] == "Best widgets in town"
    assert content["meta_keywords"] == "widgets, acme"
    assert content["headings"] == ["Widgets for everyone", "Pricing"]
    assert content["links"] == ["https://partner.example.org/x", "http://old.example.com"]
    assert content["images"] == ["/logo.png"]
    assert content["html"] == sample_html


def test_parse_html_keeps_only_valid_json_ld(sample_html):
    schema = parse_html(sample_html)["schema_markup"]

    assert schema == ['{\n  "@type": "Organization",\n  "name": "Acme"\n}']


def test_deeply_nested_json_ld_is_dropped():
    nested = "[" * 100_000 + "]" * 100_000
    html = (
        f'<html><head><script type="application/ld+json">{nested}</script>'
        '<script type="application/ld+json">{"@type": "WebPage"}</script></head>'
        "<body><p>Hello</p></body></html>"
    )

    assert parse_html(html)["schema_markup"] == ['{\n  "@type": "WebPage"\n}']


def test_text_comes_from_main_area_without_scripts(sample_html):
    text = parse_html(sample_html)["text_content"]

    assert text == "Widgets for everyone Our widgets are great. Pricing"
    assert "Menu" not in text
    assert "tracking" not in text


def test_title_falls_back_to_h1():
    content = parse_html("<html><body><h1> Only heading </h1><p>Body</p></body></html>")
    assert content["title"] == "Only heading"


def test_title_placeholder_and_og_description():
    html = '<html><head><meta property="og:description" content="From OG"></head><body><p>x</p></body></html>'
    content = parse_html(html)

    assert content["title"] == "No title found"
    assert content["meta_description"] == "From OG"


def test_text_falls_back_to_body_and_is_capped():
    html = "<html><body><div>" + "word " * 5000 + "</div></body></html>"
    text = parse_html(html)["text_content"]

    assert len(text) == scraper.TEXT_CONTENT_LIMIT
    assert text.startswith("word word")


def test_extract_content_success(fake_get, sample_html):
    calls = fake_get(FakeResponse(sample_html))
    content = extract_content("https://acme.example.com", timeout=5)

    assert content["title"] == "Acme Widgets"
    assert calls[0]["url"] == "https://acme.example.com"
    assert calls[0]["timeout"] == 5
    assert "GEOAnalyzer" in calls[0]["headers"]["User-Agent"]


def test_tls_failure_retries_over_http(fake_get, sample_html):
    calls = fake_get(requests.exceptions.SSLError("bad cert"), FakeResponse(sample_html))
    content = extract_content("https://acme.example.com/page")

    assert [call["url"] for call in calls] == ["https://acme.example.com/page", "http://acme.example.com/page"]
    assert content["title"] == "Acme Widgets"


def test_failed_http_retry_reports_retry_error(fake_get):
    fake_get(requests.exceptions.SSLError("bad cert"), requests.exceptions.ConnectionError("refused"))

    with pytest.raises(ExtractionError) as excinfo:
        extract_content("https://acme.example.com")

    assert excinfo.value.kind == "connection"
    assert excinfo.value.message.startswith("Connection failed:")


def test_tls_failure_on_plain_http_is_not_retried(fake_get):
    calls = fake_get(requests.exceptions.SSLError("odd proxy"))

    with pytest.raises(ExtractionError) as excinfo:
        extract_content("http://acme.example.com")

    assert len(calls) == 1
    assert excinfo.value.kind == "tls"
    assert excinfo.value.message.startswith("SSL certificate error:")


@pytest.mark.parametrize(
    "error,kind,prefix",
    [
        (requests.exceptions.ReadTimeout("slow"), "timeout", "Request timeout:"),
        (requests.exceptions.ConnectTimeout("slow"), "timeout", "Request timeout:"),
        (requests.exceptions.ConnectionError("dns"), "connection", "Connection failed:"),
        (requests.exceptions.TooManyRedirects("loop"), "unknown", "Failed to extract content from"),
    ],
)
def test_transport_failures_are_classified(fake_get, error, kind, prefix):
    fake_get(error)

    with pytest.raises(ExtractionError) as excinfo:
        extract_content("http://acme.example.com")

    assert excinfo.value.kind == kind
    assert excinfo.value.message.startswith(prefix)
    assert excinfo.value.status_code == 400


def test_http_error_status(fake_get):
    fake_get(FakeResponse("missing", status_code=404))

    with pytest.raises(ExtractionError) as excinfo:
        extract_content("https://acme.example.com/nope")

    assert excinfo.value.kind == "http"
    assert "HTTP error! status: 404" in excinfo.value.message
    assert excinfo.value.user_message == "Unable to access the website. Please check the URL and try again."


def test_content_structure(sample_html):
    structure = analyze_content_structure(parse_html(sample_html))

    assert structure == {
        "hasTitle": True,
        "hasMetaDescription": True,
        "hasMetaKeywords": True,
        "headingCount": 2,
        "headingHierarchy": {"short": 2},
        "hasSchemaMarkup": True,
        "linkCount": 2,
        "imageCount": 1,
        "contentLength": len("Widgets for everyone Our widgets are great. Pricing"),
        "hasStructuredContent": True,
    }


def test_key_entities_are_unique_and_ordered(sample_html):
    assert extract_key_entities(parse_html(sample_html)) == ["Widgets", "everyone", "Pricing", "Acme"]
