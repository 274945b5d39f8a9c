"""
Shared test fixtures for the GEO analyzer.
"""
import json

import pytest


class FakeEngine:
    """Stands in for ReasoningEngineClient; records the payloads it receives."""

    def __init__(self, reply="", error=None, configured=True):
        self.reply = reply
        self.error = error
        self.is_configured = configured
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeResponse:
    """Minimal requests.Response stand-in for the extractor."""

    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code
        self.ok = status_code < 400
        self.apparent_encoding = "utf-8"
        self.encoding = None


SAMPLE_HTML = """<!doctype html>
<html>
<head>
  <title> Acme Widgets </title>
  <meta name="description" content="Best widgets in town">
  <meta name="keywords" content="widgets, acme">
  <script type="application/ld+json">{"@type": "Organization", "name": "Acme"}</script>
  <script type="application/ld+json">{not valid json}</script>
  <style>.hero { color: red; }</style>
</head>
<body>
  <nav>Menu Home Shop</nav>
  <main>
    <h1>Widgets for everyone</h1>
    <p>Our   widgets
    are great.</p>
    <h2>Pricing</h2>
    <script>var tracking = 1;</script>
  </main>
  <a href="https://partner.example.org/x">Partner</a>
  <a href="/about">About</a>
  <a href="http://old.example.com">Old site</a>
  <img src="/logo.png" alt="Acme">
  <img src="">
</body>
</html>
"""


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def extracted_content():
    return {
        "title": "Acme Widgets",
        "meta_description": "Best widgets in town",
        "meta_keywords": "widgets, acme",
        "headings": ["Widgets for everyone", "Pricing"],
        "content": "Widgets for everyone Our widgets are great. Pricing",
        "schema_markup": ['{\n  "@type": "Organization"\n}'],
        "links": ["https://partner.example.org/x", "http://old.example.com"],
        "images": ["/logo.png"],
        "text_content": "Widgets for everyone Our widgets are great. Pricing",
        "html": "<html></html>",
    }


@pytest.fixture
def empty_content():
    return {
        "title": "",
        "meta_description": "",
        "meta_keywords": "",
        "headings": [],
        "content": "",
        "schema_markup": [],
        "links": [],
        "images": [],
        "text_content": "",
        "html": "",
    }


@pytest.fixture
def engine_payload():
    """A reply the way the prompt asks for it, with a few deliberate deviations."""
    return {
        "overall_score": 99,
        "pillar_scores": {
            "content_quality": {
                "score": 82,
                "breakdown": "Deep topical coverage",
                "grade": "B",
                "status": "excellent",
            },
            "structured_signals": {"score": 45, "breakdown": "No FAQ schema"},
            "authority_signals": 68,
            "crawlability": {"score": 91, "breakdown": "Clean HTML", "grade": "A", "status": "excellent"},
            "performance": {"score": 70, "breakdown": "Acceptable"},
            "modular_content": {"score": 55, "breakdown": "Few lists"},
        },
        "recommendations": [
            {
                "title": "Add FAQ schema",
                "description": "Mark up the top questions with FAQPage JSON-LD",
                "pillar": "structured_signals",
                "priority": "high",
                "impact": 8,
                "difficulty": "easy",
                "estimated_time": "1 hour",
                "implementation": ["Pick top questions", "Add FAQPage JSON-LD"],
                "code_snippets": ['<script type="application/ld+json">{}</script>'],
            },
            {
                "name": "Cite sources",
                "desc": "Link claims to primary research",
                "pillar": "Authority Signals",
                "implementation_priority": "low",
                "estimated_impact": 6,
                "technical_difficulty": "hard",
                "time": "2 hours",
                "steps": ["Audit claims"],
            },
            {},
        ],
        "detected_entities": [
            {"name": "Acme", "type": "organization", "confidence": 0.95, "context": "Brand name"},
        ],
        "content_gaps": [
            {"element": "FAQ section", "desc": "No FAQ on the page", "impact": "High", "priority": "high"},
        ],
    }


@pytest.fixture
def engine_reply(engine_payload):
    """The payload wrapped in the chatter engines tend to add."""
    return "Here is the analysis:\n```json\n" + json.dumps(engine_payload, indent=2) + "\n```\nThanks!"


@pytest.fixture
def fake_engine(engine_reply):
    return FakeEngine(reply=engine_reply)
