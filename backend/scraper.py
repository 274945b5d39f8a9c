"""Content extractor: fetch a page and pull out the signals the analysis uses.

Extracts title, meta tags, headings, JSON-LD blocks, outbound links,
images and a cleaned text body. Does NOT crawl subpages or run scripts.
"""

import json as _json
import logging
import re

import requests
from bs4 import BeautifulSoup

from errors import ExtractionError
from models import ContentStructure, ExtractedContent

logger = logging.getLogger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; GEOAnalyzer/1.0; +https://geo-analyzer.com)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

DEFAULT_TIMEOUT_SECONDS = 30.0
TEXT_CONTENT_LIMIT = 10_000
HTML_LIMIT = 50_000
NO_TITLE = "No title found"

# Checked in order; the first match is treated as the main content area
CONTENT_SELECTORS = [
    "article",
    "main",
    '[role="main"]',
    ".content",
    ".post-content",
    ".entry-content",
    "#content",
    "#main",
]


def _fetch(url: str, timeout: float) -> requests.Response:
    """GET the page; on a TLS trust failure retry once over plain HTTP."""
    try:
        return requests.get(url, timeout=timeout, headers=_REQUEST_HEADERS)
    except requests.exceptions.SSLError:
        if not url.lower().startswith("https://"):
            raise
        http_url = "http://" + url[len("https://"):]
        logger.warning("HTTPS failed, trying HTTP fallback", extra={"url": url})
        return requests.get(http_url, timeout=timeout, headers=_REQUEST_HEADERS)


def _classify_failure(url: str, exc: requests.RequestException) -> ExtractionError:
    # SSLError and ConnectTimeout are also ConnectionErrors, so order matters
    if isinstance(exc, requests.exceptions.SSLError):
        return ExtractionError(
            f"SSL certificate error: The website {url} has an invalid SSL certificate. "
            "This is a security issue on their end.",
            kind="tls",
        )
    if isinstance(exc, requests.exceptions.Timeout):
        return ExtractionError(
            f"Request timeout: {url} took too long to respond. The site may be slow or overloaded.",
            kind="timeout",
        )
    if isinstance(exc, requests.exceptions.ConnectionError):
        return ExtractionError(
            f"Connection failed: Unable to reach {url}. "
            "The site may be down, blocked, or have network issues.",
            kind="connection",
        )
    return ExtractionError(f"Failed to extract content from {url}: {exc}", kind="unknown")


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return (tag["content"] or "").strip()
    return ""


def parse_html(html: str) -> ExtractedContent:
    """Extract content signals from raw markup."""
    soup = BeautifulSoup(html, "html.parser")

    # --- Title (falls back to first h1) ---
    title = ""
    if soup.title:
        title = soup.title.get_text().strip()
    if not title:
        first_h1 = soup.find("h1")
        title = first_h1.get_text().strip() if first_h1 else ""
    title = title or NO_TITLE

    # --- Meta ---
    meta_description = _meta_content(soup, name="description") or _meta_content(
        soup, property="og:description"
    )
    meta_keywords = _meta_content(soup, name="keywords")

    # --- Headings, in document order ---
    headings: list[str] = []
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = heading.get_text().strip()
        if text:
            headings.append(text)

    # --- Structured data (extract before decomposing scripts); invalid blocks are dropped ---
    schema_markup: list[str] = []
    for script_tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script_tag.string or script_tag.get_text() or ""
        if not raw.strip():
            continue
        try:
            parsed = _json.loads(raw)
        except (ValueError, RecursionError):
            continue
        schema_markup.append(_json.dumps(parsed, indent=2, ensure_ascii=False))

    # --- Links (absolute only) and images ---
    links = [
        a["href"]
        for a in soup.find_all("a", href=True)
        if isinstance(a["href"], str) and a["href"].startswith("http")
    ]
    images = [img["src"] for img in soup.find_all("img", src=True) if img["src"]]

    # Remove script and style before text extraction
    for tag in soup.find_all(["script", "style", "noscript"]):
        tag.decompose()

    # --- Main content ---
    content = ""
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            content = element.get_text(" ").strip()
            break
    if not content:
        body = soup.body or soup
        content = body.get_text(" ").strip()

    text_content = re.sub(r"\s+", " ", content).strip()[:TEXT_CONTENT_LIMIT]

    return {
        "title": title,
        "meta_description": meta_description,
        "meta_keywords": meta_keywords,
        "headings": headings,
        "content": content,
        "schema_markup": schema_markup,
        "links": links,
        "images": images,
        "text_content": text_content,
        "html": html[:HTML_LIMIT],
    }


def extract_content(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> ExtractedContent:
    """
    Fetch `url` and return its extracted content.
    Raises ExtractionError describing TLS, connection, timeout or HTTP failures.
    """
    logger.info("Extracting content", extra={"url": url})
    try:
        response = _fetch(url, timeout)
    except requests.RequestException as exc:
        error = _classify_failure(url, exc)
        logger.warning("Content extraction failed", extra={"url": url, "kind": error.kind, "error": str(exc)})
        raise error from exc

    if not response.ok:
        logger.warning("Content extraction failed", extra={"url": url, "http_status": response.status_code})
        raise ExtractionError(
            f"Failed to extract content from {url}: HTTP error! status: {response.status_code}",
            kind="http",
        )

    response.encoding = response.apparent_encoding or "utf-8"
    extracted = parse_html(response.text)

    logger.info(
        "Content extracted",
        extra={
            "url": url,
            "http_status": response.status_code,
            "text_length": len(extracted["text_content"]),
            "headings": len(extracted["headings"]),
            "links": len(extracted["links"]),
            "images": len(extracted["images"]),
            "schema_blocks": len(extracted["schema_markup"]),
        },
    )
    return extracted


def _heading_hierarchy(headings: list[str]) -> dict[str, int]:
    hierarchy: dict[str, int] = {}
    for heading in headings:
        if len(heading) < 50:
            bucket = "short"
        elif len(heading) < 100:
            bucket = "medium"
        else:
            bucket = "long"
        hierarchy[bucket] = hierarchy.get(bucket, 0) + 1
    return hierarchy


def analyze_content_structure(content: ExtractedContent) -> ContentStructure:
    """On-page structure summary used by the extraction preview."""
    return {
        "hasTitle": bool(content["title"]),
        "hasMetaDescription": bool(content["meta_description"]),
        "hasMetaKeywords": bool(content["meta_keywords"]),
        "headingCount": len(content["headings"]),
        "headingHierarchy": _heading_hierarchy(content["headings"]),
        "hasSchemaMarkup": len(content["schema_markup"]) > 0,
        "linkCount": len(content["links"]),
        "imageCount": len(content["images"]),
        "contentLength": len(content["text_content"]),
        "hasStructuredContent": len(content["schema_markup"]) > 0 or len(content["headings"]) > 3,
    }


def extract_key_entities(content: ExtractedContent) -> list[str]:
    """Candidate entity words from headings and title (first three per heading, two from title)."""
    entities: list[str] = []
    for heading in content["headings"]:
        words = [word for word in heading.split(" ") if len(word) > 3]
        entities.extend(words[:3])

    if content["title"]:
        title_words = [word for word in content["title"].split(" ") if len(word) > 3]
        entities.extend(title_words[:2])

    return list(dict.fromkeys(entities))[:10]
