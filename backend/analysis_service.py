"""Analysis pipeline: validate -> extract -> build prompt -> engine -> normalize -> assemble.

One request runs the whole pipeline sequentially; nothing is cached or
shared between requests. Any failure of the fetch or the engine call
aborts the analysis.
"""

import logging
import time
from typing import Callable
from urllib.parse import urlparse

from ai_service import ReasoningEngineClient
from assembler import assemble_result
from errors import AnalysisError, EngineNotConfiguredError, InvalidInputError, UnexpectedAnalysisError
from models import ExtractedContent
from normalizer import normalize_response
from prompt_builder import build_request_payload
from schemas import AnalysisResult, ExtractionPreview
from scraper import DEFAULT_TIMEOUT_SECONDS, analyze_content_structure, extract_content, extract_key_entities

logger = logging.getLogger(__name__)

Extractor = Callable[..., ExtractedContent]


def validate_url(url: str | None) -> str:
    """Return the trimmed URL or raise InvalidInputError. No network access."""
    candidate = str(url or "").strip()
    if not candidate:
        raise InvalidInputError("URL is required")
    try:
        parsed = urlparse(candidate)
    except ValueError:
        raise InvalidInputError("Invalid URL format")
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc or not parsed.hostname:
        raise InvalidInputError("Invalid URL format")
    return candidate


def run_analysis(
    url: str,
    engine: ReasoningEngineClient,
    fetch_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    extractor: Extractor = extract_content,
) -> AnalysisResult:
    """Run one full analysis. Raises AnalysisError subclasses only."""
    target = validate_url(url)
    if not engine.is_configured:
        raise EngineNotConfiguredError("Reasoning engine API key not configured")

    started_at = time.monotonic()
    try:
        content = extractor(target, timeout=fetch_timeout)
        payload = build_request_payload(target, content)
        raw_text = engine.complete(payload)
        normalized = normalize_response(raw_text)
        return assemble_result(target, normalized, content, started_at)
    except AnalysisError:
        raise
    except Exception as exc:
        logger.exception("Unexpected analysis failure", extra={"url": target})
        raise UnexpectedAnalysisError(f"Unexpected failure analysing {target}: {exc}") from exc


def preview_extraction(
    url: str,
    fetch_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    extractor: Extractor = extract_content,
) -> ExtractionPreview:
    """Extract a page and summarise what was found, without calling the engine."""
    target = validate_url(url)
    try:
        content = extractor(target, timeout=fetch_timeout)
    except AnalysisError:
        raise
    except Exception as exc:
        logger.exception("Unexpected extraction failure", extra={"url": target})
        raise UnexpectedAnalysisError(f"Unexpected failure extracting {target}: {exc}") from exc

    return ExtractionPreview(
        url=target,
        title=content["title"],
        meta_description=content["meta_description"],
        meta_keywords=content["meta_keywords"],
        headings=tuple(content["headings"]),
        schema_markup=tuple(content["schema_markup"]),
        link_count=len(content["links"]),
        image_count=len(content["images"]),
        text_length=len(content["text_content"]),
        structure=dict(analyze_content_structure(content)),
        key_entities=tuple(extract_key_entities(content)),
    )
