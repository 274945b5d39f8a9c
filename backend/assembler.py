"""Combine normalized engine output with derived fields into the final result."""

import logging
import time
from datetime import datetime, timezone

from models import ExtractedContent
from schemas import AnalysisResult, ContentExtracted, NormalizedAnalysis, PerformanceMetrics
from scoring import grade_for_score, overall_score, round_half_up, summarize_scores

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2024-05-01T12:00:00.123Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_result(
    url: str,
    normalized: NormalizedAnalysis,
    content: ExtractedContent,
    started_at: float,
    finished_at: float | None = None,
    now: datetime | None = None,
) -> AnalysisResult:
    """
    Build the AnalysisResult.

    `started_at`/`finished_at` are time.monotonic() readings; `finished_at`
    and `now` default to the current time and exist so tests can pin them.
    """
    finished = time.monotonic() if finished_at is None else finished_at
    moment = datetime.now(timezone.utc) if now is None else now

    score = overall_score(normalized.pillar_scores)
    result = AnalysisResult(
        url=url,
        timestamp=format_timestamp(moment),
        overall_score=score,
        overall_grade=grade_for_score(score),
        pillar_scores=normalized.pillar_scores,
        recommendations=normalized.recommendations,
        detected_entities=normalized.detected_entities,
        content_gaps=normalized.content_gaps,
        analysis_time=max(0, round_half_up(finished - started_at)),
        content_extracted=ContentExtracted(
            title=content["title"],
            meta_description=content["meta_description"],
            meta_keywords=content["meta_keywords"],
            headings=tuple(content["headings"]),
            schema_markup=tuple(content["schema_markup"]),
            # no measurement happens; values are placeholders
            performance_metrics=PerformanceMetrics(load_time=0, core_web_vitals={}),
        ),
        summary=summarize_scores(score, normalized.pillar_scores, normalized.recommendations),
    )
    logger.info(
        "Analysis assembled",
        extra={"url": url, "overall_score": score, "overall_grade": result.overall_grade},
    )
    return result
