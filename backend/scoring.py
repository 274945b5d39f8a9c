"""Grade/status thresholds and score-derived summaries."""

import math

from schemas import (
    PillarHighlight,
    PillarScores,
    Recommendation,
    ScoreSummary,
    StatusCounts,
)

PILLAR_LABELS = {
    "contentQuality": "Content Quality",
    "structuredSignals": "Structured Signals",
    "authoritySignals": "Authority Signals",
    "crawlability": "Crawlability",
    "performance": "Performance",
    "modularContent": "Modular Content",
}

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def grade_for_score(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def status_for_score(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    return "poor"


def round_half_up(value: float) -> int:
    """Nearest integer with .5 rounded up (Python's round() rounds to even)."""
    return int(math.floor(value + 0.5))


def overall_score(pillar_scores: PillarScores) -> int:
    """Unweighted mean of all six pillars, defaulted ones included."""
    scores = [pillar.score for _, pillar in pillar_scores.items()]
    return round_half_up(sum(scores) / 6)


def performance_message(score: int) -> str:
    if score >= 90:
        return "Excellent! Your website is highly optimized for AI discovery."
    if score >= 80:
        return "Great job! Your website is well-optimized for AI search engines."
    if score >= 70:
        return "Good! Your website has solid AI optimization with room for improvement."
    if score >= 60:
        return "Fair! Your website needs some optimization for better AI discoverability."
    if score >= 50:
        return "Needs work! Your website requires significant optimization for AI search."
    return "Poor! Your website needs major optimization to be discovered by AI engines."


def _highlight(key: str, pillar) -> PillarHighlight:
    return PillarHighlight(pillar=key, name=PILLAR_LABELS[key], score=pillar.score, grade=pillar.grade)


def summarize_scores(
    score: int,
    pillar_scores: PillarScores,
    recommendations: tuple[Recommendation, ...] | list[Recommendation],
) -> ScoreSummary:
    pillars = pillar_scores.items()
    strongest = sorted(pillars, key=lambda item: item[1].score, reverse=True)
    weakest = sorted(pillars, key=lambda item: item[1].score)
    # stable sorts: ties keep canonical pillar order

    scores = [pillar.score for _, pillar in pillars]
    ordered = sorted(recommendations, key=lambda rec: PRIORITY_RANK.get(rec.priority, 1))

    return ScoreSummary(
        performance_message=performance_message(score),
        top_strengths=tuple(_highlight(key, pillar) for key, pillar in strongest[:2]),
        top_improvements=tuple(_highlight(key, pillar) for key, pillar in weakest[:2]),
        status_counts=StatusCounts(
            excellent=sum(1 for s in scores if s >= 80),
            good=sum(1 for s in scores if 60 <= s < 80),
            poor=sum(1 for s in scores if s < 60),
        ),
        recommendation_order=tuple(rec.id for rec in ordered),
    )
