"""Turn the reasoning engine's free-form reply into a complete, typed analysis.

Two stages:

1. `parse_response` is permissive. It finds the JSON object in the text,
   parses it (with one repair pass) and checks for a pillar_scores root.
   It never raises; a failure is reported as a reason string.
2. `coerce_analysis` is strict. Every field goes through a total default
   function, so the result always carries all six pillars and valid
   enumerated values.

`normalize_response` ties them together and returns the fallback analysis
whenever stage 1 fails. Nothing escapes it as an exception.
"""

import json
import logging
import math
import re
from typing import Any, Sequence

from schemas import (
    ContentGap,
    DetectedEntity,
    NormalizedAnalysis,
    PillarScore,
    PillarScores,
    Recommendation,
)
from scoring import grade_for_score, round_half_up, status_for_score

logger = logging.getLogger(__name__)

# (canonical key, snake_case key, human-readable key)
PILLARS = (
    ("contentQuality", "content_quality", "Content Quality"),
    ("structuredSignals", "structured_signals", "Structured Signals"),
    ("authoritySignals", "authority_signals", "Authority Signals"),
    ("crawlability", "crawlability", "Crawlability"),
    ("performance", "performance", "Performance"),
    ("modularContent", "modular_content", "Modular Content"),
)

PILLAR_SCORE_ROOTS = ("pillar_scores", "pillarScores")


def pillar_candidates(canonical: str, snake: str, label: str) -> list[tuple[str, str]]:
    """Lookup order for one pillar; the last entry is the legacy camelCase root."""
    return [
        ("pillar_scores", snake),
        ("pillar_scores", canonical),
        ("pillar_scores", label),
        ("pillarScores", canonical),
    ]


PILLAR_NAME_MAP = {
    "Content Quality": "contentQuality",
    "content_quality": "contentQuality",
    "contentQuality": "contentQuality",
    "Structured Signals": "structuredSignals",
    "structured_signals": "structuredSignals",
    "structuredSignals": "structuredSignals",
    "Authority Signals": "authoritySignals",
    "authority_signals": "authoritySignals",
    "authoritySignals": "authoritySignals",
    "Crawlability": "crawlability",
    "crawlability": "crawlability",
    "Performance": "performance",
    "performance": "performance",
    "Modular Content": "modularContent",
    "modular_content": "modularContent",
    "modularContent": "modularContent",
}
DEFAULT_PILLAR = "contentQuality"

RECOMMENDATIONS_KEYS = ("recommendations",)
ENTITIES_KEYS = ("detected_entities", "detectedEntities")
GAPS_KEYS = ("content_gaps", "contentGaps")

RECOMMENDATION_FIELDS = {
    "title": ("title", "name"),
    "description": ("description", "desc"),
    "pillar": ("pillar", "pillar_name"),
    "priority": ("implementation_priority", "priority"),
    "impact": ("estimated_impact", "impact"),
    "difficulty": ("technical_difficulty", "difficulty"),
    "estimated_time": ("estimated_time", "estimatedTime", "time"),
    "implementation": ("implementation", "steps"),
    "code_snippets": ("code_snippets", "codeSnippets", "code"),
}

ENTITY_FIELDS = {
    "name": ("name",),
    "type": ("type",),
    "confidence": ("confidence",),
    "context": ("context",),
}

GAP_FIELDS = {
    "element": ("element",),
    "description": ("description", "desc"),
    "impact": ("impact",),
    "priority": ("priority",),
}

# Steps and snippets sometimes arrive as objects ({"step": 1, "description": ...})
LIST_ITEM_TEXT_KEYS = ("description", "text", "content", "code", "snippet", "action", "step")

GRADES = ("A", "B", "C", "D", "F")
STATUSES = ("excellent", "good", "poor")
PRIORITIES = ("high", "medium", "low")
DIFFICULTIES = ("easy", "medium", "hard")
ENTITY_TYPES = ("person", "organization", "place", "product", "concept")

COMPLETED_BREAKDOWN = "AI analysis completed"
DEFAULT_IMPLEMENTATION = ("Implement the suggested changes",)

NO_JSON_OBJECT = "no_json_object"
JSON_PARSE_ERROR = "json_parse_error"
MISSING_PILLAR_SCORES = "missing_pillar_scores"


# ---------------------------------------------------------------------------
# Candidate-key lookup
# ---------------------------------------------------------------------------


def is_present(value: Any) -> bool:
    """Truthiness of a decoded JSON value: null, false, 0 and "" are absent."""
    if value is None or value is False:
        return False
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def _dig(source: Any, path: Sequence[str]) -> Any:
    current = source
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_present(source: Any, candidates: Sequence[str | Sequence[str]], default: Any = None) -> Any:
    """Value of the first candidate key (or key path) that is present, else `default`."""
    for candidate in candidates:
        path = (candidate,) if isinstance(candidate, str) else candidate
        value = _dig(source, path)
        if is_present(value):
            return value
    return default


# ---------------------------------------------------------------------------
# Stage 1: extraction and parsing
# ---------------------------------------------------------------------------


def _escape_inner_quotes(value: str) -> str:
    """
    Escape likely unescaped quotes and raw control characters inside JSON strings.
    A quote only closes a string when the next non-space char is : , } or ].
    """
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(value)
    i = 0

    while i < length:
        ch = value[i]
        if escaped:
            out.append(ch)
            escaped = False
            i += 1
            continue

        if ch == "\\":
            out.append(ch)
            escaped = True
            i += 1
            continue

        if ch == '"':
            if not in_string:
                in_string = True
                out.append(ch)
                i += 1
                continue

            j = i + 1
            while j < length and value[j].isspace():
                j += 1
            next_char = value[j] if j < length else ""

            if next_char in {":", ",", "}", "]", ""}:
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
            i += 1
            continue

        if in_string and ch in {"\n", "\r", "\t"}:
            out.append({"\n": "\\n", "\r": "\\r", "\t": "\\t"}[ch])
            i += 1
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def repair_json(json_str: str) -> str:
    repaired = (
        json_str
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )
    repaired = _escape_inner_quotes(repaired)
    return re.sub(r",\s*([}\]])", r"\1", repaired)


def extract_json_object(text: str) -> str | None:
    """Substring from the first "{" to the last "}", or None."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def _loads_object(json_str: str) -> dict | None:
    try:
        parsed = json.loads(json_str)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_response(raw_text: str | None) -> tuple[dict | None, str | None]:
    """Return (parsed object, None) or (None, failure reason). Never raises."""
    json_str = extract_json_object(raw_text or "")
    if json_str is None:
        return None, NO_JSON_OBJECT

    parsed = _loads_object(json_str)
    if parsed is None:
        parsed = _loads_object(repair_json(json_str))
        if parsed is None:
            return None, JSON_PARSE_ERROR
        logger.info("Reasoning engine JSON needed repair before parsing")

    if not any(is_present(parsed.get(root)) for root in PILLAR_SCORE_ROOTS):
        return None, MISSING_PILLAR_SCORES

    return parsed, None


# ---------------------------------------------------------------------------
# Stage 2: total per-field coercion
# ---------------------------------------------------------------------------


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _bounded_int(value: Any, low: int, high: int, default: int) -> int:
    number = _as_number(value)
    if number is None:
        return default
    return max(low, min(high, round_half_up(number)))


def _bounded_float(value: Any, low: float, high: float, default: float) -> float:
    number = _as_number(value)
    if number is None:
        return default
    return max(low, min(high, number))


def _text(value: Any, default: str) -> str:
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _choice(value: Any, allowed: Sequence[str], default: str, upper: bool = False) -> str:
    if not isinstance(value, str):
        return default
    cleaned = value.strip().upper() if upper else value.strip().lower()
    return cleaned if cleaned in allowed else default


def _item_text(item: Any) -> str:
    if isinstance(item, dict):
        item = first_present(item, LIST_ITEM_TEXT_KEYS)
    return _text(item, "")


def _text_list(value: Any) -> tuple[str, ...]:
    """Text items of a list (or a lone string); object items give up their first text-like field."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return ()
    return tuple(text for text in (_item_text(item) for item in value) if text)


def _fields(source: dict, table: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    return {name: first_present(source, keys) for name, keys in table.items()}


def _object_list(source: dict, keys: Sequence[str]) -> list[dict]:
    items = first_present(source, keys, [])
    if not isinstance(items, list):
        return []
    return [item if isinstance(item, dict) else {} for item in items]


def neutral_pillar_score() -> PillarScore:
    return PillarScore(
        score=50,
        breakdown="Analysis incomplete - using fallback score",
        grade="C",
        status="good",
    )


def create_pillar_score(value: Any) -> PillarScore:
    """Coerce a bare number or a {score, breakdown, grade, status} object."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = _as_number(value)
        if number is not None:
            score = max(0, min(100, round_half_up(number)))
            return PillarScore(
                score=score,
                breakdown=COMPLETED_BREAKDOWN,
                grade=grade_for_score(score),
                status=status_for_score(score),
            )

    if isinstance(value, dict) and is_present(value.get("score")):
        number = _as_number(value["score"])
        if number is not None:
            score = max(0, min(100, round_half_up(number)))
            # supplied grade/status are kept even when they disagree with the score
            return PillarScore(
                score=score,
                breakdown=_text(value.get("breakdown"), COMPLETED_BREAKDOWN),
                grade=_choice(value.get("grade"), GRADES, grade_for_score(score), upper=True),
                status=_choice(value.get("status"), STATUSES, status_for_score(score)),
            )

    logger.warning("Unusable pillar score, using neutral fallback", extra={"value_type": type(value).__name__})
    return neutral_pillar_score()


def map_pillar_name(name: Any) -> str:
    """Canonical pillar key for a label; unknown labels count as content quality."""
    if not isinstance(name, str):
        return DEFAULT_PILLAR
    return PILLAR_NAME_MAP.get(name.strip(), DEFAULT_PILLAR)


def resolve_pillar_scores(parsed: dict) -> PillarScores:
    resolved = {}
    missing = []
    for canonical, snake, label in PILLARS:
        value = first_present(parsed, pillar_candidates(canonical, snake, label), 0)
        if value == 0:
            missing.append(canonical)
        resolved[snake] = create_pillar_score(value)

    if missing:
        logger.warning("Reasoning engine omitted pillar scores", extra={"missing_pillars": missing})
    return PillarScores(**resolved)


def transform_recommendations(parsed: dict) -> tuple[Recommendation, ...]:
    out = []
    for index, source in enumerate(_object_list(parsed, RECOMMENDATIONS_KEYS)):
        fields = _fields(source, RECOMMENDATION_FIELDS)
        out.append(
            Recommendation(
                id=f"rec-{index}",
                title=_text(fields["title"], f"Recommendation {index + 1}"),
                description=_text(fields["description"], "No description provided"),
                pillar=map_pillar_name(fields["pillar"] or DEFAULT_PILLAR),
                priority=_choice(fields["priority"], PRIORITIES, "medium"),
                impact=_bounded_int(fields["impact"], 1, 10, 5),
                difficulty=_choice(fields["difficulty"], DIFFICULTIES, "medium"),
                estimated_time=_text(fields["estimated_time"], "1-2 hours"),
                implementation=_text_list(fields["implementation"]) or DEFAULT_IMPLEMENTATION,
                code_snippets=_text_list(fields["code_snippets"]),
            )
        )
    return tuple(out)


def transform_entities(parsed: dict) -> tuple[DetectedEntity, ...]:
    out = []
    for index, source in enumerate(_object_list(parsed, ENTITIES_KEYS)):
        fields = _fields(source, ENTITY_FIELDS)
        out.append(
            DetectedEntity(
                name=_text(fields["name"], f"Entity {index + 1}"),
                type=_choice(fields["type"], ENTITY_TYPES, "concept"),
                confidence=_bounded_float(fields["confidence"], 0.0, 1.0, 0.8),
                context=_text(fields["context"], "No context provided"),
            )
        )
    return tuple(out)


def transform_content_gaps(parsed: dict) -> tuple[ContentGap, ...]:
    out = []
    for index, source in enumerate(_object_list(parsed, GAPS_KEYS)):
        fields = _fields(source, GAP_FIELDS)
        out.append(
            ContentGap(
                element=_text(fields["element"], f"Element {index + 1}"),
                description=_text(fields["description"], "No description provided"),
                impact=_text(fields["impact"], "Medium impact"),
                priority=_choice(fields["priority"], PRIORITIES, "medium"),
            )
        )
    return tuple(out)


def coerce_analysis(parsed: dict) -> NormalizedAnalysis:
    return NormalizedAnalysis(
        pillar_scores=resolve_pillar_scores(parsed),
        recommendations=transform_recommendations(parsed),
        detected_entities=transform_entities(parsed),
        content_gaps=transform_content_gaps(parsed),
    )


# ---------------------------------------------------------------------------
# Fallback and entry point
# ---------------------------------------------------------------------------


def fallback_analysis() -> NormalizedAnalysis:
    """Fixed result used whenever the reply cannot be salvaged."""
    pillar = PillarScore(score=50, breakdown="Fallback analysis", grade="C", status="good")
    return NormalizedAnalysis(
        pillar_scores=PillarScores(
            content_quality=pillar,
            structured_signals=pillar,
            authority_signals=pillar,
            crawlability=pillar,
            performance=pillar,
            modular_content=pillar,
        ),
        recommendations=(
            Recommendation(
                id="fallback-1",
                title="Improve Content Quality",
                description="Focus on creating comprehensive, well-structured content",
                pillar="contentQuality",
                priority="medium",
                impact=7,
                difficulty="medium",
                estimated_time="2-3 hours",
                implementation=(
                    "Review and expand content sections",
                    "Add more detailed explanations",
                ),
            ),
        ),
        detected_entities=(),
        content_gaps=(),
    )


def normalize_response(raw_text: str | None) -> NormalizedAnalysis:
    """
    Normalize raw reasoning-engine text into a complete analysis.
    Returns the fallback analysis on any failure. Never raises.
    """
    logger.debug("Normalizing engine response", extra={"preview": (raw_text or "")[:500]})

    parsed, reason = parse_response(raw_text)
    if parsed is None:
        logger.warning("Engine response unusable, using fallback analysis", extra={"reason": reason})
        return fallback_analysis()

    try:
        analysis = coerce_analysis(parsed)
    except (ValueError, TypeError):
        logger.exception("Coercing engine response failed, using fallback analysis")
        return fallback_analysis()

    logger.info(
        "Engine response normalized",
        extra={
            "pillar_scores": [pillar.score for _, pillar in analysis.pillar_scores.items()],
            "recommendations": len(analysis.recommendations),
            "entities": len(analysis.detected_entities),
            "content_gaps": len(analysis.content_gaps),
        },
    )
    return analysis
