"""Pydantic schemas for API request/response and the analysis result records."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Grade = Literal["A", "B", "C", "D", "F"]
Status = Literal["excellent", "good", "poor"]
Priority = Literal["high", "medium", "low"]
Difficulty = Literal["easy", "medium", "hard"]
EntityType = Literal["person", "organization", "place", "product", "concept"]
PillarKey = Literal[
    "contentQuality",
    "structuredSignals",
    "authoritySignals",
    "crawlability",
    "performance",
    "modularContent",
]


class Record(BaseModel):
    """Immutable value record serialised with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PillarScore(Record):
    score: int = Field(ge=0, le=100)
    breakdown: str
    grade: Grade
    status: Status


class PillarScores(Record):
    """Exactly the six pillars, in canonical order."""

    content_quality: PillarScore
    structured_signals: PillarScore
    authority_signals: PillarScore
    crawlability: PillarScore
    performance: PillarScore
    modular_content: PillarScore

    def items(self) -> list[tuple[str, PillarScore]]:
        """(camelCase key, score) pairs in canonical order."""
        return [
            (to_camel(name), getattr(self, name))
            for name in type(self).model_fields
        ]


class Recommendation(Record):
    id: str
    title: str
    description: str
    pillar: PillarKey
    priority: Priority
    impact: int = Field(ge=1, le=10)
    difficulty: Difficulty
    estimated_time: str
    implementation: tuple[str, ...] = Field(min_length=1)
    code_snippets: tuple[str, ...] = ()


class DetectedEntity(Record):
    name: str
    type: EntityType
    confidence: float = Field(ge=0.0, le=1.0)
    context: str


class ContentGap(Record):
    element: str
    description: str
    impact: str
    priority: Priority


class NormalizedAnalysis(Record):
    """Validated output of the response normalizer."""

    pillar_scores: PillarScores
    recommendations: tuple[Recommendation, ...] = ()
    detected_entities: tuple[DetectedEntity, ...] = ()
    content_gaps: tuple[ContentGap, ...] = ()


class PerformanceMetrics(Record):
    load_time: float = 0
    core_web_vitals: dict = Field(default_factory=dict)


class ContentExtracted(Record):
    title: str
    meta_description: str
    meta_keywords: str
    headings: tuple[str, ...]
    schema_markup: tuple[str, ...]
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class PillarHighlight(Record):
    pillar: PillarKey
    name: str
    score: int
    grade: Grade


class StatusCounts(Record):
    excellent: int
    good: int
    poor: int


class ScoreSummary(Record):
    performance_message: str
    top_strengths: tuple[PillarHighlight, ...]
    top_improvements: tuple[PillarHighlight, ...]
    status_counts: StatusCounts
    recommendation_order: tuple[str, ...]


class AnalysisResult(Record):
    """Root aggregate returned by POST /analyze."""

    url: str
    timestamp: str
    overall_score: int = Field(ge=0, le=100)
    overall_grade: Grade
    pillar_scores: PillarScores
    recommendations: tuple[Recommendation, ...]
    detected_entities: tuple[DetectedEntity, ...]
    content_gaps: tuple[ContentGap, ...]
    analysis_time: int = Field(ge=0)
    content_extracted: ContentExtracted
    summary: ScoreSummary


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze and POST /extract."""

    url: str = ""

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, value: object) -> str:
        return str(value or "").strip()


class ExtractionPreview(Record):
    """Response for POST /extract: what the extractor saw, no AI involved."""

    url: str
    title: str
    meta_description: str
    meta_keywords: str
    headings: tuple[str, ...]
    schema_markup: tuple[str, ...]
    link_count: int
    image_count: int
    text_length: int
    structure: dict
    key_entities: tuple[str, ...]
