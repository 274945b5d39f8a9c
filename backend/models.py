"""Internal data types passed between pipeline stages.

Caller-facing result records live in schemas.py.
Types for extractor output and engine requests live here.
"""

from typing import TypedDict


class ExtractedContent(TypedDict):
    """Structured output from the content extractor."""

    title: str
    meta_description: str
    meta_keywords: str
    headings: list[str]
    content: str
    schema_markup: list[str]
    links: list[str]
    images: list[str]
    text_content: str
    html: str


class EngineRequest(TypedDict):
    """Prompt payload for the reasoning engine."""

    system: str
    user: str


class ContentStructure(TypedDict):
    """Summary of the page's on-page structure."""

    hasTitle: bool
    hasMetaDescription: bool
    hasMetaKeywords: bool
    headingCount: int
    headingHierarchy: dict[str, int]
    hasSchemaMarkup: bool
    linkCount: int
    imageCount: int
    contentLength: int
    hasStructuredContent: bool
