"""Render the six-pillar GEO rubric and a page digest into an engine request."""

from models import EngineRequest, ExtractedContent

# Hard cutoff on the text digest sent to the engine (characters, not words)
CONTENT_DIGEST_LIMIT = 8000
HEADING_DELIMITER = " | "

SYSTEM_MESSAGE = """You are an expert AI-first SEO analyst specializing in Generative Engine Optimization (GEO). Analyze websites for AI search engine optimization across 6 key pillars.

CRITICAL: You MUST provide scores for ALL 6 pillars. Do not skip any.

1. CONTENT QUALITY (0-100):
   - Semantic richness and contextual clarity
   - EEAT compliance (Experience, Expertise, Authority, Trust)
   - Content depth and comprehensiveness
   - Original data and unique insights
   - Content freshness and relevance

2. STRUCTURED SIGNALS (0-100):
   - Schema.org markup implementation
   - Heading hierarchy (H1, H2, H3 structure)
   - JSON-LD structured data
   - FAQ and HowTo markup
   - Structured data completeness

3. AUTHORITY SIGNALS (0-100):
   - Author credentials and expertise indicators
   - Citations and reference quality
   - Trusted external links and backlink profile
   - Domain authority and trust signals
   - Expert positioning and thought leadership

4. CRAWLABILITY & INDEXING (0-100):
   - Robots.txt allowlists for AI crawlers
   - XML sitemaps and site structure
   - Fast, JavaScript-light HTML for AI processing
   - Meta tags and indexing directives
   - Content accessibility for AI engines

5. PERFORMANCE (0-100):
   - Page load speed (target: <3 seconds)
   - Core Web Vitals compliance
   - Mobile and desktop responsiveness
   - Performance optimization opportunities
   - User experience metrics

6. MODULAR "LIFTABLE" CONTENT (0-100):
   - Lists and grids for easy AI extraction
   - Answer boxes for direct LLM reuse
   - Pattern libraries for content structure
   - Reusable content blocks for AI consumption
   - Content modularity and organization

Return ONLY valid raw JSON. Do not include markdown, code fences, or text outside JSON.

REQUIRED OUTPUT FORMAT - You MUST include ALL 6 pillars:
{
  "overall_score": 0-100,
  "pillar_scores": {
    "content_quality": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"},
    "structured_signals": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"},
    "authority_signals": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"},
    "crawlability": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"},
    "performance": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"},
    "modular_content": {"score": 0-100, "breakdown": "detailed analysis", "grade": "A/B/C/D/F", "status": "excellent/good/poor"}
  },
  "recommendations": [
    {"title": "string", "description": "string", "pillar": "content_quality", "priority": "high/medium/low", "impact": 1-10, "difficulty": "easy/medium/hard", "estimated_time": "string", "implementation": ["step"], "code_snippets": ["string"]}
  ],
  "detected_entities": [
    {"name": "string", "type": "person/organization/place/product/concept", "confidence": 0-1, "context": "string"}
  ],
  "content_gaps": [
    {"element": "string", "description": "string", "impact": "string", "priority": "high/medium/low"}
  ]
}

Provide 5-8 specific, actionable recommendations."""

USER_TEMPLATE = """Analyze this website content for AI-first optimization:

Title: {title}
Content: {content}
URL: {url}
Meta Description: {meta_description}
Meta Keywords: {meta_keywords}
Heading Structure: {headings}
Schema Markup: {schema}
Content Length: {content_length} characters
Links: {link_count} external links
Images: {image_count} images

Please provide a comprehensive analysis following the framework above."""


def build_user_message(url: str, content: ExtractedContent) -> str:
    text = content.get("text_content", "") or ""
    return USER_TEMPLATE.format(
        title=content.get("title", "") or "",
        content=text[:CONTENT_DIGEST_LIMIT],
        url=url,
        meta_description=content.get("meta_description", "") or "",
        meta_keywords=content.get("meta_keywords", "") or "",
        headings=HEADING_DELIMITER.join(content.get("headings", []) or []),
        schema="Present" if content.get("schema_markup") else "None detected",
        content_length=len(text),
        link_count=len(content.get("links", []) or []),
        image_count=len(content.get("images", []) or []),
    )


def build_request_payload(url: str, content: ExtractedContent) -> EngineRequest:
    """Pure: same inputs, same payload. Works for empty content too."""
    return {"system": SYSTEM_MESSAGE, "user": build_user_message(url, content)}
