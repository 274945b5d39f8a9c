"""GEO Analyzer API – FastAPI app and endpoints."""

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ai_service import ReasoningEngineClient
from analysis_service import Extractor, preview_extraction, run_analysis
from config import load_settings
from errors import AnalysisError
from logging_config import setup_logging
from schemas import AnalysisResult, AnalyzeRequest, ExtractionPreview
from scraper import extract_content

settings = load_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

_engine_client = ReasoningEngineClient(settings.engine)

app = FastAPI(
    title="GEO Analyzer API",
    description="AI-first (Generative Engine Optimization) website analysis",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine_client() -> ReasoningEngineClient:
    return _engine_client


def get_extractor() -> Extractor:
    return extract_content


def get_fetch_timeout() -> float:
    return settings.fetch_timeout_seconds


def _to_http_error(exc: AnalysisError, url: str) -> HTTPException:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Analysis request failed",
        extra={"url": url, "error_type": type(exc).__name__, "error": exc.message},
    )
    return HTTPException(status_code=exc.status_code, detail=exc.user_message)


@app.post("/analyze", response_model=AnalysisResult)
def analyze(
    body: AnalyzeRequest,
    engine: ReasoningEngineClient = Depends(get_engine_client),
    extractor: Extractor = Depends(get_extractor),
    fetch_timeout: float = Depends(get_fetch_timeout),
) -> AnalysisResult:
    """
    Pipeline: extract page content -> build prompt -> Claude -> normalize -> assemble.
    """
    try:
        return run_analysis(body.url, engine, fetch_timeout=fetch_timeout, extractor=extractor)
    except AnalysisError as exc:
        raise _to_http_error(exc, body.url)


@app.post("/extract", response_model=ExtractionPreview)
def extract(
    body: AnalyzeRequest,
    extractor: Extractor = Depends(get_extractor),
    fetch_timeout: float = Depends(get_fetch_timeout),
) -> ExtractionPreview:
    """Return what the extractor sees on the page, without any AI analysis."""
    try:
        return preview_extraction(body.url, fetch_timeout=fetch_timeout, extractor=extractor)
    except AnalysisError as exc:
        raise _to_http_error(exc, body.url)


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}
