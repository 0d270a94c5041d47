"""
API Endpoints for the Analytics Engine

FastAPI adapter that:
1. Validates raw search-console rows at the ingestion boundary
2. Runs the analytics engine over the accepted records
3. Exposes the standalone scorers (content quality, intent, CTR)

The adapter holds no state; every request is a full recompute.
"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field

from searchlens import __version__
from searchlens.analyzer import AnalyticsEngine, EngineConfig
from searchlens.models.validation import validate_records
from searchlens.scoring.aggregation import PositionAveraging
from searchlens.scoring.clustering import ClusteringBudget
from searchlens.scoring.content import ContentMetadata, analyze_content_quality
from searchlens.scoring.helpers import analyze_ctr
from searchlens.scoring.intent import classify_search_intent, get_intent_distribution
from searchlens.utils import get_settings

# Configure logging to stdout
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/engine",
    tags=["Engine"],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class EngineOverrides(BaseModel):
    """Per-request overrides of the configured engine parameters."""
    min_impressions: Optional[int] = Field(default=None, ge=0)
    position_averaging: Optional[Literal["weighted", "running"]] = None
    similarity_threshold: Optional[float] = Field(default=None, ge=0, le=1)
    max_clusters: Optional[int] = Field(default=None, ge=1)
    max_iterations: Optional[int] = Field(default=None, ge=1)
    top_query_cap: Optional[int] = Field(default=None, ge=1)
    search_window: Optional[int] = Field(default=None, ge=1)
    sample_pairs: Optional[int] = Field(default=None, ge=1)
    quick_win_threshold: Optional[float] = None
    cannibalization_page_threshold: Optional[int] = Field(default=None, ge=2)


class AnalyzeRequest(BaseModel):
    """
    Rows to analyze.

    Rows are keyed by export headers ("Query", "Page", "Clicks", ...) or the
    canonical lower-case names; both are accepted.
    """
    records: List[Dict[str, Any]]
    config: Optional[EngineOverrides] = None


class ContentQualityRequest(BaseModel):
    """Text body plus optional page facts."""
    content: str
    target_keyword: Optional[str] = None
    image_count: int = Field(default=0, ge=0)
    video_count: int = Field(default=0, ge=0)
    internal_links: int = Field(default=0, ge=0)
    external_links: int = Field(default=0, ge=0)
    heading_count: int = Field(default=0, ge=0)


class IntentRequest(BaseModel):
    """Keywords to classify."""
    keywords: List[str] = Field(..., min_length=1)


class CtrRequest(BaseModel):
    """Observed CTR at a position."""
    position: float = Field(..., ge=0)
    current_ctr: float = Field(..., ge=0, le=1)
    impressions: int = Field(default=0, ge=0)
    serp_features: List[str] = Field(default_factory=list)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def build_engine_config(overrides: Optional[EngineOverrides]) -> EngineConfig:
    """Merge request overrides onto the configured defaults."""
    settings = get_settings()
    base = EngineConfig.from_settings(settings)
    if overrides is None:
        return base

    budget = base.clustering_budget
    budget = ClusteringBudget(
        similarity_threshold=_override(overrides.similarity_threshold, budget.similarity_threshold),
        max_clusters=_override(overrides.max_clusters, budget.max_clusters),
        max_iterations=_override(overrides.max_iterations, budget.max_iterations),
        top_query_cap=_override(overrides.top_query_cap, budget.top_query_cap),
        search_window=_override(overrides.search_window, budget.search_window),
        sample_pairs=_override(overrides.sample_pairs, budget.sample_pairs),
    )

    return EngineConfig(
        min_impressions=_override(overrides.min_impressions, base.min_impressions),
        position_averaging=PositionAveraging(
            _override(overrides.position_averaging, base.position_averaging.value)
        ),
        clustering_budget=budget,
        quick_win_threshold=_override(overrides.quick_win_threshold, base.quick_win_threshold),
        cannibalization_page_threshold=_override(
            overrides.cannibalization_page_threshold, base.cannibalization_page_threshold
        ),
    )


def _override(value, default):
    return default if value is None else value


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/analyze")
async def analyze(request: AnalyzeRequest) -> Dict[str, Any]:
    """
    Validate rows and run the full engine.

    Returns the engine result plus the validation report for the rows.
    """
    try:
        config = build_engine_config(request.config)
        report = validate_records(request.records)
        result = AnalyticsEngine(config).run(report.records)
    except ValueError as e:
        logger.warning(f"Rejected analyze request: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    response = result.to_dict()
    response["validation"] = report.to_dict()
    return response


@router.post("/content-quality")
async def content_quality(request: ContentQualityRequest) -> Dict[str, Any]:
    """Score one text body."""
    metadata = ContentMetadata(
        image_count=request.image_count,
        video_count=request.video_count,
        internal_links=request.internal_links,
        external_links=request.external_links,
        heading_count=request.heading_count,
        target_keyword=request.target_keyword,
    )
    return analyze_content_quality(request.content, metadata).to_dict()


@router.post("/intent")
async def intent(request: IntentRequest) -> Dict[str, Any]:
    """Classify keywords and count them per intent."""
    return {
        "keywords": [
            {"keyword": k, "intent": classify_search_intent(k).value}
            for k in request.keywords
        ],
        "distribution": get_intent_distribution(request.keywords),
    }


@router.post("/ctr")
async def ctr(request: CtrRequest) -> Dict[str, Any]:
    """Compare observed CTR against the benchmark for its position."""
    return analyze_ctr(
        request.position,
        request.current_ctr,
        request.impressions,
        request.serp_features,
    ).to_dict()


# =============================================================================
# APPLICATION
# =============================================================================

app = FastAPI(
    title="SearchLens Analytics Engine",
    description="Deterministic search-performance analytics: page scoring, cannibalization, topic clusters",
    version=__version__,
)
app.include_router(router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
    }
