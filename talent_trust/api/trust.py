"""
Talent Trust - Trust API

Admin endpoints (bearer JWT, admin role required):
    GET  /api/talent/trust/{talent_id}          - Persisted score, or computed on demand
    POST /api/talent/trust/{talent_id}/update   - Recompute and persist one talent
    POST /api/talent/trust/recalculate-all      - Recompute and persist every talent
    GET  /api/admin/trust/stats                 - Low-trust talent count

Errors are JSON {"error": str}: 401 no/invalid token, 403 not admin,
404 unknown talent, 500 data store failure.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import structlog

from talent_trust.dependencies import get_trust_service
from talent_trust.errors import UpstreamFailure
from talent_trust.security import require_admin
from talent_trust.trust.engine import (
    LOW_TRUST_THRESHOLD,
    TrustFactors,
    needs_improvement_plan,
    score_band,
    score_label,
)
from talent_trust.trust.service import ON_DEMAND_NOTE, TrustScoreService
from talent_trust.trust.store import utc_now_iso

logger = structlog.get_logger()


# =============================================
# REQUEST/RESPONSE MODELS
# =============================================

class TrustFactorsResponse(BaseModel):
    completedProjects: int
    adminComplaints: int
    missedDeadlines: int
    positiveRatings: int
    responseTime: float
    clientRetention: int
    defaulted: Optional[List[str]] = None

    @classmethod
    def from_factors(cls, factors: TrustFactors) -> "TrustFactorsResponse":
        return cls(**factors.to_dict())


class TrustScoreResponse(BaseModel):
    trustScore: float
    label: str
    band: str
    needsImprovementPlan: bool
    factors: TrustFactorsResponse
    lastUpdated: Optional[str]
    note: Optional[str] = None


class UpdateTrustScoreResponse(BaseModel):
    success: bool = True
    trustScore: float
    label: str
    band: str
    needsImprovementPlan: bool
    factors: TrustFactorsResponse


class TalentRecalculation(BaseModel):
    talentId: str
    trustScore: Optional[float]
    success: bool


class RecalculateAllResponse(BaseModel):
    success: bool = True
    processed: int
    results: List[TalentRecalculation]


class TrustStatsResponse(BaseModel):
    lowTrustTalents: int
    threshold: int
    timestamp: str


def presentation(score: float) -> dict:
    """Display fields shared by every single-talent response."""
    return {
        "label": score_label(score),
        "band": score_band(score),
        "needsImprovementPlan": needs_improvement_plan(score),
    }


# =============================================
# TRUST API ROUTES
# =============================================

trust_router = APIRouter(prefix="/api/talent", tags=["trust"])


@trust_router.get(
    "/trust/{talent_id}",
    response_model=TrustScoreResponse,
    response_model_exclude_unset=True,
)
def get_trust_score(
    talent_id: str,
    user: dict = Depends(require_admin),
    service: TrustScoreService = Depends(get_trust_service),
):
    """
    Current trust score for a talent.

    If the talent has never been scored, the score is computed on the fly
    and returned with lastUpdated=null and a note. It is not saved; use the
    update endpoint for that.
    """
    try:
        resolved = service.resolve(talent_id, user["role"])
    except UpstreamFailure as e:
        logger.error("get_trust_score_failed", talent_id=talent_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get trust score") from e

    extra = {} if resolved.from_cache else {"note": ON_DEMAND_NOTE}
    return TrustScoreResponse(
        trustScore=resolved.score,
        **presentation(resolved.score),
        factors=TrustFactorsResponse.from_factors(resolved.factors),
        lastUpdated=resolved.last_updated,
        **extra,
    )


@trust_router.post("/trust/recalculate-all", response_model=RecalculateAllResponse)
async def recalculate_all_trust_scores(
    background: bool = Query(False, description="Queue on the worker instead of running inline"),
    user: dict = Depends(require_admin),
    service: TrustScoreService = Depends(get_trust_service),
):
    """
    Recompute and persist every talent's score.

    A failure on one talent is reported in its results entry and does not
    stop the batch. With ?background=true the job is handed to the arq
    worker and the response is 202 with the job id.
    """
    if background:
        from talent_trust.workers.recalculate import enqueue_recalculation
        try:
            job_id = await enqueue_recalculation(user["id"])
        except Exception as e:
            logger.error("recalculation_enqueue_failed", error=str(e))
            raise HTTPException(status_code=500, detail="Failed to recalculate trust scores") from e
        return JSONResponse(status_code=202, content={"success": True, "queued": True, "jobId": job_id})

    try:
        batch = await run_in_threadpool(service.recalculate_all, user["id"], user["role"])
    except UpstreamFailure as e:
        logger.error("recalculate_all_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to recalculate trust scores") from e

    return RecalculateAllResponse(
        processed=batch.processed,
        results=[TalentRecalculation(**r.to_dict()) for r in batch.results],
    )


@trust_router.post(
    "/trust/{talent_id}/update",
    response_model=UpdateTrustScoreResponse,
    response_model_exclude_none=True,
)
def update_trust_score(
    talent_id: str,
    user: dict = Depends(require_admin),
    service: TrustScoreService = Depends(get_trust_service),
):
    """Recompute, persist and audit one talent's score."""
    try:
        result = service.update(talent_id, user["id"], user["role"])
    except UpstreamFailure as e:
        logger.error("update_trust_score_failed", talent_id=talent_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update trust score") from e

    return UpdateTrustScoreResponse(
        trustScore=result.score,
        **presentation(result.score),
        factors=TrustFactorsResponse.from_factors(result.factors),
    )


# =============================================
# ADMIN ROUTES
# =============================================

admin_trust_router = APIRouter(prefix="/api/admin/trust", tags=["admin-trust"])


@admin_trust_router.get("/stats", response_model=TrustStatsResponse)
def admin_trust_stats(
    user: dict = Depends(require_admin),
    service: TrustScoreService = Depends(get_trust_service),
):
    """Admin: number of scored talents below the improvement-plan threshold."""
    try:
        low = service.count_low_trust(user["role"])
    except UpstreamFailure as e:
        logger.error("trust_stats_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get trust stats") from e

    return TrustStatsResponse(
        lowTrustTalents=low,
        threshold=LOW_TRUST_THRESHOLD,
        timestamp=utc_now_iso(),
    )
