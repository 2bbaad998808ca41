#!/usr/bin/env python3
"""
Analysis endpoints - problem recommendation and similar problems.
"""

import logging
from fastapi import APIRouter, Depends, Query, Request

from ..dependencies import get_analysis_service
from ..models.requests import AnalyzeRequest
from ..rate_limit import ANALYSIS_LIMIT, limiter
from ..services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("/analyze")
@limiter.limit(ANALYSIS_LIMIT)
async def analyze_problem(
    request: Request,
    body: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze a problem and recommend whether to solve it.

    With a username, the response also reports how the problem's topics
    overlap with the user's solved skill tags.
    """
    return await service.analyze(body)


@router.get("/similar/{problem_id}")
@limiter.limit(ANALYSIS_LIMIT)
async def get_similar_problems(
    request: Request,
    problem_id: str,
    limit: int = Query(default=5, ge=1, le=50, description="Maximum similar problems to return"),
    service: AnalysisService = Depends(get_analysis_service)
):
    """Stored problems sharing a topic tag, same difficulty first."""
    return await service.similar(problem_id, limit)
