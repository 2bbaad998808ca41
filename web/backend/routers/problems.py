#!/usr/bin/env python3
"""
Problem endpoints - details, filtered listing, daily problem and search.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from database.repositories.problem import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, ProblemFilters
from ..dependencies import get_problem_service
from ..services.problem_service import ProblemService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/problems", tags=["problems"])


def split_tags(tags: Optional[str]):
    """Comma separated tag filter; blank entries are dropped."""
    if not tags:
        return []
    return [t.strip() for t in tags.split(',') if t.strip()]


@router.get("/details/{identifier}")
async def get_problem_details(
    identifier: str,
    service: ProblemService = Depends(get_problem_service)
):
    """
    Get a problem by question id or title slug.

    The stored row is served while fresh; otherwise the problem is
    fetched, scored and stored first.
    """
    return await service.get_details(identifier)


@router.get("/list")
async def list_problems(
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, description=f"Capped at {MAX_LIST_LIMIT}"),
    skip: int = Query(default=0, ge=0),
    difficulty: Optional[str] = Query(default=None, description="Easy, Medium or Hard"),
    tags: Optional[str] = Query(default=None, description="Comma separated tag names"),
    min_rating: Optional[float] = Query(default=None, alias="minRating"),
    max_rating: Optional[float] = Query(default=None, alias="maxRating"),
    sort_by: str = Query(default="question_id", alias="sortBy"),
    sort_order: str = Query(default="ASC", alias="sortOrder"),
    service: ProblemService = Depends(get_problem_service)
):
    """
    List stored problems. All filters are optional and combined with AND.
    """
    filters = ProblemFilters(
        difficulty=difficulty,
        tags=split_tags(tags),
        min_score=min_rating,
        max_score=max_rating,
        sort_by=sort_by,
        sort_order=sort_order.upper(),
        limit=limit,
        offset=skip,
    )
    return await service.list_problems(filters)


@router.get("/daily")
async def get_daily_problem(service: ProblemService = Depends(get_problem_service)):
    """Today's problem; it is stored and scored as a side effect."""
    return await service.get_daily()


@router.get("/search")
async def search_problems(
    query: str = Query(..., min_length=1, description="Substring of title or slug"),
    limit: int = Query(default=20, ge=1, le=MAX_LIST_LIMIT),
    service: ProblemService = Depends(get_problem_service)
):
    return await service.search(query, limit)


@router.get("/stats")
async def get_problem_stats(service: ProblemService = Depends(get_problem_service)):
    """Stored problem counts, score averages and response cache stats."""
    return await service.get_stats()
