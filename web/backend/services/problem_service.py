#!/usr/bin/env python3
"""
Problem service - response formatting for problem endpoints.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from core.app_context import AppContext
from core.cache.response_cache import make_cache_key
from database.dto import ProblemDTO
from database.repositories.problem import ProblemFilters
from ..models.responses import (
    ProblemDetailResponse,
    ProblemListItem,
    ProblemListResponse,
    ProblemStatsResponse,
)
from ..utils import cached_response, format_acceptance_rate, safe_datetime_iso

logger = logging.getLogger(__name__)


def problem_detail(problem: ProblemDTO) -> ProblemDetailResponse:
    return ProblemDetailResponse(
        question_id=problem.question_id,
        question_frontend_id=problem.question_id,
        question_title=problem.title,
        title_slug=problem.title_slug,
        difficulty=problem.difficulty,
        likes=problem.likes,
        dislikes=problem.dislikes,
        acceptance_rate=problem.acceptance_rate,
        total_submissions=problem.total_submissions,
        topic_tags=problem.topic_tags,
        content=problem.content,
        hints=problem.hints,
        similar_questions=problem.similar_questions,
        is_paid_only=problem.is_premium,
        mathematical_score=problem.mathematical_score,
        ai_score=problem.ai_score,
        ai_reason=problem.ai_reason,
        last_updated=safe_datetime_iso(problem.last_updated),
    )


def problem_list_item(problem: ProblemDTO) -> ProblemListItem:
    return ProblemListItem(
        frontend_question_id=str(problem.question_id),
        title=problem.title,
        title_slug=problem.title_slug,
        difficulty=problem.difficulty,
        likes=problem.likes,
        dislikes=problem.dislikes,
        ac_rate=format_acceptance_rate(problem.acceptance_rate),
        total_submissions=problem.total_submissions,
        topic_tags=problem.topic_tags,
        is_paid_only=problem.is_premium,
        mathematical_score=problem.mathematical_score,
        ai_score=problem.ai_score,
        ai_reason=problem.ai_reason,
    )


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


class ProblemService:
    """Service for problem lookups, listings and the daily problem."""

    def __init__(self, context: AppContext):
        self.context = context
        self.store = context.store
        self.sync = context.sync_service
        self.cache = context.cache
        self.cache_config = context.config.cache

    async def get_details(self, identifier: str) -> Dict[str, Any]:
        """Sync-if-stale then format one problem."""
        async def produce():
            problem = await self.sync.sync_problem(identifier)
            return _dump(problem_detail(problem))

        key = make_cache_key("problem_details", identifier=identifier)
        return await cached_response(self.cache, key, produce)

    async def list_problems(self, filters: ProblemFilters) -> Dict[str, Any]:
        async def produce():
            problems = await asyncio.to_thread(self.store.list_problems, filters)
            return _dump(ProblemListResponse(
                problemset_question_list=[problem_list_item(p) for p in problems],
                total=len(problems),
            ))

        key = make_cache_key(
            "problem_list",
            difficulty=filters.difficulty,
            tags=tuple(filters.tags),
            min_score=filters.min_score,
            max_score=filters.max_score,
            sort_by=filters.sort_by,
            sort_order=filters.sort_order,
            limit=filters.limit,
            offset=filters.offset,
        )
        return await cached_response(self.cache, key, produce)

    async def search(self, query: str, limit: int = 20) -> Dict[str, Any]:
        async def produce():
            problems = await asyncio.to_thread(self.store.search_problems, query, limit)
            return _dump(ProblemListResponse(
                problemset_question_list=[problem_list_item(p) for p in problems],
                total=len(problems),
            ))

        key = make_cache_key("problem_search", query=query, limit=limit)
        return await cached_response(self.cache, key, produce)

    async def get_daily(self) -> Dict[str, Any]:
        key = make_cache_key("daily_problem")
        return await cached_response(
            self.cache, key, self.sync.sync_daily_problem,
            ttl_seconds=self.cache_config.daily_ttl_seconds
        )

    async def get_stats(self) -> Dict[str, Any]:
        stats = await asyncio.to_thread(self.store.get_problem_stats)
        cache_stats: Optional[Dict[str, Any]] = None
        if self.cache is not None:
            cache_stats = await asyncio.to_thread(self.cache.get_cache_stats)
        return _dump(ProblemStatsResponse(
            total=stats['total'],
            by_difficulty=stats['by_difficulty'],
            avg_mathematical_score=stats['avg_mathematical_score'],
            avg_ai_score=stats['avg_ai_score'],
            cache=cache_stats or {"available": False},
        ))
