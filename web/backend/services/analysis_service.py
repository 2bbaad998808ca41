#!/usr/bin/env python3
"""
Analysis service - recommendation and similar-problem responses.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from core import analysis
from core.app_context import AppContext
from core.cache.response_cache import make_cache_key
from core.exceptions import InvalidQuery, NotFound, UpstreamUnavailable
from core.scorer.mathematical import popularity_percentage
from core.utils import parse_identifier
from database.dto import ProblemDTO
from ..models.requests import AnalyzeRequest
from ..models.responses import (
    AnalysisResponse,
    AnalysisTags,
    Insights,
    LearningOutcome,
    MatchingTopic,
    OriginalProblem,
    SimilarProblem,
    SimilarProblemsResponse,
    UserProgress,
)
from ..utils import cached_response

logger = logging.getLogger(__name__)


class AnalysisService:
    """Service for problem analysis."""

    def __init__(self, context: AppContext):
        self.context = context
        self.store = context.store
        self.sync = context.sync_service
        self.cache = context.cache

    async def _user_skills(self, username: str) -> List[Dict[str, Any]]:
        """Skill tags for topic progress; an unknown or unreachable user has none."""
        try:
            user = await self.sync.sync_user(username)
        except (NotFound, UpstreamUnavailable) as e:
            logger.warning(f"Skill data unavailable for {username}: {e}")
            return []
        if user.skill_stats.is_missing:
            return []
        return analysis.flatten_skill_stats(user.skill_stats.data)

    def build_analysis(
        self,
        problem: ProblemDTO,
        skills: Optional[List[Dict[str, Any]]] = None,
        username: Optional[str] = None
    ) -> AnalysisResponse:
        """Assemble the analysis payload from a stored problem (and user skills)."""
        math_score = problem.mathematical_score
        rec = analysis.recommendation(math_score)
        topics = analysis.problem_topics(problem.topic_tags)

        progress = None
        has_solved_similar = False
        solved_similar_count = 0
        if username:
            summary = analysis.user_progress(topics, skills or [])
            has_solved_similar = summary['hasExperience']
            solved_similar_count = summary['solvedSimilarCount']
            progress = UserProgress(
                has_experience=summary['hasExperience'],
                matching_topics=[
                    MatchingTopic(name=t['name'], problems_solved=t['problemsSolved'], level=t['level'])
                    for t in summary['matchingTopics']
                ],
                total_user_topics=summary['totalUserTopics'],
                skill_level=summary['skillLevel'],
            )

        return AnalysisResponse(
            problem_id=problem.question_id,
            title=problem.title,
            title_slug=problem.title_slug,
            recommendation=rec,
            recommendation_reason=analysis.recommendation_reason(rec, math_score),
            estimated_solving_time=analysis.estimated_solving_time(problem.difficulty, problem.acceptance_rate),
            difficulty=problem.difficulty,
            topics=topics,
            learning_outcomes=[LearningOutcome(**o) for o in analysis.learning_outcomes(topics)],
            likes=problem.likes,
            dislikes=problem.dislikes,
            like_ratio=analysis.like_ratio_percent(problem.likes, problem.dislikes),
            has_solved_similar=has_solved_similar,
            solved_similar_count=solved_similar_count,
            insights=Insights(
                popularity_score=analysis.popularity_score(math_score),
                popularity_percentage=popularity_percentage(problem.likes),
                difficulty_level=problem.difficulty,
                acceptance_rate=problem.acceptance_rate,
                total_submissions=problem.total_submissions,
                is_premium=problem.is_premium,
            ),
            mathematical_score=math_score if math_score is not None else analysis.MISSING_SCORE,
            ai_score=problem.ai_score if problem.ai_score is not None else analysis.MISSING_SCORE,
            ai_reason=problem.ai_reason,
            tags=AnalysisTags(
                difficulty=problem.difficulty,
                likes=problem.likes,
                dislikes=problem.dislikes,
                acceptance_rate=problem.acceptance_rate,
                total_submissions=problem.total_submissions,
                is_premium=problem.is_premium,
            ),
            user_progress=progress,
        )

    async def analyze(self, request: AnalyzeRequest) -> Dict[str, Any]:
        try:
            key_id = parse_identifier(request.problem_id)
        except ValueError as e:
            raise InvalidQuery(str(e)) from e

        async def produce():
            problem = await self.sync.sync_problem(key_id, force_update=request.force_refresh)
            skills = await self._user_skills(request.username) if request.username else None
            result = self.build_analysis(problem, skills, request.username)
            return result.model_dump(by_alias=True, mode="json")

        key = make_cache_key("analysis", problem_id=str(key_id), username=request.username)
        return await cached_response(self.cache, key, produce, bypass=request.force_refresh)

    async def similar(self, problem_id: str, limit: int = 5) -> Dict[str, Any]:
        key_id = parse_identifier(problem_id) if problem_id and problem_id.strip() else None
        if not isinstance(key_id, int):
            raise InvalidQuery(f"Invalid problem ID: {problem_id}")

        async def produce():
            original = await asyncio.to_thread(self.store.get_problem_by_id, key_id)
            if original is None:
                raise NotFound(f"Problem #{key_id} not found")
            similar = await asyncio.to_thread(self.store.find_similar, key_id, limit)
            return SimilarProblemsResponse(
                original_problem=OriginalProblem(
                    id=original.question_id,
                    title=original.title,
                    difficulty=original.difficulty,
                    topics=analysis.problem_topics(original.topic_tags),
                    mathematical_score=original.mathematical_score,
                    ai_score=original.ai_score,
                ),
                similar_problems=[
                    SimilarProblem(
                        id=p.question_id,
                        title=p.title,
                        title_slug=p.title_slug,
                        difficulty=p.difficulty,
                        acceptance_rate=p.acceptance_rate,
                        likes=p.likes,
                        dislikes=p.dislikes,
                        mathematical_score=p.mathematical_score,
                        ai_score=p.ai_score,
                        ai_reason=p.ai_reason,
                    )
                    for p in similar
                ],
            ).model_dump(by_alias=True, mode="json")

        key = make_cache_key("similar", problem_id=key_id, limit=limit)
        return await cached_response(self.cache, key, produce)
