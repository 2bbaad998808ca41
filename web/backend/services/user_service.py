#!/usr/bin/env python3
"""
User service - formatting of cached user blobs and pass-through user data.
"""

import logging
from typing import Any, Dict, List

from core import analysis
from core.app_context import AppContext
from core.cache.response_cache import make_cache_key
from core.exceptions import NotFound, UpstreamUnavailable
from core.utils import parse_int, tag_name
from ..models.responses import SkillStat, SkillStatsResponse, SolvedSummaryResponse
from ..utils import cached_response

logger = logging.getLogger(__name__)

# Used when the live profile is unreachable and the cached blob has no totals
DEFAULT_TOTALS = {'Easy': 800, 'Medium': 1700, 'Hard': 700}
MIN_TAG_PROBLEMS_ESTIMATE = 50


def format_profile(profile: Dict[str, Any], skills: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Normalize the handful of profile fields the UI reads, keeping the rest."""
    formatted = dict(profile)
    formatted.update(
        totalSolved=profile.get('totalSolved') or profile.get('solvedProblem') or 0,
        ranking=profile.get('ranking') or profile.get('globalRanking') or 'N/A',
        contributionPoints=profile.get('contributionPoints') or profile.get('contributionPoint') or 0,
        reputation=profile.get('reputation') or 0,
        skills=[s['tagName'] for s in skills],
        topicTags=[
            {'name': s['tagName'], 'slug': s['tagSlug'], 'count': s['problemsSolved'], 'level': s['level']}
            for s in skills
        ],
    )
    return formatted


def solved_from_profile(profile: Dict[str, Any]) -> SolvedSummaryResponse:
    return SolvedSummaryResponse(
        easy_solved=parse_int(profile.get('easySolved')),
        medium_solved=parse_int(profile.get('mediumSolved')),
        hard_solved=parse_int(profile.get('hardSolved')),
        total_easy=parse_int(profile.get('totalEasy')),
        total_medium=parse_int(profile.get('totalMedium')),
        total_hard=parse_int(profile.get('totalHard')),
        recent_submissions=profile.get('recentSubmissions') or [],
    )


def solved_from_blob(solved: Dict[str, Any]) -> SolvedSummaryResponse:
    by_difficulty = solved.get('solvedProblem') if isinstance(solved.get('solvedProblem'), dict) else {}
    return SolvedSummaryResponse(
        easy_solved=parse_int(solved.get('easySolved') or by_difficulty.get('Easy')),
        medium_solved=parse_int(solved.get('mediumSolved') or by_difficulty.get('Medium')),
        hard_solved=parse_int(solved.get('hardSolved') or by_difficulty.get('Hard')),
        total_easy=parse_int(solved.get('totalEasy'), DEFAULT_TOTALS['Easy']),
        total_medium=parse_int(solved.get('totalMedium'), DEFAULT_TOTALS['Medium']),
        total_hard=parse_int(solved.get('totalHard'), DEFAULT_TOTALS['Hard']),
        recent_submissions=solved.get('recentSubmissions') or [],
    )


def tag_problem_counts(problem_list: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for problem in problem_list:
        for tag in problem.get('topicTags') or []:
            name = tag_name(tag)
            if name:
                counts[name] = counts.get(name, 0) + 1
    return counts


class UserService:
    """Service for user profile endpoints."""

    def __init__(self, context: AppContext):
        self.context = context
        self.sync = context.sync_service
        self.cache = context.cache
        self.cache_config = context.config.cache

    async def get_profile(self, username: str) -> Dict[str, Any]:
        async def produce():
            user = await self.sync.sync_user(username)
            profile = user.profile_data.data if user.profile_data.is_available else {}

            try:
                fresh = await self.sync.fetch_full_profile(username)
                if isinstance(fresh, dict) and fresh:
                    profile = fresh
            except (UpstreamUnavailable, NotFound) as e:
                logger.info(f"Could not fetch live profile for {username}, using cached data: {e}")

            if not profile:
                raise NotFound(f"User '{username}' not found")

            skills = []
            if user.skill_stats.is_available:
                skills = analysis.flatten_skill_stats(user.skill_stats.data)
            return format_profile(profile, skills)

        return await cached_response(self.cache, make_cache_key("user_profile", username=username), produce)

    async def get_solved(self, username: str) -> Dict[str, Any]:
        async def produce():
            user = await self.sync.sync_user(username)
            try:
                fresh = await self.sync.fetch_full_profile(username)
                if isinstance(fresh, dict) and fresh:
                    return solved_from_profile(fresh).model_dump(by_alias=True)
            except (UpstreamUnavailable, NotFound) as e:
                logger.info(f"Could not fetch live solved data for {username}, using cached data: {e}")

            if user.solved_problems.is_missing:
                raise NotFound(f"Solved problems for '{username}' not found")
            return solved_from_blob(user.solved_problems.data).model_dump(by_alias=True)

        return await cached_response(self.cache, make_cache_key("user_solved", username=username), produce)

    async def get_submissions(self, username: str, limit: int = 20) -> Any:
        """Recent accepted submissions, fetched live and never stored."""
        async def produce():
            return await self.sync.fetch_accepted_submissions(username, limit)

        key = make_cache_key("user_submissions", username=username, limit=limit)
        return await cached_response(
            self.cache, key, produce,
            ttl_seconds=self.cache_config.submissions_ttl_seconds
        )

    async def _blob(self, username: str, name: str, label: str) -> Dict[str, Any]:
        user = await self.sync.sync_user(username)
        blob = user.blob(name)
        if blob.is_missing:
            raise NotFound(f"User {label} for '{username}' not found")
        return blob.data

    async def get_contest(self, username: str) -> Dict[str, Any]:
        async def produce():
            return await self._blob(username, 'contest_data', 'contest info')

        return await cached_response(self.cache, make_cache_key("user_contest", username=username), produce)

    async def get_language_stats(self, username: str) -> Dict[str, Any]:
        async def produce():
            return await self._blob(username, 'language_stats', 'language stats')

        return await cached_response(self.cache, make_cache_key("user_language_stats", username=username), produce)

    async def get_skill_stats(self, username: str) -> Dict[str, Any]:
        async def produce():
            try:
                raw = await self.sync.fetch_skill_stats(username)
            except (UpstreamUnavailable, NotFound) as e:
                logger.info(f"Could not fetch live skill stats for {username}, using cached data: {e}")
                raw = await self._blob(username, 'skill_stats', 'skill stats')

            skills = analysis.flatten_skill_stats(raw)
            try:
                totals = tag_problem_counts(await self.sync.fetch_problem_list())
            except (UpstreamUnavailable, NotFound) as e:
                logger.info(f"Could not fetch problems for tag counts, using estimates: {e}")
                totals = {}

            return SkillStatsResponse(data=[
                SkillStat(
                    tag_name=s['tagName'],
                    tag_slug=s['tagSlug'],
                    problems_solved=s['problemsSolved'],
                    tag_problems_count=totals.get(
                        s['tagName'], max(s['problemsSolved'] * 3, MIN_TAG_PROBLEMS_ESTIMATE)
                    ),
                    level=s['level'],
                )
                for s in skills
            ]).model_dump(by_alias=True)

        return await cached_response(self.cache, make_cache_key("user_skill_stats", username=username), produce)
