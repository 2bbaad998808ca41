#!/usr/bin/env python3
"""
User endpoints - profile, solved summary, submissions, contest and skills.
"""

import logging
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_user_service
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile/{username}")
async def get_user_profile(username: str, service: UserService = Depends(get_user_service)):
    """
    Get a user's profile with skill tags attached.

    The user's blobs are synced when older than a day.
    """
    return await service.get_profile(username)


@router.get("/solved/{username}")
async def get_user_solved(username: str, service: UserService = Depends(get_user_service)):
    return await service.get_solved(username)


@router.get("/submissions/{username}")
async def get_user_submissions(
    username: str,
    limit: int = Query(default=20, ge=1, le=100),
    service: UserService = Depends(get_user_service)
):
    """Recent accepted submissions."""
    return await service.get_submissions(username, limit)


@router.get("/contest/{username}")
async def get_user_contest(username: str, service: UserService = Depends(get_user_service)):
    return await service.get_contest(username)


@router.get("/language-stats/{username}")
async def get_user_language_stats(username: str, service: UserService = Depends(get_user_service)):
    return await service.get_language_stats(username)


@router.get("/skill-stats/{username}")
async def get_user_skill_stats(username: str, service: UserService = Depends(get_user_service)):
    """Solved counts per topic tag with the tag's total problem count."""
    return await service.get_skill_stats(username)
