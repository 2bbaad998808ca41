#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.

The AppContext is built once in the application lifespan and stored on
app.state; routes reach their collaborators through it.
"""

from fastapi import Depends, Request

from core.app_context import AppContext
from .services.analysis_service import AnalysisService
from .services.problem_service import ProblemService
from .services.user_service import UserService


def get_app_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application's wired context."""
    return request.app.state.context


def get_problem_service(context: AppContext = Depends(get_app_context)) -> ProblemService:
    return ProblemService(context)


def get_analysis_service(context: AppContext = Depends(get_app_context)) -> AnalysisService:
    return AnalysisService(context)


def get_user_service(context: AppContext = Depends(get_app_context)) -> UserService:
    return UserService(context)
