#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Union


class AnalyzeRequest(BaseModel):
    """Request to analyze a problem, optionally against a user's skills."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    problem_id: Union[int, str] = Field(..., description="Question id, 'problem-<n>' or title slug")
    username: Optional[str] = Field(None, description="LeetCode username for topic progress")
    force_refresh: bool = Field(default=False, description="Bypass caches and re-sync the problem")

    @field_validator('problem_id')
    @classmethod
    def _non_empty(cls, value):
        if isinstance(value, str) and not value.strip():
            raise ValueError("problemId must not be empty")
        return value.strip() if isinstance(value, str) else value

    @field_validator('username')
    @classmethod
    def _blank_username_is_none(cls, value):
        if value is None:
            return None
        return value.strip() or None
