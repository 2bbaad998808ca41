#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run without external services:

    # Run all tests
    python -m pytest tests/ -v

Store and sync tests use a SQLite file per test (see conftest.py); the
upstream API, Redis and the OpenAI client are mocked.
"""

from typing import Any, Dict, List, Optional


def sample_list_entry(
    question_id: int = 1,
    slug: str = "two-sum",
    title: str = "Two Sum",
    difficulty: str = "Easy",
    tags: Optional[List[str]] = None,
    **extra: Any
) -> Dict[str, Any]:
    """One problemsetQuestionList entry as the upstream /problems endpoint returns it."""
    entry = {
        "frontendQuestionId": str(question_id),
        "title": title,
        "titleSlug": slug,
        "difficulty": difficulty,
        "acRate": 52.3,
        "isPaidOnly": False,
        "likes": 5000,
        "dislikes": 150,
        "totalSubmitted": 1000000,
        "topicTags": [{"name": t, "slug": t.lower().replace(' ', '-')} for t in (tags or ["Array", "Hash Table"])],
    }
    entry.update(extra)
    return entry


def sample_detail(
    question_id: int = 1,
    slug: str = "two-sum",
    title: str = "Two Sum",
    difficulty: str = "Easy",
    tags: Optional[List[str]] = None,
    **extra: Any
) -> Dict[str, Any]:
    """Problem detail payload as /select?titleSlug= returns it."""
    detail = {
        "questionId": str(question_id),
        "questionFrontendId": str(question_id),
        "questionTitle": title,
        "titleSlug": slug,
        "difficulty": difficulty,
        "question": "<p>Given an array of integers...</p>",
        "hints": ["Use a hash map."],
        "similarQuestions": '[{"title": "3Sum", "titleSlug": "3sum", "difficulty": "Medium"}]',
        "topicTags": [{"name": t, "slug": t.lower().replace(' ', '-')} for t in (tags or ["Array", "Hash Table"])],
        "isPaidOnly": False,
    }
    detail.update(extra)
    return detail


def sample_problem(question_id: int = 1, slug: str = "two-sum", **overrides: Any) -> Dict[str, Any]:
    """Normalized problem record ready for EntityStore.upsert_problem."""
    data = {
        "question_id": question_id,
        "title_slug": slug,
        "title": slug.replace('-', ' ').title(),
        "difficulty": "Easy",
        "content": "<p>content</p>",
        "hints": [],
        "similar_questions": [],
        "tags": [{"name": "Array", "slug": "array"}],
        "topic_tags": [{"name": "Array", "slug": "array"}],
        "likes": 100,
        "dislikes": 10,
        "acceptance_rate": 50.0,
        "total_submissions": 1000,
        "is_premium": False,
        "mathematical_score": 3.0,
        "ai_score": 3.0,
        "ai_reason": "ok",
    }
    data.update(overrides)
    return data
