#!/usr/bin/env python3
"""
Response models for API endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProblemDetailResponse(CamelModel):
    """Full stored problem in the upstream detail shape plus our scores."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "questionId": 1,
                "questionFrontendId": 1,
                "questionTitle": "Two Sum",
                "titleSlug": "two-sum",
                "difficulty": "Easy",
                "likes": 50000,
                "dislikes": 1700,
                "acceptanceRate": 52.1,
                "totalSubmissions": 20000000,
                "topicTags": [{"name": "Array", "slug": "array"}],
                "isPaidOnly": False,
                "mathematicalScore": 4.4,
                "aiScore": 4.0,
                "aiReason": "Classic hash map warm-up with strong interview value"
            }
        }
    )

    question_id: int
    question_frontend_id: int
    question_title: str
    title_slug: str
    difficulty: Optional[str]
    likes: int
    dislikes: int
    acceptance_rate: float
    total_submissions: int
    topic_tags: List[Dict[str, Any]]
    content: Optional[str]
    hints: List[str]
    similar_questions: List[Any]
    is_paid_only: bool
    mathematical_score: Optional[float]
    ai_score: Optional[float]
    ai_reason: Optional[str]
    last_updated: Optional[str] = None


class ProblemListItem(CamelModel):
    frontend_question_id: str
    title: str
    title_slug: str
    difficulty: Optional[str]
    likes: int
    dislikes: int
    ac_rate: str
    total_submissions: int
    topic_tags: List[Dict[str, Any]]
    is_paid_only: bool
    mathematical_score: Optional[float]
    ai_score: Optional[float]
    ai_reason: Optional[str]


class ProblemListResponse(CamelModel):
    problemset_question_list: List[ProblemListItem]
    total: int


class ProblemStatsResponse(CamelModel):
    success: bool = True
    total: int
    by_difficulty: Dict[str, int]
    avg_mathematical_score: Optional[float]
    avg_ai_score: Optional[float]
    cache: Dict[str, Any]


class LearningOutcome(CamelModel):
    name: str
    description: str


class Insights(CamelModel):
    popularity_score: int
    popularity_percentage: int
    difficulty_level: Optional[str]
    acceptance_rate: float
    total_submissions: int
    is_premium: bool


class AnalysisTags(CamelModel):
    difficulty: Optional[str]
    likes: int
    dislikes: int
    acceptance_rate: float
    total_submissions: int
    is_premium: bool


class MatchingTopic(CamelModel):
    name: str
    problems_solved: int
    level: str


class UserProgress(CamelModel):
    has_experience: bool
    matching_topics: List[MatchingTopic]
    total_user_topics: int
    skill_level: str


class AnalysisResponse(CamelModel):
    problem_id: int
    title: str
    title_slug: str
    recommendation: str
    recommendation_reason: str
    estimated_solving_time: int
    difficulty: Optional[str]
    topics: List[str]
    learning_outcomes: List[LearningOutcome]
    likes: int
    dislikes: int
    like_ratio: int
    has_solved_similar: bool
    solved_similar_count: int
    insights: Insights
    mathematical_score: float
    ai_score: float
    ai_reason: Optional[str]
    tags: AnalysisTags
    user_progress: Optional[UserProgress] = None


class OriginalProblem(CamelModel):
    id: int
    title: str
    difficulty: Optional[str]
    topics: List[str]
    mathematical_score: Optional[float]
    ai_score: Optional[float]


class SimilarProblem(CamelModel):
    id: int
    title: str
    title_slug: str
    difficulty: Optional[str]
    acceptance_rate: float
    likes: int
    dislikes: int
    mathematical_score: Optional[float]
    ai_score: Optional[float]
    ai_reason: Optional[str]


class SimilarProblemsResponse(CamelModel):
    original_problem: OriginalProblem
    similar_problems: List[SimilarProblem]


class SkillStat(CamelModel):
    tag_name: str
    tag_slug: Optional[str]
    problems_solved: int
    tag_problems_count: int
    level: str


class SkillStatsResponse(CamelModel):
    data: List[SkillStat]


class SolvedSummaryResponse(CamelModel):
    easy_solved: int
    medium_solved: int
    hard_solved: int
    total_easy: int
    total_medium: int
    total_hard: int
    recent_submissions: List[Any]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
