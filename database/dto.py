"""Data Transfer Objects for the entity store.

ORM rows are converted to these dataclasses while the unit of work is still
open, so callers never touch detached ORM objects after the session closes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.utils import as_utc

BLOB_OK = "ok"
BLOB_FAILED = "failed"

# Attribute name on User -> upstream blob it stores
USER_BLOB_NAMES = (
    "profile_data",
    "solved_problems",
    "contest_data",
    "language_stats",
    "skill_stats",
)


@dataclass
class UserBlob:
    """One upstream user blob plus whether its fetch succeeded.

    A failed fetch is stored as {} with status "failed"; an upstream that
    legitimately returned nothing is {} with status "ok".
    """
    data: Dict[str, Any] = field(default_factory=dict)
    status: str = BLOB_OK

    @property
    def is_available(self) -> bool:
        return self.status == BLOB_OK

    @property
    def is_missing(self) -> bool:
        return self.status != BLOB_OK

    @classmethod
    def failed(cls) -> "UserBlob":
        return cls(data={}, status=BLOB_FAILED)


@dataclass
class ProblemDTO:
    question_id: int
    title_slug: str
    title: str
    difficulty: Optional[str] = None
    content: Optional[str] = None
    hints: List[str] = field(default_factory=list)
    similar_questions: List[Any] = field(default_factory=list)
    tags: List[Dict[str, str]] = field(default_factory=list)
    topic_tags: List[Dict[str, str]] = field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    acceptance_rate: float = 0.0
    total_submissions: int = 0
    is_premium: bool = False
    mathematical_score: Optional[float] = None
    ai_score: Optional[float] = None
    ai_reason: Optional[str] = None
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def tag_names(self) -> List[str]:
        """Topic tag names, falling back to list-endpoint tags."""
        source = self.topic_tags or self.tags
        return [t.get("name") for t in source if isinstance(t, dict) and t.get("name")]


@dataclass
class UserDTO:
    username: str
    profile_data: UserBlob = field(default_factory=UserBlob)
    solved_problems: UserBlob = field(default_factory=UserBlob)
    contest_data: UserBlob = field(default_factory=UserBlob)
    language_stats: UserBlob = field(default_factory=UserBlob)
    skill_stats: UserBlob = field(default_factory=UserBlob)
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def blob(self, name: str) -> UserBlob:
        if name not in USER_BLOB_NAMES:
            raise KeyError(name)
        return getattr(self, name)


def problem_from_orm(problem) -> ProblemDTO:
    return ProblemDTO(
        question_id=problem.question_id,
        title_slug=problem.title_slug,
        title=problem.title,
        difficulty=problem.difficulty,
        content=problem.content,
        hints=list(problem.hints or []),
        similar_questions=list(problem.similar_questions or []),
        tags=list(problem.tags or []),
        topic_tags=list(problem.topic_tags or []),
        likes=problem.likes or 0,
        dislikes=problem.dislikes or 0,
        acceptance_rate=problem.acceptance_rate or 0.0,
        total_submissions=problem.total_submissions or 0,
        is_premium=bool(problem.is_premium),
        mathematical_score=problem.mathematical_score,
        ai_score=problem.ai_score,
        ai_reason=problem.ai_reason,
        last_updated=as_utc(problem.last_updated),
        created_at=as_utc(problem.created_at),
    )


def user_from_orm(user) -> UserDTO:
    status = user.blob_status or {}
    blobs = {
        name: UserBlob(
            data=dict(getattr(user, name) or {}),
            status=status.get(name, BLOB_OK),
        )
        for name in USER_BLOB_NAMES
    }
    return UserDTO(
        username=user.username,
        last_updated=as_utc(user.last_updated),
        created_at=as_utc(user.created_at),
        **blobs
    )
