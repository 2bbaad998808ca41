import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from core.utils import as_utc, parse_identifier, utcnow
from database.database import Database
from database.dto import (
    ProblemDTO, UserDTO, UserBlob, USER_BLOB_NAMES,
    problem_from_orm, user_from_orm,
)
from database.repositories.problem import ProblemFilters, build_tag_index
from database.uow import store_uow

logger = logging.getLogger(__name__)

PROBLEM_MAX_AGE_HOURS = 168
USER_MAX_AGE_HOURS = 24

PROBLEM_FIELDS = (
    'question_id', 'title_slug', 'title', 'difficulty', 'content', 'hints',
    'similar_questions', 'tags', 'topic_tags', 'likes', 'dislikes',
    'acceptance_rate', 'total_submissions', 'is_premium',
    'mathematical_score', 'ai_score', 'ai_reason',
)


def _is_stale(last_updated: Optional[datetime], max_age_hours: float, now: Optional[datetime]) -> bool:
    if last_updated is None:
        return True
    now = as_utc(now) if now is not None else utcnow()
    return now - as_utc(last_updated) > timedelta(hours=max_age_hours)


class EntityStore:
    """Facade over the problem and user repositories.

    Each public method runs in its own unit of work and returns DTOs, so no
    connection outlives the call. Storage failures surface as StorageError.
    """

    def __init__(self, database: Database):
        self.database = database

    # ---- problems ----

    def get_problem(self, identifier: Union[int, str]) -> Optional[ProblemDTO]:
        key = parse_identifier(identifier)
        if isinstance(key, int):
            return self.get_problem_by_id(key)
        return self.get_problem_by_slug(key)

    def get_problem_by_id(self, question_id: int) -> Optional[ProblemDTO]:
        with store_uow(self.database) as uow:
            problem = uow.problems.get_by_question_id(question_id)
            return problem_from_orm(problem) if problem else None

    def get_problem_by_slug(self, title_slug: str) -> Optional[ProblemDTO]:
        with store_uow(self.database) as uow:
            problem = uow.problems.get_by_slug(title_slug)
            return problem_from_orm(problem) if problem else None

    def get_max_question_id(self) -> int:
        with store_uow(self.database) as uow:
            return uow.problems.get_max_question_id()

    def upsert_problem(self, data: Dict[str, Any], now: Optional[datetime] = None) -> ProblemDTO:
        """Write every descriptive and scored column in one statement.

        ``data`` uses ProblemDTO field names; missing keys get column defaults.
        """
        values = {f: data.get(f) for f in PROBLEM_FIELDS}
        if values['question_id'] is None or not values['title_slug']:
            raise ValueError("question_id and title_slug are required")
        values['title'] = values['title'] or values['title_slug']
        for list_field in ('hints', 'similar_questions', 'tags', 'topic_tags'):
            values[list_field] = list(values[list_field] or [])
        for int_field in ('likes', 'dislikes', 'total_submissions'):
            values[int_field] = values[int_field] or 0
        values['acceptance_rate'] = values['acceptance_rate'] or 0.0
        values['is_premium'] = bool(values['is_premium'])

        tag_source = values['topic_tags'] or values['tags']
        values['tag_names'] = build_tag_index([
            t.get('name', '') for t in tag_source if isinstance(t, dict)
        ])

        with store_uow(self.database) as uow:
            problem = uow.problems.upsert(values, now or utcnow())
            return problem_from_orm(problem)

    def is_problem_stale(self, question_id: int, max_age_hours: float = PROBLEM_MAX_AGE_HOURS,
                         now: Optional[datetime] = None) -> bool:
        with store_uow(self.database) as uow:
            last_updated = uow.problems.get_last_updated(question_id)
        return _is_stale(last_updated, max_age_hours, now)

    def search_problems(self, query: str, limit: int = 20) -> List[ProblemDTO]:
        with store_uow(self.database) as uow:
            return [problem_from_orm(p) for p in uow.problems.search(query, limit)]

    def list_problems(self, filters: Optional[ProblemFilters] = None) -> List[ProblemDTO]:
        with store_uow(self.database) as uow:
            return [problem_from_orm(p) for p in uow.problems.list(filters or ProblemFilters())]

    def find_similar(self, question_id: int, limit: int = 5) -> List[ProblemDTO]:
        with store_uow(self.database) as uow:
            subject = uow.problems.get_by_question_id(question_id)
            if subject is None:
                return []
            names = problem_from_orm(subject).tag_names
            if not names:
                return []
            return [problem_from_orm(p) for p in uow.problems.find_similar(subject, names, limit)]

    def get_problem_stats(self) -> Dict[str, Any]:
        with store_uow(self.database) as uow:
            return uow.problems.get_stats()

    # ---- users ----

    def get_user(self, username: str) -> Optional[UserDTO]:
        with store_uow(self.database) as uow:
            user = uow.users.get_by_username(username)
            return user_from_orm(user) if user else None

    def upsert_user(self, username: str, blobs: Dict[str, UserBlob],
                    now: Optional[datetime] = None) -> UserDTO:
        """Write all five blobs; any blob not supplied is stored as failed."""
        values = {}
        status = {}
        for name in USER_BLOB_NAMES:
            blob = blobs.get(name) or UserBlob.failed()
            values[name] = blob.data if blob.is_available else {}
            status[name] = blob.status
        values['blob_status'] = status

        with store_uow(self.database) as uow:
            user = uow.users.upsert(username, values, now or utcnow())
            return user_from_orm(user)

    def is_user_stale(self, username: str, max_age_hours: float = USER_MAX_AGE_HOURS,
                      now: Optional[datetime] = None) -> bool:
        with store_uow(self.database) as uow:
            last_updated = uow.users.get_last_updated(username)
        return _is_stale(last_updated, max_age_hours, now)
