import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, case, or_

from core.exceptions import InvalidQuery
from database.models import Problem
from database.repositories.base import BaseRepository, dialect_insert

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTION_ID = 3000
DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 500

SORTABLE_COLUMNS = {
    'question_id': Problem.question_id,
    'title': Problem.title,
    'likes': Problem.likes,
    'acceptance_rate': Problem.acceptance_rate,
    'mathematical_score': Problem.mathematical_score,
    'ai_score': Problem.ai_score,
    'last_updated': Problem.last_updated,
}

SORT_ALIASES = {
    'questionid': 'question_id',
    'id': 'question_id',
    'acceptancerate': 'acceptance_rate',
    'mathematicalscore': 'mathematical_score',
    'score': 'mathematical_score',
    'aiscore': 'ai_score',
    'lastupdated': 'last_updated',
}

DIFFICULTY_ORDER = case(
    {'easy': 1, 'medium': 2, 'hard': 3},
    value=func.lower(Problem.difficulty),
    else_=4,
)

# Columns rewritten on every upsert; created_at is intentionally absent
UPSERT_COLUMNS = (
    'title_slug', 'title', 'difficulty', 'content', 'hints', 'similar_questions',
    'tags', 'topic_tags', 'tag_names', 'likes', 'dislikes', 'acceptance_rate',
    'total_submissions', 'is_premium', 'mathematical_score', 'ai_score',
    'ai_reason', 'last_updated',
)


@dataclass
class ProblemFilters:
    """Optional, conjunctive listing filters."""
    difficulty: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    sort_by: str = 'question_id'
    sort_order: str = 'ASC'
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0


def build_tag_index(tag_names: List[str]) -> str:
    """Lower-cased '|a|b|' string so exact tag matches become a LIKE '%|a|%'."""
    names = [n.strip().lower().replace('|', ' ') for n in tag_names if n and n.strip()]
    if not names:
        return ''
    return '|' + '|'.join(names) + '|'


def resolve_sort_column(sort_by: str):
    key = (sort_by or 'question_id').strip()
    normalized = SORT_ALIASES.get(key.lower().replace('_', ''), key.lower())
    if normalized == 'difficulty':
        return DIFFICULTY_ORDER
    if normalized not in SORTABLE_COLUMNS:
        raise InvalidQuery(f"Unsupported sort field: {sort_by}")
    return SORTABLE_COLUMNS[normalized]


class ProblemRepository(BaseRepository):
    def get_by_question_id(self, question_id: int) -> Optional[Problem]:
        stmt = select(Problem).where(Problem.question_id == question_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_slug(self, title_slug: str) -> Optional[Problem]:
        stmt = select(Problem).where(Problem.title_slug == title_slug)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_last_updated(self, question_id: int) -> Optional[datetime]:
        stmt = select(Problem.last_updated).where(Problem.question_id == question_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_max_question_id(self) -> int:
        max_id = self.db.execute(select(func.max(Problem.question_id))).scalar()
        return max_id or DEFAULT_MAX_QUESTION_ID

    def upsert(self, values: Dict[str, Any], now: datetime) -> Problem:
        """Insert or fully overwrite a problem keyed by question_id.

        One INSERT ... ON CONFLICT statement; created_at survives updates.
        """
        row = dict(values)
        row['last_updated'] = now
        row['created_at'] = now
        insert = dialect_insert(self.db)

        stmt = insert(Problem).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=['question_id'],
            set_={col: stmt.excluded[col] for col in UPSERT_COLUMNS}
        )
        self.db.execute(stmt)
        # Bypass the identity map so the refreshed row is returned
        return self.db.execute(
            select(Problem)
            .where(Problem.question_id == row['question_id'])
            .execution_options(populate_existing=True)
        ).scalar_one()

    def search(self, query: str, limit: int = 20) -> List[Problem]:
        stmt = select(Problem).where(
            or_(
                Problem.title.icontains(query, autoescape=True),
                Problem.title_slug.icontains(query, autoescape=True),
            )
        ).order_by(
            Problem.mathematical_score.desc().nulls_last(),
            Problem.question_id.asc()
        ).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def list(self, filters: ProblemFilters) -> List[Problem]:
        sort_column = resolve_sort_column(filters.sort_by)
        order = (filters.sort_order or 'ASC').upper()
        if order not in ('ASC', 'DESC'):
            raise InvalidQuery(f"Unsupported sort order: {filters.sort_order}")

        limit = filters.limit if filters.limit is not None else DEFAULT_LIST_LIMIT
        if limit < 1:
            raise InvalidQuery("limit must be positive")
        limit = min(limit, MAX_LIST_LIMIT)
        offset = filters.offset or 0
        if offset < 0:
            raise InvalidQuery("offset must not be negative")

        stmt = select(Problem)
        if filters.difficulty:
            stmt = stmt.where(func.lower(Problem.difficulty) == filters.difficulty.strip().lower())
        for tag in filters.tags or []:
            needle = tag.strip().lower().replace('|', ' ')
            if needle:
                stmt = stmt.where(Problem.tag_names.contains(needle, autoescape=True))
        if filters.min_score is not None:
            stmt = stmt.where(Problem.mathematical_score >= filters.min_score)
        if filters.max_score is not None:
            stmt = stmt.where(Problem.mathematical_score <= filters.max_score)

        ordered = sort_column.desc() if order == 'DESC' else sort_column.asc()
        stmt = stmt.order_by(ordered.nulls_last(), Problem.question_id.asc())
        stmt = stmt.limit(limit).offset(offset)
        return self.db.execute(stmt).scalars().all()

    def find_similar(self, subject: Problem, tag_names: List[str], limit: int = 5) -> List[Problem]:
        """Problems sharing at least one tag (exact, case-insensitive) with subject."""
        names = {n.strip().lower().replace('|', ' ') for n in tag_names if n and n.strip()}
        if not names:
            return []

        tag_match = or_(*[
            Problem.tag_names.contains(f"|{name}|", autoescape=True)
            for name in sorted(names)
        ])
        same_difficulty = case(
            (Problem.difficulty == subject.difficulty, 2),
            else_=1,
        )
        stmt = select(Problem).where(
            Problem.question_id != subject.question_id,
            tag_match,
        ).order_by(
            same_difficulty.desc(),
            Problem.mathematical_score.desc().nulls_last(),
            Problem.question_id.asc()
        ).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def get_stats(self) -> Dict[str, Any]:
        total, avg_math, avg_ai = self.db.execute(
            select(
                func.count(Problem.id),
                func.avg(Problem.mathematical_score),
                func.avg(Problem.ai_score),
            )
        ).one()
        by_difficulty = self.db.execute(
            select(Problem.difficulty, func.count(Problem.id)).group_by(Problem.difficulty)
        ).all()
        return {
            'total': total or 0,
            'by_difficulty': {(d or 'Unknown'): c for d, c in by_difficulty},
            'avg_mathematical_score': float(avg_math) if avg_math is not None else None,
            'avg_ai_score': float(avg_ai) if avg_ai is not None else None,
        }
