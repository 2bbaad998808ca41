from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select

from database.models import User
from database.repositories.base import BaseRepository, dialect_insert

UPSERT_COLUMNS = (
    'profile_data', 'solved_problems', 'contest_data',
    'language_stats', 'skill_stats', 'blob_status', 'last_updated',
)


class UserRepository(BaseRepository):
    def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_last_updated(self, username: str) -> Optional[datetime]:
        stmt = select(User.last_updated).where(User.username == username)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(self, username: str, values: Dict[str, Any], now: datetime) -> User:
        row = dict(values)
        row['username'] = username
        row['last_updated'] = now
        row['created_at'] = now
        insert = dialect_insert(self.db)

        stmt = insert(User).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=['username'],
            set_={col: stmt.excluded[col] for col in UPSERT_COLUMNS}
        )
        self.db.execute(stmt)
        return self.db.execute(
            select(User)
            .where(User.username == username)
            .execution_options(populate_existing=True)
        ).scalar_one()
