from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_insert(db: Session):
    """Return the insert() that supports ON CONFLICT for the bound dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == 'postgresql':
        return postgresql.insert
    if dialect == 'sqlite':
        return sqlite.insert
    raise NotImplementedError(f"Upsert is not supported on dialect '{dialect}'")


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db
