from sqlalchemy import Column, Integer, Text, TIMESTAMP, Index

from .base import Base, JSONType


class User(Base):
    """
    Cached LeetCode user data, one JSON blob per upstream endpoint.

    blob_status maps each blob name to "ok" or "failed" so an empty blob
    from a failed fetch is distinguishable from an empty upstream answer.
    """
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)

    profile_data = Column(JSONType, nullable=False, default=dict)
    solved_problems = Column(JSONType, nullable=False, default=dict)
    contest_data = Column(JSONType, nullable=False, default=dict)
    language_stats = Column(JSONType, nullable=False, default=dict)
    skill_stats = Column(JSONType, nullable=False, default=dict)
    blob_status = Column(JSONType, nullable=False, default=dict)

    last_updated = Column(TIMESTAMP(timezone=True), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_users_username', 'username'),
    )
