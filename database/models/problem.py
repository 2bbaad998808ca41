from sqlalchemy import Column, Integer, Text, Float, Boolean, TIMESTAMP, Index

from .base import Base, JSONType


class Problem(Base):
    """
    A LeetCode problem as last synced from the upstream API, with both scores.

    A row is always written in one statement so descriptive and scored
    columns never disagree.
    """
    __tablename__ = 'problems'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    question_id = Column(Integer, nullable=False, unique=True)
    title_slug = Column(Text, nullable=False, unique=True)

    # Descriptive
    title = Column(Text, nullable=False)
    difficulty = Column(Text)  # Easy|Medium|Hard
    content = Column(Text)
    hints = Column(JSONType, nullable=False, default=list)
    similar_questions = Column(JSONType, nullable=False, default=list)
    tags = Column(JSONType, nullable=False, default=list)
    topic_tags = Column(JSONType, nullable=False, default=list)
    tag_names = Column(Text, nullable=False, default='')  # "|array|hash table|"

    # Engagement
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    acceptance_rate = Column(Float, nullable=False, default=0.0)
    total_submissions = Column(Integer, nullable=False, default=0)
    is_premium = Column(Boolean, nullable=False, default=False)

    # Derived
    mathematical_score = Column(Float)
    ai_score = Column(Float)
    ai_reason = Column(Text)

    last_updated = Column(TIMESTAMP(timezone=True), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_problems_title_slug', 'title_slug'),
        Index('idx_problems_difficulty', 'difficulty'),
        Index('idx_problems_last_updated', 'last_updated'),
    )
