#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring inputs and results.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class ScoringInputs:
    """Normalized problem signals handed to every scorer."""
    title: str = ""
    difficulty: str = "Medium"
    tags: List[str] = field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    acceptance_rate: float = 50.0
    question_number: int = 1
    max_question_id: int = 3000


@dataclass
class AIRating:
    """Secondary score plus its one-line justification."""
    score: float
    reason: str
    degraded: bool = False


@dataclass
class ProblemRating:
    """Everything the scoring engine attaches to a problem before it is stored."""
    mathematical_score: float
    ai_score: float
    ai_reason: str
    ai_degraded: bool = False
