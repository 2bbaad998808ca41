#!/usr/bin/env python3
"""
Mathematical Score - deterministic 1.0-5.0 quality score for a problem.

Final score:
- 0.6 * engagement (like ratio damped by popularity)
- 0.1 * acceptance (sweet spot 35-60%)
- 0.1 * age (older, lower-numbered problems score higher)
- 0.1 * difficulty (Medium favored)
- + tag adjustment ((average tag weight - 1) * 0.5)

Clamped to [1, 5] and rounded half-up to one decimal.
"""

import math
from typing import Iterable, Mapping

from core.scorer.tag_weights import UNLISTED_TAG_WEIGHT
from core.utils import round_half_up

MIN_SCORE = 1.0
MAX_SCORE = 5.0

ENGAGEMENT_WEIGHT = 0.6
ACCEPTANCE_WEIGHT = 0.1
AGE_WEIGHT = 0.1
DIFFICULTY_WEIGHT = 0.1

LIKE_RATIO_EPSILON = 1e-5
POPULARITY_LIKES_CEILING = 10000
DISLIKE_PENALTY = 0.5

# (exclusive upper bound on likes, popularity percentage)
POPULARITY_TIERS = (
    (1000, 50),
    (2000, 80),
    (4000, 90),
    (6000, 95),
    (8000, 99),
)
TOP_POPULARITY_PERCENTAGE = 99

DIFFICULTY_COMPONENTS = {
    'easy': 4.0,
    'medium': 5.0,
    'hard': 3.0,
}
DEFAULT_DIFFICULTY_COMPONENT = 4.0

AGE_MAX_ID_HEADROOM = 100


def popularity_percentage(likes: int) -> int:
    for upper, percentage in POPULARITY_TIERS:
        if likes < upper:
            return percentage
    return TOP_POPULARITY_PERCENTAGE


def engagement_component(likes: int, dislikes: int) -> float:
    like_ratio = likes / (likes + dislikes + LIKE_RATIO_EPSILON)
    popularity_weight = min(1.0, math.log1p(likes) / math.log1p(POPULARITY_LIKES_CEILING))
    popularity_multiplier = 0.5 + popularity_percentage(likes) / 100 * 0.5

    component = like_ratio * 5 * popularity_weight * popularity_multiplier
    if dislikes > likes:
        component *= DISLIKE_PENALTY
    return component


def acceptance_component(acceptance_rate: float) -> float:
    """Both very low and very high acceptance hint at miscalibrated difficulty."""
    if 35 <= acceptance_rate <= 60:
        return 5.0
    if 20 <= acceptance_rate < 35:
        return 4.0
    if 60 < acceptance_rate <= 80:
        return 4.5
    if acceptance_rate > 80:
        return 4.0
    return 2.0


def age_component(question_number: int, max_question_id: int) -> float:
    safe_max = max(max_question_id, question_number + AGE_MAX_ID_HEADROOM)
    age_ratio = max(0.0, min(1.0, (safe_max - question_number) / safe_max))
    return 2 + 3 * age_ratio


def difficulty_component(difficulty: str) -> float:
    return DIFFICULTY_COMPONENTS.get((difficulty or '').strip().lower(), DEFAULT_DIFFICULTY_COMPONENT)


def tag_adjustment(tags: Iterable[str], tag_weights: Mapping[str, float]) -> float:
    weights = [tag_weights.get(tag, UNLISTED_TAG_WEIGHT) for tag in tags]
    if not weights:
        return 0.0
    average = sum(weights) / len(weights)
    return (average - 1.0) * 0.5


def mathematical_score(
    likes: int = 0,
    dislikes: int = 0,
    acceptance_rate: float = 50.0,
    question_number: int = 1,
    max_question_id: int = 3000,
    difficulty: str = 'Medium',
    tags: Iterable[str] = (),
    tag_weights: Mapping[str, float] = None,
) -> float:
    """
    Compute the mathematical score from raw engagement signals.

    Pure and deterministic. Negative counts are treated as zero.

    Args:
        likes, dislikes: upstream vote counts
        acceptance_rate: 0-100
        question_number: frontend question id
        max_question_id: largest question id currently stored
        difficulty: Easy|Medium|Hard (anything else scores as "other")
        tags: tag names
        tag_weights: read-only tag-importance table (empty means all 1.0)

    Returns:
        float in [1.0, 5.0] with one decimal place
    """
    likes = max(0, int(likes or 0))
    dislikes = max(0, int(dislikes or 0))
    if max_question_id is None or max_question_id <= 0:
        max_question_id = 3000
    if question_number is None:
        question_number = 1

    total = (
        ENGAGEMENT_WEIGHT * engagement_component(likes, dislikes)
        + ACCEPTANCE_WEIGHT * acceptance_component(acceptance_rate)
        + AGE_WEIGHT * age_component(question_number, max_question_id)
        + DIFFICULTY_WEIGHT * difficulty_component(difficulty)
        + tag_adjustment(tags, tag_weights or {})
    )
    clamped = max(MIN_SCORE, min(MAX_SCORE, total))
    return round_half_up(clamped, 1)
