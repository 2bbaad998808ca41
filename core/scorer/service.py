#!/usr/bin/env python3
"""
Rating Service - computes both scores for a normalized problem.

Mathematical score always; secondary score through whatever ProblemScorer is
configured (normally a FallbackScorer over the generative scorer).
"""

import logging
from typing import Any, Dict, Mapping, Optional

from core.llm.interfaces import LLMProvider
from core.scorer.mathematical import mathematical_score
from core.scorer.models import ProblemRating, ScoringInputs
from core.scorer.scorers import (
    ProblemScorer,
    GenerativeProblemScorer,
    MathematicalFallbackScorer,
    FallbackScorer,
)
from core.utils import parse_float, parse_int, tag_name

logger = logging.getLogger(__name__)


def scoring_inputs_from_problem(problem: Dict[str, Any], max_question_id: int) -> ScoringInputs:
    """Build ScoringInputs from a normalized problem dict (ProblemDTO field names)."""
    tag_source = problem.get('topic_tags') or problem.get('tags') or []
    return ScoringInputs(
        title=problem.get('title') or problem.get('title_slug') or '',
        difficulty=problem.get('difficulty') or 'Medium',
        tags=[n for n in (tag_name(t) for t in tag_source) if n],
        likes=parse_int(problem.get('likes')),
        dislikes=parse_int(problem.get('dislikes')),
        acceptance_rate=parse_float(problem.get('acceptance_rate'), default=50.0),
        question_number=parse_int(problem.get('question_id'), default=1),
        max_question_id=max_question_id,
    )


class RatingService:
    def __init__(self, tag_weights: Mapping[str, float], scorer: Optional[ProblemScorer] = None):
        self.tag_weights = tag_weights
        self.scorer = scorer or MathematicalFallbackScorer(tag_weights)

    @classmethod
    def build(
        cls,
        tag_weights: Mapping[str, float],
        llm: Optional[LLMProvider] = None,
        failure_threshold: int = 3,
        reset_timeout_seconds: float = 300.0
    ) -> "RatingService":
        """Wire the generative scorer behind a FallbackScorer when an LLM is available."""
        fallback = MathematicalFallbackScorer(tag_weights)
        if llm is None:
            return cls(tag_weights, fallback)
        scorer = FallbackScorer(
            primary=GenerativeProblemScorer(llm),
            fallback=fallback,
            failure_threshold=failure_threshold,
            reset_timeout_seconds=reset_timeout_seconds,
        )
        return cls(tag_weights, scorer)

    def rate(self, problem: Dict[str, Any], max_question_id: int) -> ProblemRating:
        inputs = scoring_inputs_from_problem(problem, max_question_id)
        math_score = mathematical_score(
            likes=inputs.likes,
            dislikes=inputs.dislikes,
            acceptance_rate=inputs.acceptance_rate,
            question_number=inputs.question_number,
            max_question_id=inputs.max_question_id,
            difficulty=inputs.difficulty,
            tag_weights=self.tag_weights,
        )
        ai_rating = self.scorer.score(inputs)
        logger.info(
            f"Rated #{inputs.question_number} '{inputs.title}': "
            f"math={math_score} ai={ai_rating.score}{' (fallback)' if ai_rating.degraded else ''}"
        )
        return ProblemRating(
            mathematical_score=math_score,
            ai_score=ai_rating.score,
            ai_reason=ai_rating.reason,
            ai_degraded=ai_rating.degraded,
        )
