#!/usr/bin/env python3
"""
Scoring Module - problem quality scores.

Public API:
- RatingService: computes mathematical + AI score for a problem
- mathematical_score: the deterministic 1-5 score
- ProblemScorer and its implementations (generative, fallback, circuit breaker)

- tag_weights.py: read-only tag-importance table
- mathematical.py: score components and the final formula
- scorers.py: polymorphic secondary scorers
- models.py: ScoringInputs, AIRating, ProblemRating
- service.py: RatingService orchestrator
"""

from core.scorer.mathematical import mathematical_score
from core.scorer.models import AIRating, ProblemRating, ScoringInputs
from core.scorer.scorers import (
    ProblemScorer,
    GenerativeProblemScorer,
    MathematicalFallbackScorer,
    FallbackScorer,
)
from core.scorer.service import RatingService
from core.scorer.tag_weights import DEFAULT_TAG_WEIGHTS, build_tag_weights

__all__ = [
    'RatingService',
    'mathematical_score',
    'AIRating',
    'ProblemRating',
    'ScoringInputs',
    'ProblemScorer',
    'GenerativeProblemScorer',
    'MathematicalFallbackScorer',
    'FallbackScorer',
    'DEFAULT_TAG_WEIGHTS',
    'build_tag_weights',
]
