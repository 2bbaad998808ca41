#!/usr/bin/env python3
"""
Test suite for the secondary scorers and the fallback circuit.
"""

import threading
import unittest
from unittest.mock import MagicMock

from core.exceptions import ScoringDegraded
from core.scorer.models import AIRating, ScoringInputs
from core.scorer.scorers import (
    ProblemScorer,
    FALLBACK_REASON,
    FallbackScorer,
    GenerativeProblemScorer,
    MathematicalFallbackScorer,
    extract_json_object,
    parse_rating_response,
)
from core.scorer.tag_weights import DEFAULT_TAG_WEIGHTS


def _inputs(**overrides):
    values = dict(
        title="Two Sum",
        difficulty="Easy",
        tags=["Array", "Hash Table"],
        likes=5000,
        dislikes=150,
        acceptance_rate=52.3,
        question_number=1,
        max_question_id=3000,
    )
    values.update(overrides)
    return ScoringInputs(**values)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class GatedScorer(ProblemScorer):
    """Fails while `fail` is set, otherwise blocks until released."""

    def __init__(self):
        self.fail = True
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()
        self._lock = threading.Lock()

    def score(self, inputs):
        with self._lock:
            self.calls += 1
        if self.fail:
            raise ScoringDegraded("down")
        self.entered.set()
        self.release.wait(5)
        return AIRating(score=4.5, reason="back")


class TestExtractJsonObject(unittest.TestCase):

    def test_plain_object(self):
        self.assertEqual(extract_json_object('{"score": 4}'), '{"score": 4}')

    def test_object_inside_prose(self):
        text = 'Sure! Here is my rating: {"score": 4.5, "reason": "great"} Hope it helps.'
        self.assertEqual(extract_json_object(text), '{"score": 4.5, "reason": "great"}')

    def test_braces_inside_strings_are_ignored(self):
        text = '{"score": 3, "reason": "uses a {map} of }"}'
        self.assertEqual(extract_json_object(text), text)

    def test_no_object(self):
        self.assertIsNone(extract_json_object("no json here"))
        self.assertIsNone(extract_json_object(""))

    def test_nested_object(self):
        text = 'x {"score": 2, "meta": {"a": 1}} y'
        self.assertEqual(extract_json_object(text), '{"score": 2, "meta": {"a": 1}}')


class TestParseRatingResponse(unittest.TestCase):

    def test_valid_response(self):
        rating = parse_rating_response('{"score": 4.2, "reason": "Classic interview problem"}')
        self.assertEqual(rating.score, 4.2)
        self.assertEqual(rating.reason, "Classic interview problem")
        self.assertFalse(rating.degraded)

    def test_score_is_clamped(self):
        self.assertEqual(parse_rating_response('{"score": 9, "reason": "x"}').score, 5.0)
        self.assertEqual(parse_rating_response('{"score": -2, "reason": "x"}').score, 1.0)

    def test_numeric_string_score(self):
        self.assertEqual(parse_rating_response('{"score": "3.5"}').score, 3.5)

    def test_reason_is_truncated(self):
        rating = parse_rating_response('{"score": 3, "reason": "%s"}' % ("a" * 250))
        self.assertEqual(len(rating.reason), 100)

    def test_missing_reason_gets_default(self):
        self.assertEqual(parse_rating_response('{"score": 3}').reason, "AI analysis completed")

    def test_invalid_responses_degrade(self):
        for text in (
            "I think it's a 4",
            '{"score": "high"}',
            '{"reason": "no score"}',
            '{"score": true}',
            '{"score": 4,,}',
        ):
            with self.subTest(text=text):
                with self.assertRaises(ScoringDegraded):
                    parse_rating_response(text)


class TestGenerativeProblemScorer(unittest.TestCase):

    def test_sends_problem_signals_to_llm(self):
        llm = MagicMock()
        llm.generate_text.return_value = '{"score": 4, "reason": "Good"}'

        rating = GenerativeProblemScorer(llm).score(_inputs())

        self.assertEqual(rating, AIRating(score=4.0, reason="Good"))
        system_prompt, message = llm.generate_text.call_args[0]
        self.assertIn("Two Sum", message)
        self.assertIn("Array", message)
        self.assertTrue(system_prompt)

    def test_provider_error_becomes_degraded(self):
        llm = MagicMock()
        llm.generate_text.side_effect = RuntimeError("connection reset")

        with self.assertRaises(ScoringDegraded):
            GenerativeProblemScorer(llm).score(_inputs())


class TestMathematicalFallbackScorer(unittest.TestCase):

    def test_marks_rating_degraded(self):
        rating = MathematicalFallbackScorer(DEFAULT_TAG_WEIGHTS).score(_inputs())
        self.assertTrue(rating.degraded)
        self.assertEqual(rating.reason, FALLBACK_REASON)
        self.assertTrue(1.0 <= rating.score <= 5.0)


class TestFallbackScorer(unittest.TestCase):

    def setUp(self):
        self.primary = MagicMock()
        self.fallback = MagicMock()
        self.fallback.score.return_value = AIRating(score=3.0, reason=FALLBACK_REASON, degraded=True)
        self.clock = FakeClock()
        self.scorer = FallbackScorer(
            self.primary,
            self.fallback,
            failure_threshold=2,
            reset_timeout_seconds=60,
            clock=self.clock,
        )

    def test_primary_success(self):
        self.primary.score.return_value = AIRating(score=4.5, reason="Great")
        rating = self.scorer.score(_inputs())
        self.assertEqual(rating.score, 4.5)
        self.fallback.score.assert_not_called()

    def test_primary_degraded_uses_fallback(self):
        self.primary.score.side_effect = ScoringDegraded("bad json")
        rating = self.scorer.score(_inputs())
        self.assertTrue(rating.degraded)
        self.assertFalse(self.scorer.is_open)

    def test_circuit_opens_after_threshold(self):
        self.primary.score.side_effect = ScoringDegraded("down")
        self.scorer.score(_inputs())
        self.scorer.score(_inputs())
        self.assertTrue(self.scorer.is_open)

        self.scorer.score(_inputs())
        self.assertEqual(self.primary.score.call_count, 2)
        self.assertEqual(self.fallback.score.call_count, 3)

    def test_circuit_half_opens_after_timeout(self):
        self.primary.score.side_effect = ScoringDegraded("down")
        self.scorer.score(_inputs())
        self.scorer.score(_inputs())

        self.clock.now += 61
        self.assertFalse(self.scorer.is_open)

        self.primary.score.side_effect = None
        self.primary.score.return_value = AIRating(score=4.0, reason="back")
        self.assertEqual(self.scorer.score(_inputs()).score, 4.0)
        self.assertFalse(self.scorer.is_open)

    def test_failed_trial_call_reopens(self):
        self.primary.score.side_effect = ScoringDegraded("down")
        self.scorer.score(_inputs())
        self.scorer.score(_inputs())

        self.clock.now += 61
        self.scorer.score(_inputs())
        self.assertTrue(self.scorer.is_open)
        self.assertEqual(self.primary.score.call_count, 3)

    def test_success_resets_failure_count(self):
        self.primary.score.side_effect = [
            ScoringDegraded("blip"),
            AIRating(score=4.0, reason="ok"),
            ScoringDegraded("blip"),
        ]
        for _ in range(3):
            self.scorer.score(_inputs())
        self.assertFalse(self.scorer.is_open)


class TestFallbackScorerHalfOpen(unittest.TestCase):

    def test_only_one_caller_retries_primary_after_timeout(self):
        primary = GatedScorer()
        clock = FakeClock()
        scorer = FallbackScorer(
            primary,
            MathematicalFallbackScorer(DEFAULT_TAG_WEIGHTS),
            failure_threshold=1,
            reset_timeout_seconds=60,
            clock=clock,
        )
        scorer.score(_inputs())
        self.assertTrue(scorer.is_open)

        clock.now += 61
        primary.fail = False
        results = {}
        trial = threading.Thread(target=lambda: results.setdefault("trial", scorer.score(_inputs())))
        trial.start()
        self.assertTrue(primary.entered.wait(5))

        others = []
        workers = [threading.Thread(target=lambda: others.append(scorer.score(_inputs()))) for _ in range(4)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(5)

        self.assertEqual(primary.calls, 2)
        self.assertEqual(len(others), 4)
        self.assertTrue(all(r.degraded and r.reason == FALLBACK_REASON for r in others))

        primary.release.set()
        trial.join(5)
        self.assertEqual(results["trial"].score, 4.5)
        self.assertFalse(scorer.is_open)

        scorer.score(_inputs())
        self.assertEqual(primary.calls, 3)

    def test_unexpected_error_releases_trial_slot(self):
        primary = MagicMock()
        fallback = MagicMock()
        fallback.score.return_value = AIRating(score=3.0, reason=FALLBACK_REASON, degraded=True)
        clock = FakeClock()
        scorer = FallbackScorer(primary, fallback, failure_threshold=1, reset_timeout_seconds=60, clock=clock)
        primary.score.side_effect = ScoringDegraded("down")
        scorer.score(_inputs())

        clock.now += 61
        primary.score.side_effect = RuntimeError("boom")
        with self.assertRaises(RuntimeError):
            scorer.score(_inputs())

        primary.score.side_effect = None
        primary.score.return_value = AIRating(score=4.0, reason="ok")
        self.assertEqual(scorer.score(_inputs()).score, 4.0)


if __name__ == '__main__':
    unittest.main()
