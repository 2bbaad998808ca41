#!/usr/bin/env python3
"""
Tests for problem analysis helpers.
"""

import pytest

from core import analysis


class TestRecommendation:

    @pytest.mark.parametrize("score,expected", [
        (3.6, 'do'),
        (3.5, 'do'),
        (3.0, 'ok'),
        (2.5, 'ok'),
        (2.4, 'pass'),
        (2.0, 'pass'),
        (None, 'ok'),
    ])
    def test_thresholds(self, score, expected):
        assert analysis.recommendation(score) == expected

    def test_reason_mentions_score(self):
        reason = analysis.recommendation_reason('do', 4.25)
        assert reason.startswith("Highly recommended!")
        assert "4.2/5.0" in reason or "4.3/5.0" in reason

    def test_reason_for_unknown_recommendation(self):
        assert analysis.recommendation_reason('maybe', 3.0) == "No specific recommendation available."


class TestEstimatedSolvingTime:

    @pytest.mark.parametrize("difficulty,acceptance,expected", [
        ('Easy', 50.0, 25),
        ('Medium', 40.0, 57),
        ('Hard', 30.0, 123),
        ('Easy', 100.0, 15),
        ('Hard', 0.0, 150),
        ('medium', 40.0, 57),
    ])
    def test_buckets(self, difficulty, acceptance, expected):
        assert analysis.estimated_solving_time(difficulty, acceptance) == expected

    def test_unknown_difficulty(self):
        assert analysis.estimated_solving_time(None, 50.0) == 45
        assert analysis.estimated_solving_time('Insane', 50.0) == 45


class TestLearningOutcomes:

    def test_known_and_unknown_topics(self):
        outcomes = analysis.learning_outcomes(['Array', 'Bit Manipulation'])
        assert outcomes[0] == {
            'name': 'Array',
            'description': 'Learn array manipulation, indexing, and common array algorithms',
        }
        assert outcomes[1]['description'] == 'Learn concepts related to Bit Manipulation'

    def test_problem_topics_from_tags(self):
        tags = [{'name': 'Array', 'slug': 'array'}, 'Graph', {'slug': ''}]
        assert analysis.problem_topics(tags) == ['Array', 'Graph']


class TestPopularity:

    def test_like_ratio(self):
        assert analysis.like_ratio_percent(99, 0) == 99
        assert analysis.like_ratio_percent(0, 0) == 0

    def test_popularity_score(self):
        assert analysis.popularity_score(4.4) == 88
        assert analysis.popularity_score(None) == 60


SKILL_STATS = {
    "data": {
        "matchedUser": {
            "tagProblemCounts": {
                "advanced": [{"tagName": "Dynamic Programming", "tagSlug": "dynamic-programming", "problemsSolved": 12}],
                "intermediate": [{"tagName": "Hash Table", "tagSlug": "hash-table", "problemsSolved": "30"}],
                "fundamental": [
                    {"tagName": "Array", "tagSlug": "array", "problemsSolved": 80},
                    {"tagSlug": "nameless"},
                ],
            }
        }
    }
}


class TestSkillStats:

    def test_flatten_graphql_shape(self):
        skills = analysis.flatten_skill_stats(SKILL_STATS)
        assert [s['tagName'] for s in skills] == ['Array', 'Hash Table', 'Dynamic Programming']
        assert skills[1] == {
            'tagName': 'Hash Table', 'tagSlug': 'hash-table', 'problemsSolved': 30, 'level': 'intermediate'
        }

    def test_flatten_unwrapped_shape(self):
        unwrapped = SKILL_STATS['data']['matchedUser']
        assert len(analysis.flatten_skill_stats(unwrapped)) == 3

    def test_flatten_garbage(self):
        assert analysis.flatten_skill_stats(None) == []
        assert analysis.flatten_skill_stats({"errors": ["x"]}) == []

    def test_overall_level(self):
        skills = analysis.flatten_skill_stats(SKILL_STATS)
        assert analysis.overall_skill_level(skills) == 'Advanced'
        assert analysis.overall_skill_level(skills[:2]) == 'Intermediate'
        assert analysis.overall_skill_level([]) == 'Beginner'


class TestUserProgress:

    def test_matching_topics(self):
        skills = analysis.flatten_skill_stats(SKILL_STATS)
        progress = analysis.user_progress(['Array', 'Two Pointers', 'Hash Table'], skills)

        assert progress['hasExperience'] is True
        assert progress['solvedSimilarCount'] == 2
        assert progress['totalUserTopics'] == 3
        assert progress['matchingTopics'][0] == {'name': 'Array', 'problemsSolved': 80, 'level': 'fundamental'}
        assert progress['skillLevel'] == 'Advanced'

    def test_no_overlap(self):
        progress = analysis.user_progress(['Graph'], [])
        assert progress['hasExperience'] is False
        assert progress['matchingTopics'] == []
        assert progress['skillLevel'] == 'Beginner'
