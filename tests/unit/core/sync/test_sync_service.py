#!/usr/bin/env python3
"""
Tests for the sync orchestrator with a mocked upstream client and a
SQLite-backed store.
"""

import asyncio
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from core.config_loader import SyncConfig
from core.exceptions import NotFound, StorageError, UpstreamUnavailable
from core.leetcode_client import LeetCodeClient
from core.scorer.scorers import FALLBACK_REASON
from core.scorer.service import RatingService
from core.scorer.tag_weights import build_tag_weights
from core.sync.service import SyncService
from core.utils import utcnow
from database.dto import BLOB_FAILED
from tests import sample_detail, sample_list_entry, sample_problem


@pytest.fixture
def client():
    client = MagicMock(spec=LeetCodeClient)
    client.get_problem_list.return_value = [
        sample_list_entry(1, "two-sum"),
        sample_list_entry(2, "add-two-numbers", title="Add Two Numbers", difficulty="Medium",
                          tags=["Linked List", "Math"]),
    ]
    details = {
        "two-sum": sample_detail(1, "two-sum"),
        "add-two-numbers": sample_detail(2, "add-two-numbers", title="Add Two Numbers",
                                         difficulty="Medium", tags=["Linked List", "Math"]),
    }

    def get_detail(slug):
        if slug not in details:
            raise NotFound(f"Problem details not found: {slug}")
        return details[slug]

    client.get_problem_detail.side_effect = get_detail
    return client


@pytest.fixture
def sync(store, client):
    rating = RatingService.build(build_tag_weights())
    return SyncService(store, client, rating, SyncConfig(batch_size=2, batch_delay_seconds=0))


class TestSyncProblem:

    def test_never_seen_slug_end_to_end(self, sync, store, client):
        assert store.get_problem("two-sum") is None

        problem = asyncio.run(sync.sync_problem("two-sum"))

        assert problem.question_id == 1
        assert problem.title == "Two Sum"
        assert problem.likes == 5000
        assert 1.0 <= problem.mathematical_score <= 5.0
        assert problem.ai_score == problem.mathematical_score
        assert problem.ai_reason == FALLBACK_REASON
        assert problem.created_at == problem.last_updated

        stored = store.get_problem_by_id(1)
        assert stored == problem

    def test_fresh_row_served_without_upstream_call(self, sync, client):
        first = asyncio.run(sync.sync_problem("two-sum"))
        second = asyncio.run(sync.sync_problem("two-sum"))

        assert second == first
        assert client.get_problem_detail.call_count == 1
        assert client.get_problem_list.call_count == 1

    def test_fresh_row_found_by_number(self, sync, client):
        asyncio.run(sync.sync_problem("two-sum"))
        asyncio.run(sync.sync_problem(1))
        asyncio.run(sync.sync_problem("problem-1"))
        assert client.get_problem_detail.call_count == 1

    def test_fresh_row_found_by_differently_cased_slug(self, sync, client):
        asyncio.run(sync.sync_problem("two-sum"))
        problem = asyncio.run(sync.sync_problem("Two-Sum"))

        assert problem.title_slug == "two-sum"
        assert client.get_problem_detail.call_count == 1

    def test_numeric_id_resolved_through_problem_list(self, sync, client):
        problem = asyncio.run(sync.sync_problem("2"))

        assert problem.title_slug == "add-two-numbers"
        client.get_problem_detail.assert_called_once_with("add-two-numbers")
        assert client.get_problem_list.call_count == 1

    def test_unknown_number_is_not_found(self, sync):
        with pytest.raises(NotFound):
            asyncio.run(sync.sync_problem(9999))

    def test_unknown_slug_is_not_found(self, sync):
        with pytest.raises(NotFound):
            asyncio.run(sync.sync_problem("no-such-problem"))

    def test_empty_identifier_is_not_found(self, sync):
        with pytest.raises(NotFound):
            asyncio.run(sync.sync_problem("  "))

    def test_stale_row_refetched(self, sync, store, client):
        store.upsert_problem(sample_problem(1, "two-sum", likes=1), now=utcnow() - timedelta(days=8))

        problem = asyncio.run(sync.sync_problem(1))

        assert problem.likes == 5000
        assert client.get_problem_detail.call_count == 1

    def test_stale_row_returned_when_upstream_down(self, sync, store, client):
        store.upsert_problem(sample_problem(1, "two-sum", likes=1), now=utcnow() - timedelta(days=8))
        client.get_problem_list.side_effect = UpstreamUnavailable("down")
        client.get_problem_detail.side_effect = UpstreamUnavailable("down")

        problem = asyncio.run(sync.sync_problem("two-sum"))

        assert problem.likes == 1

    def test_force_update_refetches_fresh_row(self, sync, client):
        asyncio.run(sync.sync_problem("two-sum"))
        asyncio.run(sync.sync_problem("two-sum", force_update=True))
        assert client.get_problem_detail.call_count == 2

    def test_problem_list_failure_tolerated_for_slug(self, sync, client):
        client.get_problem_list.side_effect = UpstreamUnavailable("list down")
        client.get_problem_stats.return_value = {"likes": 77, "dislikes": 3}

        problem = asyncio.run(sync.sync_problem("two-sum"))

        assert problem.question_id == 1
        assert problem.likes == 77
        client.get_problem_stats.assert_called_once_with("two-sum")

    def test_stats_failure_is_not_fatal(self, sync, client):
        client.get_problem_list.return_value = []
        client.get_problem_stats.side_effect = UpstreamUnavailable("stats down")

        problem = asyncio.run(sync.sync_problem("two-sum"))

        assert problem.likes == 0

    def test_stats_skipped_when_engagement_present(self, sync, client):
        asyncio.run(sync.sync_problem("two-sum"))
        client.get_problem_stats.assert_not_called()

    def test_ai_scores_stored(self, store, client):
        llm = MagicMock()
        llm.generate_text.return_value = '{"score": 4.6, "reason": "Great warm-up"}'
        sync = SyncService(store, client, RatingService.build(build_tag_weights(), llm=llm))

        problem = asyncio.run(sync.sync_problem("two-sum"))

        assert problem.ai_score == 4.6
        assert problem.ai_reason == "Great warm-up"

    def test_storage_error_propagates(self, client):
        store = MagicMock()
        store.get_problem.side_effect = StorageError("db down")
        sync = SyncService(store, client, RatingService.build(build_tag_weights()))

        with pytest.raises(StorageError):
            asyncio.run(sync.sync_problem("two-sum"))

    def test_storage_error_on_write_propagates(self, client):
        store = MagicMock()
        store.get_problem.return_value = None
        store.get_max_question_id.return_value = 3000
        store.upsert_problem.side_effect = StorageError("disk full")
        sync = SyncService(store, client, RatingService.build(build_tag_weights()))

        with pytest.raises(StorageError):
            asyncio.run(sync.sync_problem("two-sum"))


class TestBatchAndDaily:

    def test_batch_skips_failures(self, sync):
        results = asyncio.run(sync.sync_problems_batch(["two-sum", "no-such-problem", 2]))
        assert sorted(p.question_id for p in results) == [1, 2]

    def test_batch_runs_chunks_in_sequence_with_delay_between(self, store, client, monkeypatch):
        service = SyncService(
            store, client, RatingService.build(build_tag_weights()),
            SyncConfig(batch_size=3, batch_delay_seconds=1.5)
        )
        real_sleep = asyncio.sleep
        events = []
        in_flight = {"now": 0, "peak": 0}

        async def fake_sync_problem(identifier, force_update=False):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            events.append(("start", identifier))
            await real_sleep(0)
            in_flight["now"] -= 1
            events.append(("end", identifier))
            return SimpleNamespace(question_id=identifier)

        async def fake_sleep(delay):
            events.append(("sleep", delay))

        monkeypatch.setattr(service, "sync_problem", fake_sync_problem)
        monkeypatch.setattr("core.sync.service.asyncio.sleep", fake_sleep)

        results = asyncio.run(service.sync_problems_batch(list(range(1, 8))))

        assert [p.question_id for p in results] == list(range(1, 8))
        assert in_flight["peak"] == 3
        sleeps = [i for i, event in enumerate(events) if event[0] == "sleep"]
        assert [events[i] for i in sleeps] == [("sleep", 1.5), ("sleep", 1.5)]
        # every sync of a chunk has finished before the pause, the next chunk starts after it
        assert events[sleeps[0] - 1] == ("end", 3)
        assert events[sleeps[0] + 1] == ("start", 4)
        assert events[sleeps[1] - 1] == ("end", 6)
        assert events[sleeps[1] + 1] == ("start", 7)
        assert events[-1] == ("end", 7)

    def test_batch_without_delay_never_sleeps(self, sync, monkeypatch):
        calls = []

        async def fake_sleep(delay):
            calls.append(delay)

        monkeypatch.setattr("core.sync.service.asyncio.sleep", fake_sleep)
        asyncio.run(sync.sync_problems_batch(["two-sum", 2, "two-sum"]))
        assert calls == []

    def test_empty_batch(self, sync):
        assert asyncio.run(sync.sync_problems_batch([])) == []

    def test_daily_problem_is_stored(self, sync, store, client):
        client.get_daily_problem.return_value = {
            "questionTitleSlug": "add-two-numbers",
            "questionTitle": "Add Two Numbers",
            "date": "2024-03-01",
        }

        daily = asyncio.run(sync.sync_daily_problem())

        assert daily["questionTitleSlug"] == "add-two-numbers"
        assert store.get_problem("add-two-numbers") is not None


def _user_client(client, failing=()):
    payloads = {
        "get_user_profile": {"username": "alice", "ranking": 1234},
        "get_user_solved": {"solvedProblem": 300, "easySolved": 100},
        "get_user_contest": {"contestRating": 1850.5},
        "get_language_stats": {"matchedUser": {"languageProblemCount": [{"languageName": "Python3", "problemsSolved": 280}]}},
        "get_skill_stats": {"data": {"matchedUser": {"tagProblemCounts": {"fundamental": [{"tagName": "Array", "problemsSolved": 90}]}}}},
    }
    for name, payload in payloads.items():
        method = getattr(client, name)
        if name in failing:
            method.side_effect = UpstreamUnavailable(f"{name} down")
        else:
            method.return_value = payload
    return client


class TestSyncUser:

    def test_all_blobs_stored(self, sync, client):
        _user_client(client)

        user = asyncio.run(sync.sync_user("alice"))

        assert user.profile_data.data["ranking"] == 1234
        assert user.contest_data.data["contestRating"] == 1850.5
        assert not any(user.blob(name).is_missing for name in (
            "profile_data", "solved_problems", "contest_data", "language_stats", "skill_stats"))

    def test_two_of_five_failures_still_written(self, sync, store, client):
        _user_client(client, failing=("get_user_contest", "get_skill_stats"))

        user = asyncio.run(sync.sync_user("alice"))

        assert user.contest_data.data == {}
        assert user.contest_data.status == BLOB_FAILED
        assert user.skill_stats.data == {}
        assert user.skill_stats.is_missing
        assert user.profile_data.data["username"] == "alice"
        assert user.solved_problems.data["solvedProblem"] == 300
        assert user.language_stats.is_available
        assert store.get_user("alice") == user

    def test_every_call_failing_still_writes_row(self, sync, store, client):
        _user_client(client, failing=(
            "get_user_profile", "get_user_solved", "get_user_contest", "get_language_stats", "get_skill_stats"))

        user = asyncio.run(sync.sync_user("ghost"))

        assert user.profile_data.is_missing
        assert store.get_user("ghost") is not None

    def test_errors_payload_marks_blob_failed(self, sync, client):
        _user_client(client)
        client.get_user_profile.return_value = {"errors": [{"message": "That user does not exist."}]}

        user = asyncio.run(sync.sync_user("alice"))

        assert user.profile_data.is_missing

    def test_fresh_user_not_refetched(self, sync, client):
        _user_client(client)
        asyncio.run(sync.sync_user("alice"))
        asyncio.run(sync.sync_user("alice"))
        assert client.get_user_profile.call_count == 1

    def test_force_update_refetches_user(self, sync, client):
        _user_client(client)
        asyncio.run(sync.sync_user("alice"))
        asyncio.run(sync.sync_user("alice", force_update=True))
        assert client.get_user_profile.call_count == 2

    def test_stale_user_refetched(self, sync, store, client):
        _user_client(client)
        asyncio.run(sync.sync_user("alice"))
        store.upsert_user("alice", {}, now=utcnow() - timedelta(hours=25))

        user = asyncio.run(sync.sync_user("alice"))

        assert client.get_user_profile.call_count == 2
        assert user.profile_data.is_available
