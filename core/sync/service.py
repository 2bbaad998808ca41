#!/usr/bin/env python3
"""
Sync Service - cache-or-fetch synchronization of problems and users.

Per entity the decision is FRESH (serve the stored row) or STALE (fetch,
normalize, score, upsert). Upstream failures never reach the caller: the
stored row is returned instead, or NotFound when there is none.
StorageError is the one failure that always propagates.

Store, client and scorer calls are blocking, so they run in worker threads
via asyncio.to_thread and unrelated requests keep being served meanwhile.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from core.config_loader import SyncConfig
from core.exceptions import NotFound, StorageError, UpstreamUnavailable
from core.leetcode_client import LeetCodeClient
from core.scorer.service import RatingService
from core.sync.normalizer import find_list_entry, has_engagement, normalize_problem
from core.utils import parse_identifier
from database.dto import ProblemDTO, UserBlob, UserDTO
from database.store import EntityStore

logger = logging.getLogger(__name__)


def _user_blob_from_payload(payload: Any) -> UserBlob:
    if isinstance(payload, dict):
        # alfa-leetcode-api answers unknown users with 200 {"errors": [...]}
        if payload.get('errors') and len(payload) == 1:
            return UserBlob.failed()
        return UserBlob(data=payload)
    if payload is None:
        return UserBlob(data={})
    return UserBlob(data={'data': payload})


class SyncService:
    """
    Orchestrates upstream fetches and store writes for problems and users.

    Holds no entity state between calls; concurrent syncs of the same
    identifier are not serialized and the last upsert wins.
    """

    def __init__(
        self,
        store: EntityStore,
        client: LeetCodeClient,
        rating_service: RatingService,
        config: Optional[SyncConfig] = None
    ):
        self.store = store
        self.client = client
        self.rating_service = rating_service
        self.config = config or SyncConfig()

    async def _run(self, fn: Callable, *args, **kwargs):
        return await asyncio.to_thread(fn, *args, **kwargs)

    # ---- problems ----

    async def sync_problem(self, identifier: Union[int, str], force_update: bool = False) -> ProblemDTO:
        """Return a fresh problem, fetching and scoring it when stale.

        Args:
            identifier: question id (int, "1" or "problem-1") or title slug
            force_update: skip the freshness check

        Raises:
            NotFound: nothing upstream and nothing stored
            StorageError: the store failed
        """
        try:
            key = parse_identifier(identifier)
        except ValueError as e:
            raise NotFound(str(e)) from e

        stored = await self._run(self.store.get_problem, key)
        if stored is not None and not force_update:
            stale = await self._run(
                self.store.is_problem_stale, stored.question_id, self.config.problem_max_age_hours
            )
            if not stale:
                logger.debug(f"Problem {key} is fresh, serving stored row")
                return stored

        logger.info(f"Syncing problem data for: {key}")
        try:
            saved = await self._fetch_and_store_problem(key)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Error syncing problem {key}: {e}")
            fallback = await self._run(self.store.get_problem, key)
            if fallback is not None:
                return fallback
            raise NotFound(f"Problem '{key}' not found") from e

        logger.info(f"Problem synced: #{saved.question_id} {saved.title_slug}")
        return saved

    async def _fetch_and_store_problem(self, key: Union[int, str]) -> ProblemDTO:
        if isinstance(key, int):
            # Resolve the slug first; the same list is reused for engagement
            problem_list = await self._run(self.client.get_problem_list)
            entry = find_list_entry(problem_list, question_id=key)
            if entry is None or not entry.get('titleSlug'):
                raise NotFound(f"Problem #{key} not in upstream problem list")
            slug = entry['titleSlug']
            detail = await self._run(self.client.get_problem_detail, slug)
        else:
            slug = key
            detail, problem_list = await asyncio.gather(
                self._run(self.client.get_problem_detail, slug),
                self._run(self.client.get_problem_list),
                return_exceptions=True
            )
            if isinstance(detail, BaseException):
                raise detail
            if isinstance(problem_list, BaseException):
                if not isinstance(problem_list, Exception):
                    raise problem_list
                logger.warning(f"Problem list unavailable for {slug}, continuing without it: {problem_list}")
                problem_list = []
            entry = find_list_entry(problem_list, title_slug=slug)

        stats = None
        if not has_engagement(entry) and not has_engagement(detail):
            try:
                stats = await self._run(self.client.get_problem_stats, slug)
            except (UpstreamUnavailable, NotFound) as e:
                logger.warning(f"Stats not available for {slug}: {e}")

        data = normalize_problem(slug, detail, entry, stats)

        # Read just before scoring; no connection is held during the AI call
        max_question_id = await self._run(self.store.get_max_question_id)
        rating = await self._run(self.rating_service.rate, data, max_question_id)
        if rating.ai_degraded:
            logger.info(f"AI score for {slug} fell back to the mathematical score")
        data.update(
            mathematical_score=rating.mathematical_score,
            ai_score=rating.ai_score,
            ai_reason=rating.ai_reason,
        )
        return await self._run(self.store.upsert_problem, data)

    async def sync_problems_batch(
        self,
        identifiers: List[Union[int, str]],
        batch_size: Optional[int] = None,
        delay_seconds: Optional[float] = None
    ) -> List[ProblemDTO]:
        """Sync in sequential chunks; failed items are logged and left out."""
        batch_size = max(1, batch_size or self.config.batch_size)
        delay = self.config.batch_delay_seconds if delay_seconds is None else delay_seconds

        results: List[ProblemDTO] = []
        for start in range(0, len(identifiers), batch_size):
            chunk = identifiers[start:start + batch_size]
            outcomes = await asyncio.gather(
                *(self.sync_problem(identifier) for identifier in chunk),
                return_exceptions=True
            )
            for identifier, outcome in zip(chunk, outcomes):
                if isinstance(outcome, Exception):
                    logger.error(f"Failed to sync problem {identifier}: {outcome}")
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results.append(outcome)

            if start + batch_size < len(identifiers) and delay > 0:
                await asyncio.sleep(delay)

        logger.info(f"Batch sync finished: {len(results)}/{len(identifiers)} succeeded")
        return results

    async def sync_daily_problem(self) -> Dict[str, Any]:
        """Fetch today's problem, force-sync it and return the upstream payload."""
        logger.info("Syncing daily problem")
        daily = await self._run(self.client.get_daily_problem)
        slug = daily.get('questionTitleSlug') or daily.get('titleSlug')
        if slug:
            try:
                await self.sync_problem(slug, force_update=True)
            except NotFound as e:
                logger.warning(f"Daily problem {slug} could not be stored: {e}")
        return daily

    # ---- users ----

    async def sync_user(self, username: str, force_update: bool = False) -> UserDTO:
        """Return fresh user data; always writes a row when it syncs."""
        if not force_update:
            stale = await self._run(self.store.is_user_stale, username, self.config.user_max_age_hours)
            if not stale:
                stored = await self._run(self.store.get_user, username)
                if stored is not None:
                    return stored

        logger.info(f"Syncing user data for: {username}")
        try:
            blobs = await self._fetch_user_blobs(username)
            saved = await self._run(self.store.upsert_user, username, blobs)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Error syncing user data for {username}: {e}")
            stored = await self._run(self.store.get_user, username)
            if stored is not None:
                return stored
            raise NotFound(f"User '{username}' not found") from e

        failed = [name for name, blob in blobs.items() if blob.is_missing]
        if failed:
            logger.warning(f"User {username} synced with failed blobs: {', '.join(failed)}")
        else:
            logger.info(f"User data synced for: {username}")
        return saved

    async def _fetch_user_blobs(self, username: str) -> Dict[str, UserBlob]:
        calls = {
            'profile_data': self.client.get_user_profile,
            'solved_problems': self.client.get_user_solved,
            'contest_data': self.client.get_user_contest,
            'language_stats': self.client.get_language_stats,
            'skill_stats': self.client.get_skill_stats,
        }
        outcomes = await asyncio.gather(
            *(self._run(fn, username) for fn in calls.values()),
            return_exceptions=True
        )

        blobs = {}
        for name, outcome in zip(calls, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Fetching {name} for {username} failed: {outcome}")
                blobs[name] = UserBlob.failed()
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                blobs[name] = _user_blob_from_payload(outcome)
        return blobs

    # ---- pass-through data, never stored ----

    async def fetch_accepted_submissions(self, username: str, limit: int = 20) -> Any:
        return await self._run(self.client.get_accepted_submissions, username, limit)

    async def fetch_problem_list(self) -> List[Dict[str, Any]]:
        return await self._run(self.client.get_problem_list)

    async def fetch_full_profile(self, username: str) -> Any:
        return await self._run(self.client.get_full_profile, username)

    async def fetch_skill_stats(self, username: str) -> Any:
        return await self._run(self.client.get_skill_stats, username)
