import logging
from dataclasses import dataclass
from typing import Optional

from core.cache.response_cache import ResponseCacheService
from core.config_loader import AppConfig, LlmConfig
from core.leetcode_client import LeetCodeClient
from core.llm.interfaces import LLMProvider
from core.llm.openai_service import OpenAIService
from core.scorer.service import RatingService
from core.scorer.tag_weights import build_tag_weights
from core.sync.service import SyncService
from database.database import Database
from database.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access goes through the
    EntityStore, which opens a unit of work per operation.
    """
    config: AppConfig
    database: Database
    store: EntityStore
    leetcode_client: LeetCodeClient
    rating_service: RatingService
    sync_service: SyncService
    cache: Optional[ResponseCacheService] = None
    llm: Optional[LLMProvider] = None

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration

        Returns:
            Fully wired AppContext instance
        """
        database = Database(config.database.url, pool_size=config.database.pool_size)
        store = EntityStore(database)

        leetcode_client = cls._build_leetcode_client(config)

        llm = cls._build_ai_service(config.llm) if config.scoring.ai_enabled else None
        rating_service = RatingService.build(
            tag_weights=build_tag_weights(config.scoring.tag_weights),
            llm=llm,
            failure_threshold=config.scoring.failure_threshold,
            reset_timeout_seconds=config.scoring.reset_timeout_seconds,
        )

        sync_service = SyncService(store, leetcode_client, rating_service, config.sync)

        cache = None
        if config.cache.enabled:
            cache = ResponseCacheService(
                redis_url=config.cache.redis_url,
                default_ttl_seconds=config.cache.ttl_seconds,
            )

        return cls(
            config=config,
            database=database,
            store=store,
            leetcode_client=leetcode_client,
            rating_service=rating_service,
            sync_service=sync_service,
            cache=cache,
            llm=llm,
        )

    @staticmethod
    def _build_ai_service(llm_config: LlmConfig) -> Optional[OpenAIService]:
        """Build the OpenAI service, or None when no credentials are configured."""
        if not llm_config.api_key and not llm_config.base_url:
            logger.warning("No LLM credentials configured; AI scores fall back to the mathematical score")
            return None

        return OpenAIService(
            api_key=llm_config.api_key,
            base_url=llm_config.base_url,
            model=llm_config.model,
            temperature=llm_config.temperature,
            timeout_seconds=llm_config.timeout_seconds,
        )

    @staticmethod
    def _build_leetcode_client(config: AppConfig) -> LeetCodeClient:
        api_config = config.leetcode_api
        return LeetCodeClient(
            base_url=api_config.base_url,
            request_timeout_seconds=api_config.request_timeout_seconds,
            max_attempts=api_config.max_attempts,
            retry_backoff_seconds=api_config.retry_backoff_seconds,
            problem_list_limit=api_config.problem_list_limit,
        )

    def close(self) -> None:
        self.leetcode_client.close()
        self.database.dispose()
