"""
Error taxonomy shared by the store, the scoring engine and the sync layer.

The web layer maps these onto status codes (see web/backend/exceptions.py).
"""


class CompanionError(Exception):
    """Base exception for LeetCode Companion errors."""
    pass


class NotFound(CompanionError):
    """Identifier could not be resolved upstream or in the store."""
    pass


class UpstreamUnavailable(CompanionError):
    """Network failure, timeout or non-2xx response from the LeetCode data API."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(CompanionError):
    """Persistence layer failure. Never masked by the sync layer."""
    pass


class ScoringDegraded(CompanionError):
    """Generative scorer failed; callers fall back to the mathematical score."""
    pass


class InvalidQuery(CompanionError):
    """Listing/search parameters that cannot be turned into a store query."""
    pass
