"""Sync Module - cache-or-fetch synchronization of problems and users."""
from core.sync.service import SyncService

__all__ = ['SyncService']
