"""Event store for persisting normalized GitLab events in Supabase.

Each event category lands in its own table (``record.collection``). Table
creation is owned by the database migrations, not by this service.
"""

from __future__ import annotations

import logging
from typing import Optional

from supabase import Client, create_client

from hookledger.types import CollaboratorUnavailable, NormalizedRecord
from server.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Postgres "undefined_table" and PostgREST "table not in schema cache"
_MISSING_TABLE_CODES = {"42P01", "PGRST205"}


class SupabaseEventStore:
    """Write normalized GitLab events into Supabase tables."""

    def __init__(self, url: Optional[str], key: Optional[str]) -> None:
        self.client: Optional[Client] = None
        self._initialized = False

        if url and key:
            try:
                self.client = create_client(url, key)
                self._initialized = True
                logger.info("Event store initialized")
            except Exception as e:
                logger.warning("Failed to initialize Supabase client", extra={"error": str(e)})
                self._initialized = False
        else:
            logger.warning("Supabase credentials not found; events will not be persisted")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseEventStore":
        return cls(settings.supabase_url, settings.resolved_supabase_key)

    def is_available(self) -> bool:
        """Check if Supabase is available."""
        return self._initialized and self.client is not None

    def save(self, record: NormalizedRecord) -> None:
        """Insert one record into its collection table.

        Raises:
            CollaboratorUnavailable: Supabase is not configured or the table
                does not exist.
        """
        if not self.is_available():
            raise CollaboratorUnavailable("Supabase is not configured")

        try:
            self.client.table(record.collection).insert(record.fields).execute()
        except Exception as e:
            if getattr(e, "code", None) in _MISSING_TABLE_CODES:
                raise CollaboratorUnavailable(
                    f"{record.collection} collection not found"
                ) from e
            raise


# Global event store instance (singleton)
_event_store: Optional[SupabaseEventStore] = None


def get_event_store() -> SupabaseEventStore:
    """Get or create the event store instance.

    Returns:
        SupabaseEventStore configured from application settings
    """
    global _event_store
    if _event_store is None:
        _event_store = SupabaseEventStore.from_settings(get_settings())
    return _event_store
