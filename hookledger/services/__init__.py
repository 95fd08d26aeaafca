"""Services package for hookledger."""

from .event_store import SupabaseEventStore, get_event_store

__all__ = [
    "get_event_store",
    "SupabaseEventStore",
]
