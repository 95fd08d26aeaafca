from __future__ import annotations

from typing import Protocol

from .events import NormalizedRecord


class EventStore(Protocol):
    """Protocol for the persistence collaborator.

    Implementations own schema, storage and indexing. The dispatcher only
    hands them finished records.

    Responsibilities:
        - Report whether the backing store can be reached
        - Write one ``NormalizedRecord`` into ``record.collection``

    Minimal example:
        >>> from hookledger.types import EventStore, NormalizedRecord
        >>> class ListStore(EventStore):
        ...     def __init__(self) -> None:
        ...         self.rows = []
        ...     def is_available(self) -> bool:
        ...         return True
        ...     def save(self, record: NormalizedRecord) -> None:
        ...         self.rows.append((record.collection, record.fields))
    """

    def is_available(self) -> bool:
        """Return True when records can be written."""
        ...

    def save(self, record: NormalizedRecord) -> None:
        """Persist a record.

        Implementations raise ``CollaboratorUnavailable`` when the store or the
        record's collection does not exist; any other exception is a write
        failure.
        """
        ...
