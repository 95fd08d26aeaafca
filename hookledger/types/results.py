from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .api import Acknowledgement
from .enums import DispatchState
from .events import EventClassification, NormalizedRecord


@dataclass(frozen=True)
class DispatchOutcome:
    """What the dispatcher produced for an accepted delivery.

    Attributes:
        classification: Category and dialect chosen for the delivery.
        acknowledgement: Body to return to the sender.
        record: Projected row, or None when the category is unsupported.
        persisted: Whether the event store accepted ``record``.
        state: Final dispatcher state, always ``ACKNOWLEDGED`` here.
    """

    classification: EventClassification
    acknowledgement: Acknowledgement
    record: Optional[NormalizedRecord] = None
    persisted: bool = False
    state: DispatchState = DispatchState.ACKNOWLEDGED
