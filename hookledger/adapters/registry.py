from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from pydantic import BaseModel, ValidationError

from hookledger.types import (
    AccessRequestEvent,
    Dialect,
    EventCategory,
    EventClassification,
    GroupSystemEvent,
    IssueEvent,
    KeyEvent,
    MemberApprovalEvent,
    MergeRequestEvent,
    NoteEvent,
    PayloadFormatError,
    ProjectSystemEvent,
    PushEvent,
    RepositoryUpdateEvent,
    TagPushEvent,
    TypedEvent,
    UserSystemEvent,
)


class ParserRegistry:
    """Registry of payload models by (category, dialect).

    Lets the dispatcher stay ignorant of individual payload shapes; adding a
    GitLab event kind means registering its model here and teaching the
    projection layer about it.
    """

    _registry: Dict[Tuple[EventCategory, Dialect], Type[BaseModel]] = {
        (EventCategory.MERGE_REQUEST, Dialect.HOOK): MergeRequestEvent,
        (EventCategory.MERGE_REQUEST, Dialect.SYSTEM_HOOK): MergeRequestEvent,
        (EventCategory.NOTE, Dialect.HOOK): NoteEvent,
        (EventCategory.PUSH, Dialect.HOOK): PushEvent,
        (EventCategory.TAG_PUSH, Dialect.HOOK): TagPushEvent,
        (EventCategory.ISSUES, Dialect.HOOK): IssueEvent,
        (EventCategory.MEMBER_APPROVAL, Dialect.SYSTEM_HOOK): MemberApprovalEvent,
        (EventCategory.PROJECT, Dialect.LEGACY_FLAT): ProjectSystemEvent,
        (EventCategory.USER, Dialect.LEGACY_FLAT): UserSystemEvent,
        (EventCategory.GROUP, Dialect.LEGACY_FLAT): GroupSystemEvent,
        (EventCategory.ACCESS_REQUEST, Dialect.LEGACY_FLAT): AccessRequestEvent,
        (EventCategory.KEY, Dialect.LEGACY_FLAT): KeyEvent,
        (EventCategory.REPOSITORY_UPDATE, Dialect.LEGACY_FLAT): RepositoryUpdateEvent,
    }

    @classmethod
    def get(cls, category: EventCategory, dialect: Dialect) -> Type[BaseModel]:
        model_cls = cls._registry.get((category, dialect))
        if model_cls is None:
            raise KeyError(f"No parser for {category.value}/{dialect.value}")
        return model_cls

    @classmethod
    def register(
        cls, category: EventCategory, dialect: Dialect, model_cls: Type[BaseModel]
    ) -> None:
        cls._registry[(category, dialect)] = model_cls

    @classmethod
    def parse(cls, classification: EventClassification, document: Any) -> TypedEvent:
        """Validate a decoded body against the model for its classification.

        Raises:
            PayloadFormatError: the body does not fit the model, a required
                identifier is missing, or a timestamp has an unknown layout.
        """
        model_cls = cls.get(classification.category, classification.dialect)
        try:
            return model_cls.model_validate(
                document, context={"dialect": classification.dialect.value}
            )
        except ValidationError as exc:
            label = None
            if (
                classification.category is EventCategory.MERGE_REQUEST
                and classification.dialect is Dialect.SYSTEM_HOOK
            ):
                label = "system hook merge request"
            raise PayloadFormatError(classification.category, exc, label=label) from exc
