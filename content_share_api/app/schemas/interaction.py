"""
Resource kinds, interaction kinds and the patch objects exchanged
between the interaction workflow and the stores.

A ``ResourceKind`` knows its table names; an ``InteractionKind`` knows
which set and counter it touches on the resource and which
back-reference set it touches on the user.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


class ResourceKind(str, Enum):
    JOB = "job"
    POST = "post"

    @property
    def table(self) -> str:
        return f"{self.value}s"

    @property
    def interactions_table(self) -> str:
        return f"{self.value}_interactions"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class InteractionKind(str, Enum):
    LIKE = "like"
    VIEW = "view"

    @property
    def past_tense(self) -> str:
        return "liked" if self is InteractionKind.LIKE else "viewed"

    @property
    def member_field(self) -> str:
        """Set on the resource holding the acting user ids."""
        return f"{self.past_tense}_by"

    @property
    def counter_field(self) -> str:
        return f"{self.value}s_count"

    def user_field(self, kind: ResourceKind) -> str:
        """Back-reference set on the user, e.g. ``liked_jobs``."""
        return f"{self.past_tense}_{kind.table}"


USER_INTERACTION_FIELDS = frozenset(
    interaction.user_field(kind) for interaction in InteractionKind for kind in ResourceKind
)
RESOURCE_MEMBER_FIELDS = frozenset(i.member_field for i in InteractionKind)
RESOURCE_COUNTER_FIELDS = frozenset(i.counter_field for i in InteractionKind)


@dataclass(frozen=True)
class AddToSet:
    """Atomic field-level update: add ``value`` to the set ``field``.

    When ``counter`` is given, the counter is incremented by one in the
    same storage transaction, and only if ``value`` was not already a
    member.
    """

    field: str
    value: str
    counter: Optional[str] = None


T = TypeVar("T")


@dataclass(frozen=True)
class PatchResult(Generic[T]):
    """Record state after a patch and whether the patch changed anything."""

    record: T
    modified: bool


class InteractionState(str, Enum):
    START = "START"
    CHECKED = "CHECKED"
    COUNTED = "COUNTED"
    LINKED = "LINKED"
    DONE = "DONE"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
