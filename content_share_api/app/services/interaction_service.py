"""
Business logic for likes and views.

A like or view touches two stores that share no transaction: the
resource (set of acting users plus a counter) and the user (set of
resources they interacted with).  Each call walks a fixed sequence of
states::

    START -> CHECKED -> COUNTED -> LINKED -> DONE

with ``CONFLICT`` and ``NOT_FOUND`` as early exits.

1. CHECKED: the acting user must exist and the resource must not be
   in their back-reference set yet.  An unknown user ends in
   ``NOT_FOUND`` and an existing back-reference in ``CONFLICT``, both
   before anything is written.
2. COUNTED: the resource is patched at the storage layer: the user id
   is added to ``liked_by``/``viewed_by`` and the counter is bumped in
   the same transaction, only if the id was not already a member.  A
   missing resource ends in ``NOT_FOUND`` with the user untouched.  A
   patch that finds the id already present (a concurrent request won
   the race after step 1) also ends in ``CONFLICT``, so the counter is
   never incremented twice for one user.
3. LINKED: the resource id is added to the user's back-reference set.
   A failure here leaves the resource counted but the user unlinked.
   The counter is not rolled back; the failure is logged and raised as
   ``StorageError`` so the caller may retry.  A retry passes step 1 and
   gets ``modified=False`` in step 2; the back-reference is then added
   (the set insert is idempotent) before reporting ``CONFLICT``, which
   repairs the divergence without counting twice.

No locks are held between steps and no work continues after the call
returns.
"""

import logging
from dataclasses import dataclass

from ..core.errors import Conflict, NotFound, StorageError
from ..schemas.interaction import AddToSet, InteractionKind, InteractionState, ResourceKind
from ..schemas.resource import ResourceRead
from .resource_store import ResourceStore
from .user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class InteractionResult:
    state: InteractionState
    resource: ResourceRead


class InteractionService:
    """Records likes and views for every resource kind."""

    def __init__(self, resource_stores: dict, user_store: UserStore) -> None:
        self.resource_stores = resource_stores
        self.user_store = user_store

    def _store(self, kind: ResourceKind) -> ResourceStore:
        try:
            return self.resource_stores[kind]
        except KeyError:
            raise ValueError(f"No store configured for {kind.value}") from None

    async def record_like(self, kind: ResourceKind, user_id: str, resource_id: str) -> InteractionResult:
        return await self.record(kind, InteractionKind.LIKE, user_id, resource_id)

    async def record_view(self, kind: ResourceKind, user_id: str, resource_id: str) -> InteractionResult:
        return await self.record(kind, InteractionKind.VIEW, user_id, resource_id)

    async def record(
        self,
        kind: ResourceKind,
        interaction: InteractionKind,
        user_id: str,
        resource_id: str,
    ) -> InteractionResult:
        """Record one interaction of ``user_id`` with a resource.

        Raises ``Conflict`` if already recorded, ``NotFound`` if the user
        or the resource does not exist, ``StorageError`` if persistence
        fails.
        """
        store = self._store(kind)
        user_field = interaction.user_field(kind)
        already = f"{kind.label} already {interaction.past_tense}"
        state = InteractionState.START

        if not self.user_store.exists(user_id):
            state = InteractionState.NOT_FOUND
            logger.info(
                "Unknown user %s tried to %s %s %s (%s)",
                user_id, interaction.value, kind.value, resource_id, state.value,
            )
            raise NotFound("User not found")
        if self.user_store.exists_with_interaction(user_id, resource_id, user_field):
            state = InteractionState.CONFLICT
            logger.info("User %s: %s %s (%s)", user_id, already, resource_id, state.value)
            raise Conflict(already)
        state = InteractionState.CHECKED
        logger.debug("%s %s %s by %s: %s", interaction.value, kind.value, resource_id, user_id, state.value)

        patched = store.patch_by_id(
            resource_id,
            AddToSet(
                field=interaction.member_field,
                value=user_id,
                counter=interaction.counter_field,
            ),
        )
        if patched is None:
            state = InteractionState.NOT_FOUND
            logger.info("User %s tried to %s missing %s %s", user_id, interaction.value, kind.value, resource_id)
            raise NotFound(f"{kind.label} not found")

        link = AddToSet(field=user_field, value=resource_id)
        if not patched.modified:
            self._link(user_id, link, interaction)
            state = InteractionState.CONFLICT
            logger.info("User %s: %s %s (already counted, %s)", user_id, already, resource_id, state.value)
            raise Conflict(already)
        state = InteractionState.COUNTED
        logger.debug("%s %s %s by %s: %s", interaction.value, kind.value, resource_id, user_id, state.value)

        self._link(user_id, link, interaction)
        state = InteractionState.LINKED
        logger.debug("%s %s %s by %s: %s", interaction.value, kind.value, resource_id, user_id, state.value)

        state = InteractionState.DONE
        logger.info("User %s %s %s %s", user_id, interaction.past_tense, kind.value, resource_id)
        return InteractionResult(state=state, resource=patched.record)

    def _link(self, user_id: str, link: AddToSet, interaction: InteractionKind) -> None:
        """Add the back-reference on the user.  Never rolls back the counter."""
        try:
            linked = self.user_store.patch_by_id(user_id, link)
        except StorageError as e:
            logger.error(
                "Counted %s of %s by user %s but failed to update %s: %s",
                interaction.value, link.value, user_id, link.field, e,
            )
            raise
        if linked is None:
            logger.error(
                "Counted %s of %s but user %s does not exist; %s not updated",
                interaction.value, link.value, user_id, link.field,
            )
            raise StorageError(f"User {user_id} not found while recording {interaction.value}")
