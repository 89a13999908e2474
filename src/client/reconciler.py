"""Optimistic like toggling with server reconciliation.

Every toggle moves an entity through two phases:

    CONFIRMED --toggle--> TENTATIVE --success--> CONFIRMED (server values)
                                    --failure--> ROLLED_BACK (exact inverse)

Only one toggle per entity may be in flight. A second toggle for the same
entity while the first is outstanding is ignored.
"""

from collections.abc import Awaitable, Callable, MutableSet
from dataclasses import dataclass, replace
from enum import Enum

import structlog

from src.likes.models import LikeToggleResult


logger = structlog.get_logger(__name__)

ToggleFn = Callable[[str, str], Awaitable[LikeToggleResult]]


class LikePhase(str, Enum):
    """Reconciliation phase of a like state."""

    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    ROLLED_BACK = "rolled_back"


@dataclass
class LikeState:
    """Local like state of one entity."""

    like_count: int = 0
    is_liked: bool = False
    phase: LikePhase = LikePhase.CONFIRMED


class LikeReconciler:
    """Applies like toggles optimistically and reconciles them with the server.

    Args:
        toggle_fn: Coroutine ``(entity_id, device_id) -> LikeToggleResult``
            performing the backend toggle.
        device_id: Identifier sent with every toggle.
        liked: Device-scoped persistent set of liked entity ids, updated
            together with the local state.
    """

    def __init__(
        self,
        toggle_fn: ToggleFn,
        device_id: str,
        liked: MutableSet[str] | None = None,
    ):
        self.toggle_fn = toggle_fn
        self.device_id = device_id
        self.liked: MutableSet[str] = liked if liked is not None else set()
        self._states: dict[str, LikeState] = {}
        self._in_flight: set[str] = set()

    def seed(self, entity_id: str, like_count: int, is_liked: bool | None = None) -> None:
        """Load server state for an entity.

        ``is_liked`` falls back to the local liked set. Entities with a toggle
        in flight keep their tentative state.
        """
        if entity_id in self._in_flight:
            return
        if is_liked is None:
            is_liked = entity_id in self.liked
        self._states[entity_id] = LikeState(like_count=max(0, like_count), is_liked=is_liked)

    def state(self, entity_id: str) -> LikeState:
        """Snapshot of the local state of an entity."""
        current = self._states.get(entity_id)
        if current is None:
            return LikeState(is_liked=entity_id in self.liked)
        return replace(current)

    def is_pending(self, entity_id: str) -> bool:
        return entity_id in self._in_flight

    def _remember(self, entity_id: str, is_liked: bool) -> None:
        if is_liked:
            self.liked.add(entity_id)
        else:
            self.liked.discard(entity_id)

    async def toggle(self, entity_id: str) -> LikeState | None:
        """Toggle the like of an entity.

        Returns:
            The confirmed state, or None when a toggle for the entity is
            already in flight.

        Raises:
            Whatever ``toggle_fn`` raised, after the optimistic change has
            been rolled back. There is no retry.
        """
        if entity_id in self._in_flight:
            logger.debug("like_toggle_ignored", entity_id=entity_id)
            return None

        self._in_flight.add(entity_id)
        try:
            state = self._states.setdefault(
                entity_id, LikeState(is_liked=entity_id in self.liked)
            )
            was_liked = state.is_liked

            # Optimistic flip; unliking never goes below zero
            delta = 1 if not was_liked else (-1 if state.like_count > 0 else 0)
            state.is_liked = not was_liked
            state.like_count += delta
            state.phase = LikePhase.TENTATIVE
            self._remember(entity_id, state.is_liked)

            try:
                result = await self.toggle_fn(entity_id, self.device_id)
            except Exception as e:
                state.is_liked = was_liked
                state.like_count -= delta
                state.phase = LikePhase.ROLLED_BACK
                self._remember(entity_id, was_liked)
                logger.warning(
                    "like_toggle_rolled_back",
                    entity_id=entity_id,
                    error=str(e),
                )
                raise

            state.like_count = max(0, result.like_count)
            state.is_liked = result.is_liked
            state.phase = LikePhase.CONFIRMED
            self._remember(entity_id, result.is_liked)
            return replace(state)
        finally:
            self._in_flight.discard(entity_id)
