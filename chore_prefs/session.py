"""Interactive preference form state.

Combines the catalog, identity resolver, preference store and resolution
coordinator into the flow behind the form: type a name, see that
roommate's scores, edit them, submit.

All state lives on the event loop thread. Store calls are synchronous
SQLAlchemy code and run through asyncio.to_thread.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from .coordinator import ResolutionCoordinator
from .errors import (
    RemoteLookupError,
    RemoteWriteError,
    SessionStateError,
    UnknownChoreError,
)
from .identity import IdentityResolver
from .models import ChoreRecord, RoommateRecord
from .preference_store import PreferenceStore, fill_defaults, validate_score

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = "Preferences saved successfully!"
SAVE_ERROR_MESSAGE = "An error occurred while saving preferences."


class FormStatus(enum.Enum):
    """Where the form is in the resolve/edit/submit flow."""

    IDLE = "idle"
    NAME_ENTERED = "name_entered"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"


class NoticeLevel(enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """User-visible message shown after a submit."""

    level: NoticeLevel
    message: str


class FormSession:
    """One user's pass through the preference form."""

    def __init__(
        self,
        resolver: IdentityResolver,
        store: PreferenceStore,
        catalog_loader: Callable[[], list[ChoreRecord]],
        coordinator: ResolutionCoordinator | None = None,
        auto_resolve: bool = True,
    ):
        self._resolver = resolver
        self._store = store
        self._catalog_loader = catalog_loader
        self._coordinator = coordinator or ResolutionCoordinator()
        self._auto_resolve = auto_resolve

        self.catalog: list[ChoreRecord] = []
        self.name = ""
        self.roommate: RoommateRecord | None = None
        self.scores: dict[int, int] = {}
        self.status = FormStatus.IDLE
        self.notice: Notice | None = None
        self._submitting = False

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def load_catalog(self) -> list[ChoreRecord]:
        """Fetch the chore catalog. A failed fetch leaves it empty."""
        try:
            self.catalog = await asyncio.to_thread(self._catalog_loader)
        except RemoteLookupError as e:
            logger.error(f"Error fetching chores: {e}")
        return self.catalog

    # ------------------------------------------------------------------
    # Name and resolution
    # ------------------------------------------------------------------

    def set_name(self, text: str) -> None:
        """Record a change to the name field.

        A blank name clears the roommate and scores right away. Otherwise a
        debounced resolution is scheduled when auto resolve is on.
        """
        self.name = text
        self._coordinator.invalidate()
        if self._submitting:
            # Picked up once the save finishes
            return

        if not text.strip():
            self._coordinator.cancel()
            self._clear_identity()
            self.status = FormStatus.IDLE
            return

        self.status = FormStatus.NAME_ENTERED
        if self._auto_resolve:
            self._coordinator.schedule(self.resolve)

    async def blur(self) -> RoommateRecord | None:
        """The name field lost focus: resolve immediately."""
        return await self._coordinator.settle(self.resolve)

    async def resolve(self) -> RoommateRecord | None:
        """Resolve the current name and load that roommate's scores.

        Results are applied only if no newer name change or resolution has
        happened in the meantime. A lookup failure is logged and leaves the
        roommate and scores as they were.
        """
        if self._submitting:
            logger.debug("Skipping resolution while preferences are being saved")
            return None

        name = self.name.strip()
        if not name:
            self._coordinator.invalidate()
            self._clear_identity()
            self.status = FormStatus.IDLE
            return None

        ticket = self._coordinator.begin()
        previous_status = self.status
        self.status = FormStatus.RESOLVING

        try:
            roommate = await asyncio.to_thread(self._resolver.resolve, name)
            if not self._coordinator.is_current(ticket):
                logger.debug(f"Discarding stale resolution for '{name}'")
                return None
            scores = {}
            if roommate is not None:
                scores = await asyncio.to_thread(self._store.load_preferences, roommate.id)
        except RemoteLookupError as e:
            if self._coordinator.is_current(ticket):
                logger.error(f"Error resolving roommate '{name}': {e}")
                self.status = previous_status
            return None

        if not self._coordinator.is_current(ticket):
            logger.debug(f"Discarding stale preferences for '{name}'")
            return None

        self.roommate = roommate
        self.scores = scores
        self.status = FormStatus.RESOLVED if roommate else FormStatus.UNRESOLVED
        return roommate

    def _clear_identity(self) -> None:
        self.roommate = None
        self.scores = {}

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def set_score(self, chore_id: int, score: int) -> None:
        """Set the score for one chore.

        Raises:
            SessionStateError: While a submit is in flight.
            UnknownChoreError: If the chore is not in the catalog.
            InvalidScoreError: If the score is not 1-5.
        """
        if self._submitting:
            raise SessionStateError("Cannot edit preferences while saving")
        if all(chore.id != chore_id for chore in self.catalog):
            raise UnknownChoreError(chore_id)
        self.scores = {**self.scores, chore_id: validate_score(score)}

    def displayed_scores(self) -> dict[int, int]:
        """Scores for every catalog chore, as the form shows them."""
        return fill_defaults(self.catalog, self.scores)

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def can_submit(self) -> bool:
        return bool(self.name.strip()) and not self._submitting

    async def submit(self) -> bool:
        """Create the roommate if needed and save every chore score.

        Returns:
            True if the preferences were saved.

        Raises:
            SessionStateError: If the name is blank or a submit is running.
        """
        if not self.can_submit:
            raise SessionStateError("Submit requires a name and no save in progress")

        name = self.name.strip()
        scores = dict(self.scores)
        catalog = list(self.catalog)

        # Lookups started before the save would show pre-save scores
        self._coordinator.cancel()
        self._coordinator.invalidate()

        self._submitting = True
        self.status = FormStatus.SUBMITTING
        self.notice = None
        try:
            roommate = await asyncio.to_thread(self._resolver.get_or_create, name)
            await asyncio.to_thread(self._store.save_preferences, roommate.id, catalog, scores)
        except RemoteWriteError as e:
            logger.error(f"Error saving preferences for '{name}': {e}")
            self.status = FormStatus.SUBMIT_FAILED
            self.notice = Notice(NoticeLevel.ERROR, SAVE_ERROR_MESSAGE)
            self._catch_up_name(name)
            return False
        finally:
            self._submitting = False

        self.status = FormStatus.SUBMITTED
        self.notice = Notice(NoticeLevel.SUCCESS, SAVE_SUCCESS_MESSAGE)
        logger.info(f"Submitted preferences for '{name}' (id={roommate.id})")

        if self.name.strip() == name:
            self.roommate = roommate
            self.scores = fill_defaults(catalog, scores)
        else:
            self._catch_up_name(name)
        return True

    def _catch_up_name(self, submitted_name: str) -> None:
        """Apply a name edit made while the save was running."""
        current = self.name.strip()
        if current == submitted_name:
            return
        if not current:
            self._clear_identity()
            self.status = FormStatus.IDLE
        elif self._auto_resolve:
            self._coordinator.schedule(self.resolve)

    def close(self) -> None:
        """Drop any armed debounce timer and running debounced lookup."""
        self._coordinator.invalidate()
        self._coordinator.close()
