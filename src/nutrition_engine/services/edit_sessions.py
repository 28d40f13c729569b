"""Edit session state machine for a single food log entry."""

from collections.abc import Callable
from dataclasses import dataclass, replace

from nutrition_engine.domain.food_logs import (
    NEW_COMPONENT_INDEX,
    ComponentEditAction,
    FoodComponent,
    FoodLogEntry,
    PendingComponentEdit,
    SessionState,
)
from nutrition_engine.errors import SessionClosedError

ComponentUpdater = Callable[[list[FoodComponent]], list[FoodComponent]]


def _noop() -> None:
    return None


@dataclass
class EditSession:
    """Local copy of an entry being edited, with dirty tracking.

    While the session is clean it follows the persisted entry. Once dirty or
    re-estimated, upstream changes are recorded but never overwrite the local
    copy until the session is committed or discarded.

    ``changes_count`` and ``has_unsaved_changes`` track component edits made
    since the last estimation; title edits only make the session dirty.
    """

    upstream: FoodLogEntry
    edited_entry: FoodLogEntry
    on_component_change: Callable[[], None] = _noop
    is_dirty: bool = False
    has_unsaved_changes: bool = False
    changes_count: int = 0
    has_reestimated: bool = False
    awaiting_reestimate: bool = False
    is_closed: bool = False

    @classmethod
    def open(
        cls,
        entry: FoodLogEntry,
        on_component_change: Callable[[], None] | None = None,
    ) -> "EditSession":
        """Start editing ``entry``."""
        session = cls(
            upstream=entry,
            edited_entry=entry,
            on_component_change=on_component_change or _noop,
        )
        session._seed(entry)
        return session

    @property
    def log_id(self) -> str:
        return self.upstream.id

    @property
    def state(self) -> SessionState:
        if self.awaiting_reestimate:
            return SessionState.AWAITING_REESTIMATE
        if self.is_dirty:
            return SessionState.DIRTY
        if self.has_reestimated:
            return SessionState.REESTIMATED
        return SessionState.CLEAN

    def sync_upstream(self, entry: FoodLogEntry) -> None:
        """Receive a new persisted version of the entry."""
        self._ensure_open()
        self.upstream = entry
        if not (self.is_dirty or self.has_reestimated):
            self._seed(entry)

    def update_title(self, title: str) -> None:
        """Set a user title on the edited entry."""
        self._ensure_open()
        self.edited_entry = replace(self.edited_entry, title=title, user_title=title)
        self._mark_dirty()

    def update_components(self, updater: ComponentUpdater) -> bool:
        """Apply a structural change to the component list.

        ``updater`` returns the list it was given to signal no change.
        """
        self._ensure_open()
        current = self.edited_entry.food_components
        updated = updater(current)
        if updated is current:
            return False
        self.edited_entry = replace(self.edited_entry, food_components=list(updated))
        self._mark_dirty()
        self.has_unsaved_changes = True
        self.changes_count += 1
        self.on_component_change()
        return True

    def delete_component(self, index: int) -> bool:
        """Remove the component at ``index``; stale indices are ignored."""

        def updater(components: list[FoodComponent]) -> list[FoodComponent]:
            if not 0 <= index < len(components):
                return components
            return [c for i, c in enumerate(components) if i != index]

        return self.update_components(updater)

    def accept_recommendation(self, index: int) -> bool:
        """Swap a component's measurement for its recommended one."""

        def updater(components: list[FoodComponent]) -> list[FoodComponent]:
            if not 0 <= index < len(components):
                return components
            component = components[index]
            suggestion = component.recommended_measurement
            if suggestion is None:
                return components
            updated = list(components)
            updated[index] = replace(
                component,
                amount=suggestion.amount,
                unit=suggestion.unit,
                recommended_measurement=None,
            )
            return updated

        return self.update_components(updater)

    def apply_pending_component_edit(self, edit: PendingComponentEdit) -> bool:
        """Apply an edit from an external editor.

        Returns False when the edit is addressed to another entry, in which
        case the caller must keep it for that entry's session.
        """
        self._ensure_open()
        if edit.log_id != self.log_id:
            return False
        if edit.action is ComponentEditAction.DELETE:
            if isinstance(edit.index, int):
                self.delete_component(edit.index)
            return True
        if edit.component is None:
            return True
        component = edit.component

        def updater(components: list[FoodComponent]) -> list[FoodComponent]:
            if edit.index == NEW_COMPONENT_INDEX:
                return [*components, component]
            if not 0 <= edit.index < len(components):
                return components
            updated = list(components)
            updated[edit.index] = component
            return updated

        self.update_components(updater)
        return True

    def request_reestimate(self) -> None:
        """Mark that a re-estimation of the edited entry is in flight."""
        self._ensure_open()
        self.awaiting_reestimate = True

    def reestimation_failed(self) -> None:
        """Leave the awaiting state, keeping all local edits."""
        self._ensure_open()
        self.awaiting_reestimate = False

    def mark_reestimated(self, entry: FoodLogEntry | None = None) -> None:
        """Record that a fresh estimation was reconciled into the edited entry."""
        self._ensure_open()
        if entry is not None:
            self.edited_entry = entry
        self.is_dirty = False
        self.changes_count = 0
        self.awaiting_reestimate = False
        self.has_reestimated = True
        self.has_unsaved_changes = False

    def replace_edited_entry(
        self, entry: FoodLogEntry, mark_dirty: bool = True
    ) -> None:
        """Replace the edited entry wholesale."""
        self._ensure_open()
        self.edited_entry = entry
        if mark_dirty:
            self._mark_dirty()

    def commit(self) -> FoodLogEntry:
        """End the session and return the entry to persist."""
        self._ensure_open()
        self.is_closed = True
        return self.edited_entry

    def discard(self) -> FoodLogEntry:
        """End the session and return the persisted entry."""
        self._ensure_open()
        self.is_closed = True
        return self.upstream

    def _seed(self, entry: FoodLogEntry) -> None:
        self.has_unsaved_changes = False
        self.changes_count = 0
        if entry.needs_user_review:
            # Review must be acknowledged before the entry counts as clean.
            self.edited_entry = replace(entry, needs_user_review=False)
            self._mark_dirty()
        else:
            self.edited_entry = entry

    def _mark_dirty(self) -> None:
        self.is_dirty = True

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise SessionClosedError(f"Edit session for {self.log_id} is closed")
