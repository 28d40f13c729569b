"""Estimation round trips for food log entries."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol

from nutrition_engine.domain.estimation import EstimationResult
from nutrition_engine.domain.food_logs import (
    EntryState,
    FoodLogEntry,
    InvalidImageSignal,
)
from nutrition_engine.errors import EstimationError
from nutrition_engine.services.edit_sessions import EditSession
from nutrition_engine.services.reconciliation import reconcile, start_estimation

MANUAL_ENTRY_CONFIDENCE = 100

_logger = logging.getLogger(__name__)


class EstimationClient(Protocol):
    """Interface for the AI nutrition estimator."""

    async def estimate_from_text(
        self, title: str, description: str | None = None
    ) -> EstimationResult:
        """Estimate nutrition from a meal title and description."""

    async def estimate_from_image(
        self,
        image_ref: str,
        title: str | None = None,
        description: str | None = None,
    ) -> EstimationResult:
        """Estimate nutrition from an uploaded image."""


class FoodLogRepository(Protocol):
    """Persistence interface for food log entries."""

    def add(self, entry: FoodLogEntry) -> None:
        """Store a new entry."""

    def get(self, entry_id: str) -> FoodLogEntry | None:
        """Return an entry by id, if present."""

    def update(self, entry: FoodLogEntry) -> None:
        """Replace a stored entry."""

    def delete(self, entry_id: str) -> None:
        """Delete an entry; missing ids are ignored."""

    def list_estimating(self) -> list[FoodLogEntry]:
        """Return entries still in the estimating state."""

    def list_by_date(self, log_date: date) -> list[FoodLogEntry]:
        """Return the entries logged on ``log_date``, oldest first."""


@dataclass(frozen=True)
class EstimationOutcome:
    """Result of submitting or re-estimating an entry."""

    entry: FoodLogEntry | None
    invalid_image: bool = False


@dataclass
class EstimationService:
    """Runs estimations and keeps the stored skeleton consistent."""

    client: EstimationClient
    repository: FoodLogRepository

    async def submit(self, entry: FoodLogEntry) -> EstimationOutcome:
        """Store a new entry, estimating whatever the user left blank.

        The skeleton is stored before the estimator is called. It is deleted
        when the image is refused or the call fails.
        """
        if entry.has_all_user_values:
            manual = replace(
                entry,
                title=entry.user_title or entry.title,
                calories=entry.user_calories,
                protein=entry.user_protein,
                carbs=entry.user_carbs,
                fat=entry.user_fat,
                estimation_confidence=MANUAL_ENTRY_CONFIDENCE,
                state=EntryState.ESTIMATED,
            )
            self.repository.add(manual)
            return EstimationOutcome(entry=manual)

        skeleton = start_estimation(entry)
        self.repository.add(skeleton)
        try:
            result = await self.estimate(skeleton)
        except EstimationError:
            self.repository.delete(skeleton.id)
            raise
        return self._store(skeleton, result, previous=None)

    async def reestimate(self, entry: FoodLogEntry) -> EstimationOutcome:
        """Re-run the estimation for an already stored entry.

        On failure the previously stored values are written back.
        """
        previous = self.repository.get(entry.id) or entry
        skeleton = start_estimation(entry)
        self.repository.update(skeleton)
        try:
            result = await self.estimate(skeleton)
        except EstimationError:
            self.repository.update(previous)
            raise
        return self._store(skeleton, result, previous=previous)

    async def reestimate_session(self, session: EditSession) -> EstimationOutcome:
        """Re-estimate the locally edited entry of an edit session."""
        session.request_reestimate()
        try:
            result = await self.estimate(session.edited_entry)
        except EstimationError:
            session.reestimation_failed()
            raise
        reconciled = reconcile(session.edited_entry, result)
        if isinstance(reconciled, InvalidImageSignal):
            _logger.info("Estimator refused image for entry %s", session.log_id)
            session.reestimation_failed()
            return EstimationOutcome(entry=None, invalid_image=True)
        session.mark_reestimated(reconciled)
        return EstimationOutcome(entry=reconciled)

    async def estimate(self, entry: FoodLogEntry) -> EstimationResult:
        """Call the estimator for an entry's image or text."""
        try:
            if entry.image_ref:
                return await self.client.estimate_from_image(
                    entry.image_ref,
                    title=entry.user_title,
                    description=entry.description,
                )
            return await self.client.estimate_from_text(
                entry.user_title or entry.generated_title or entry.title,
                _describe(entry),
            )
        except EstimationError as exc:
            _logger.warning("Estimation failed for entry %s: %s", entry.id, exc)
            raise
        except Exception as exc:
            _logger.exception("Estimation failed for entry %s", entry.id)
            raise EstimationError(str(exc)) from exc

    def cleanup_incomplete_estimations(self) -> list[str]:
        """Resolve skeletons left behind by interrupted estimations.

        Entries that were never estimated are deleted. Entries interrupted
        during a re-estimation are kept and flagged for review.
        """
        removed: list[str] = []
        for entry in self.repository.list_estimating():
            if entry.generated_title is None:
                self.repository.delete(entry.id)
                removed.append(entry.id)
                continue
            self.repository.update(
                replace(entry, state=EntryState.ESTIMATED, needs_user_review=True)
            )
        if removed:
            _logger.info("Removed %s incomplete estimations", len(removed))
        return removed

    def _store(
        self,
        skeleton: FoodLogEntry,
        result: EstimationResult,
        previous: FoodLogEntry | None,
    ) -> EstimationOutcome:
        reconciled = reconcile(skeleton, result)
        if isinstance(reconciled, InvalidImageSignal):
            _logger.info("Estimator refused image for entry %s", skeleton.id)
            if previous is None:
                self.repository.delete(skeleton.id)
            else:
                self.repository.update(previous)
            return EstimationOutcome(entry=previous, invalid_image=True)
        self.repository.update(reconciled)
        return EstimationOutcome(entry=reconciled)


def _describe(entry: FoodLogEntry) -> str | None:
    """Build the text sent to the estimator, listing edited components."""
    if not entry.food_components:
        return entry.description
    lines = [
        f"- {component.name}: {component.amount:g} {component.unit.value}"
        for component in entry.food_components
    ]
    components = "Components:\n" + "\n".join(lines)
    if entry.description:
        return f"{entry.description}\n{components}"
    return components
