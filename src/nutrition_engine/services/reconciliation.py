"""Merge estimation results into food log entries."""

from dataclasses import replace

from nutrition_engine.domain.estimation import (
    ConfidenceLevel,
    EstimatedComponent,
    EstimationResult,
)
from nutrition_engine.domain.food_logs import (
    EntryState,
    FoodComponent,
    FoodLogEntry,
    InvalidImageSignal,
    Measurement,
    Unit,
)

HIGH_CONFIDENCE = 80
MEDIUM_CONFIDENCE = 60
PROCESSING_IMAGE_TITLE = "Processing image..."

_EXACT_UNITS = {Unit.GRAM, Unit.MILLILITER}
_UNKNOWN_COMPONENT = "Unknown Item"


def start_estimation(entry: FoodLogEntry) -> FoodLogEntry:
    """Return the skeleton shown while an estimation is in flight.

    User-entered values stay in their ``user_*`` fields and are merged back
    when the result arrives.
    """
    title = entry.user_title or entry.title
    if entry.image_ref and not entry.user_title:
        title = PROCESSING_IMAGE_TITLE
    return replace(
        entry,
        title=title,
        calories=0,
        protein=0,
        carbs=0,
        fat=0,
        estimation_confidence=0,
        state=EntryState.ESTIMATING,
    )


def reconcile(
    entry: FoodLogEntry, result: EstimationResult
) -> FoodLogEntry | InvalidImageSignal:
    """Resolve each field from the user's value or the generated one.

    The merge is deterministic: reconciling the output again with the same
    result returns an equal entry.
    """
    if result.is_invalid_image:
        return InvalidImageSignal(entry_id=entry.id)

    components = sanitize_components(result.food_components)
    return replace(
        entry,
        title=_resolve_title(entry.user_title, result.generated_title),
        generated_title=result.generated_title,
        calories=_resolve(entry.user_calories, result.calories),
        protein=_resolve(entry.user_protein, result.protein),
        carbs=_resolve(entry.user_carbs, result.carbs),
        fat=_resolve(entry.user_fat, result.fat),
        food_components=components or entry.food_components,
        estimation_confidence=result.estimation_confidence,
        state=EntryState.ESTIMATED,
        needs_user_review=False,
    )


def confidence_level(confidence: int) -> ConfidenceLevel:
    """Band a 0-100 confidence for display."""
    if confidence <= 0:
        return ConfidenceLevel.UNCERTAIN
    if confidence >= HIGH_CONFIDENCE:
        return ConfidenceLevel.HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def sanitize_components(components: list[EstimatedComponent]) -> list[FoodComponent]:
    """Convert estimator components, dropping unnamed ones."""
    sanitized: list[FoodComponent] = []
    for component in components:
        name = component.name.strip()
        if not name or name == _UNKNOWN_COMPONENT:
            continue
        unit = parse_unit(component.unit) or Unit.PIECE
        recommended = None
        suggestion = component.recommended_measurement
        if unit is Unit.PIECE and suggestion is not None:
            suggested_unit = parse_unit(suggestion.unit)
            if suggestion.amount > 0 and suggested_unit in _EXACT_UNITS:
                recommended = Measurement(amount=suggestion.amount, unit=suggested_unit)
        sanitized.append(
            FoodComponent(
                name=name,
                amount=max(0.0, component.amount),
                unit=unit,
                recommended_measurement=recommended,
            )
        )
    return sanitized


def parse_unit(raw: str | None) -> Unit | None:
    """Parse a unit string, returning None when it is not supported."""
    try:
        return Unit(str(raw or "").strip().lower())
    except ValueError:
        return None


def _resolve(user_value: float | None, generated: float) -> float:
    return user_value if user_value is not None else generated


def _resolve_title(user_title: str | None, generated_title: str) -> str:
    if user_title and user_title.strip():
        return user_title
    return generated_title
