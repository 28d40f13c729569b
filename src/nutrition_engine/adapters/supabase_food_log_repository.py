"""Supabase repository for food log entries."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from nutrition_engine.domain.food_logs import (
    EntryState,
    FoodComponent,
    FoodLogEntry,
    Measurement,
    Unit,
)
from nutrition_engine.services.estimation import FoodLogRepository

_COLUMNS = (
    "id, log_date, created_at, title, description, food_components, calories, "
    "protein, carbs, fat, user_title, generated_title, user_calories, "
    "user_protein, user_carbs, user_fat, estimation_confidence, state, "
    "needs_user_review, image_ref, local_image_ref"
)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food log entries."""

    client: Client

    def add(self, entry: FoodLogEntry) -> None:
        """Insert an entry row."""
        response = self.client.table("food_logs").insert(_to_row(entry)).execute()
        if not response.data:
            raise RuntimeError("Failed to create food log")

    def get(self, entry_id: str) -> FoodLogEntry | None:
        """Return an entry by id, if present."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("id", entry_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _from_row(response.data[0])

    def update(self, entry: FoodLogEntry) -> None:
        """Overwrite an entry row."""
        row = _to_row(entry)
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.client.table("food_logs").update(row).eq("id", entry.id).execute()

    def delete(self, entry_id: str) -> None:
        """Delete an entry row."""
        self.client.table("food_logs").delete().eq("id", entry_id).execute()

    def list_estimating(self) -> list[FoodLogEntry]:
        """Return entries left in the estimating state."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("state", EntryState.ESTIMATING.value)
            .execute()
        )
        return [_from_row(row) for row in response.data or []]

    def list_by_date(self, log_date: date) -> list[FoodLogEntry]:
        """Return the entries logged on a day, oldest first."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("log_date", log_date.isoformat())
            .order("created_at")
            .execute()
        )
        return [_from_row(row) for row in response.data or []]


def _to_row(entry: FoodLogEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "log_date": entry.log_date.isoformat(),
        "created_at": entry.created_at.isoformat(),
        "title": entry.title,
        "description": entry.description,
        "food_components": [_component_to_json(c) for c in entry.food_components],
        "calories": entry.calories,
        "protein": entry.protein,
        "carbs": entry.carbs,
        "fat": entry.fat,
        "user_title": entry.user_title,
        "generated_title": entry.generated_title,
        "user_calories": entry.user_calories,
        "user_protein": entry.user_protein,
        "user_carbs": entry.user_carbs,
        "user_fat": entry.user_fat,
        "estimation_confidence": entry.estimation_confidence,
        "state": entry.state.value,
        "needs_user_review": entry.needs_user_review,
        "image_ref": entry.image_ref,
        "local_image_ref": entry.local_image_ref,
    }


def _from_row(row: dict[str, object]) -> FoodLogEntry:
    return FoodLogEntry(
        id=str(row["id"]),
        log_date=date.fromisoformat(str(row["log_date"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        title=str(row.get("title") or ""),
        description=row.get("description"),
        food_components=[
            _component_from_json(item) for item in row.get("food_components") or []
        ],
        calories=float(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        user_title=row.get("user_title"),
        generated_title=row.get("generated_title"),
        user_calories=_optional_float(row.get("user_calories")),
        user_protein=_optional_float(row.get("user_protein")),
        user_carbs=_optional_float(row.get("user_carbs")),
        user_fat=_optional_float(row.get("user_fat")),
        estimation_confidence=int(row.get("estimation_confidence") or 0),
        state=EntryState(row.get("state") or EntryState.DRAFT.value),
        needs_user_review=bool(row.get("needs_user_review")),
        image_ref=row.get("image_ref"),
        local_image_ref=row.get("local_image_ref"),
    )


def _component_to_json(component: FoodComponent) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": component.name,
        "amount": component.amount,
        "unit": component.unit.value,
    }
    if component.recommended_measurement is not None:
        payload["recommendedMeasurement"] = {
            "amount": component.recommended_measurement.amount,
            "unit": component.recommended_measurement.unit.value,
        }
    return payload


def _component_from_json(payload: dict[str, object]) -> FoodComponent:
    recommended = payload.get("recommendedMeasurement")
    return FoodComponent(
        name=str(payload.get("name", "")),
        amount=float(payload.get("amount") or 0),
        unit=Unit(payload.get("unit") or Unit.PIECE.value),
        recommended_measurement=(
            Measurement(
                amount=float(recommended["amount"]), unit=Unit(recommended["unit"])
            )
            if isinstance(recommended, dict)
            else None
        ),
    )


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    return None
