"""Validation of user-typed nutrition values."""

import math
from dataclasses import dataclass, field

from nutrition_engine.services.macros import calories_from_macros

MAX_USER_VALUE = 10000
MACRO_CALORIE_TOLERANCE = 0.2

_LIMITS = {
    "calories": (MAX_USER_VALUE, "Calories seem unreasonably high"),
    "protein": (500, "Protein seems unreasonably high"),
    "carbs": (1000, "Carbs seem unreasonably high"),
    "fat": (500, "Fat seems unreasonably high"),
}


@dataclass(frozen=True)
class UserNutritionInput:
    """Nutrition values typed by the user, with parse errors."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def needs_estimation(self) -> bool:
        return None in (self.calories, self.protein, self.carbs, self.fat)


def merge_user_values(
    calories: str | float | None,
    protein: str | float | None,
    carbs: str | float | None,
    fat: str | float | None,
) -> UserNutritionInput:
    """Parse typed values. Blank fields are left for the estimator."""
    errors: list[str] = []
    parsed: dict[str, float | None] = {}
    for name, raw in (
        ("calories", calories),
        ("protein", protein),
        ("carbs", carbs),
        ("fat", fat),
    ):
        value, error = _parse_user_value(raw, name.capitalize())
        parsed[name] = value
        if error:
            errors.append(error)
    return UserNutritionInput(errors=errors, **parsed)


def validate_nutrition_values(
    calories: float | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
) -> list[str]:
    """Return range and consistency errors for a set of values."""
    errors: list[str] = []
    values = {"calories": calories, "protein": protein, "carbs": carbs, "fat": fat}
    for name, value in values.items():
        if value is None:
            continue
        limit, message = _LIMITS[name]
        if value < 0:
            errors.append(f"{name.capitalize()} cannot be negative")
        if value > limit:
            errors.append(message)

    if calories and protein and carbs and fat:
        implied = calories_from_macros(protein, fat, carbs)
        if abs(implied - calories) > calories * MACRO_CALORIE_TOLERANCE:
            errors.append("Macro calories don't match total calories")
    return errors


def _parse_user_value(
    raw: str | float | None, field_name: str
) -> tuple[float | None, str | None]:
    if raw is None:
        return None, None
    if isinstance(raw, str):
        if not raw.strip():
            return None, None
        try:
            value = float(raw.strip())
        except ValueError:
            return None, f"{field_name} must be a valid number"
    else:
        value = float(raw)
    if math.isnan(value):
        return None, f"{field_name} must be a valid number"
    if value < 0:
        return None, f"{field_name} cannot be negative"
    if value > MAX_USER_VALUE:
        return None, f"{field_name} value seems too high (max 10,000)"
    return value, None
