"""Pydantic models for the HTTP API."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from nutrition_engine.domain.food_logs import FoodLogEntry
from nutrition_engine.domain.targets import (
    ActivityLevel,
    GoalType,
    MacroTotals,
    NutritionTargets,
    Sex,
    TargetField,
)


class TargetsPayload(BaseModel):
    """Daily macro targets."""

    calories: float = 0
    protein_g: float = 0
    fat_g: float = 0
    carbs_g: float = 0

    def to_domain(self) -> NutritionTargets:
        return NutritionTargets(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )

    @classmethod
    def from_domain(cls, targets: NutritionTargets) -> "TargetsPayload":
        return cls(
            calories=targets.calories,
            protein_g=targets.protein_g,
            fat_g=targets.fat_g,
            carbs_g=targets.carbs_g,
        )


class DeriveTargetsRequest(BaseModel):
    """A single target change."""

    current: TargetsPayload = Field(default_factory=TargetsPayload)
    changed_field: TargetField
    value: float
    fat_percentage: float | None = None


class DeriveTargetsResponse(BaseModel):
    """Targets after the cascade rule ran."""

    targets: TargetsPayload
    fat_percentage: float
    max_fat_percentage: float
    over_budget: bool


class ProfileRequest(BaseModel):
    """User profile used to calculate targets."""

    sex: Sex
    age: int = Field(gt=0)
    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    activity_level: ActivityLevel
    goal_type: GoalType = GoalType.MAINTAIN
    fat_percentage: float | None = Field(default=None, ge=0, le=100)
    protein_per_kg: float = Field(default=1.6, ge=0)


class CalculateTargetsResponse(BaseModel):
    """Targets and calorie goals for a profile."""

    targets: TargetsPayload
    lose: int
    maintain: int
    gain: int


class CreateFoodLogRequest(BaseModel):
    """A new food log with optional typed values."""

    title: str | None = None
    description: str | None = None
    log_date: date | None = None
    image_ref: str | None = None
    local_image_ref: str | None = None
    calories: str | float | None = None
    protein: str | float | None = None
    carbs: str | float | None = None
    fat: str | float | None = None


class FoodComponentPayload(BaseModel):
    """Ingredient line."""

    name: str
    amount: float
    unit: str
    recommended_amount: float | None = None
    recommended_unit: str | None = None


class FoodLogResponse(BaseModel):
    """Stored food log entry."""

    id: str
    log_date: date
    created_at: datetime
    title: str
    description: str | None
    food_components: list[FoodComponentPayload]
    calories: float
    protein: float
    carbs: float
    fat: float
    estimation_confidence: int
    confidence_level: str
    state: str
    is_estimating: bool
    needs_user_review: bool
    image_ref: str | None

    @classmethod
    def from_entry(
        cls, entry: FoodLogEntry, confidence_level: str
    ) -> "FoodLogResponse":
        return cls(
            id=entry.id,
            log_date=entry.log_date,
            created_at=entry.created_at,
            title=entry.title,
            description=entry.description,
            food_components=[
                FoodComponentPayload(
                    name=component.name,
                    amount=component.amount,
                    unit=component.unit.value,
                    recommended_amount=(
                        component.recommended_measurement.amount
                        if component.recommended_measurement
                        else None
                    ),
                    recommended_unit=(
                        component.recommended_measurement.unit.value
                        if component.recommended_measurement
                        else None
                    ),
                )
                for component in entry.food_components
            ],
            calories=entry.calories,
            protein=entry.protein,
            carbs=entry.carbs,
            fat=entry.fat,
            estimation_confidence=entry.estimation_confidence,
            confidence_level=confidence_level,
            state=entry.state.value,
            is_estimating=entry.is_estimating,
            needs_user_review=entry.needs_user_review,
            image_ref=entry.image_ref,
        )


class FoodLogEnvelope(BaseModel):
    """Outcome of a submit or re-estimate call."""

    status: str
    entry: FoodLogResponse | None = None


class MacroTotalsPayload(BaseModel):
    """Calories and macro grams."""

    calories: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def from_domain(cls, totals: MacroTotals) -> "MacroTotalsPayload":
        return cls(
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fat=totals.fat,
        )


class DailySummaryRequest(BaseModel):
    """Day to summarise, with optional targets to measure against."""

    log_date: date
    targets: TargetsPayload | None = None


class DailySummaryResponse(BaseModel):
    """Totals for a day and progress towards the targets."""

    log_date: date
    entry_count: int
    totals: MacroTotalsPayload
    targets: TargetsPayload | None = None
    progress: MacroTotalsPayload | None = None
    remaining: MacroTotalsPayload | None = None
