"""Domain models for daily nutrition targets."""

from dataclasses import dataclass
from enum import Enum


class TargetField(Enum):
    """Target field a user can change in the goals flow."""

    CALORIES = "calories"
    PROTEIN = "protein"
    FAT_PERCENTAGE = "fat_percentage"
    CARBS = "carbs"


class Sex(Enum):
    """Biological sex used by the RMR formula."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level mapped to a PAL multiplier."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "veryactive"


class GoalType(Enum):
    """Weight goal that adjusts maintenance calories."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


@dataclass(frozen=True)
class NutritionTargets:
    """Daily macro targets. A field is unset while it is 0."""

    calories: float = 0
    protein_g: float = 0
    fat_g: float = 0
    carbs_g: float = 0

    @property
    def is_calories_set(self) -> bool:
        return self.calories > 0

    @property
    def is_protein_set(self) -> bool:
        return self.protein_g > 0


@dataclass(frozen=True)
class UserNutritionProfile:
    """Settings that seed target derivation."""

    sex: Sex
    age: int
    weight_kg: float
    height_cm: float
    activity_level: ActivityLevel
    goal_type: GoalType = GoalType.MAINTAIN
    fat_percentage: float = 30
    protein_per_kg: float = 1.6


@dataclass(frozen=True)
class DerivationContext:
    """Caller-owned state the cascade reads besides the targets."""

    fat_percentage: float = 30


@dataclass(frozen=True)
class DerivationOutcome:
    """Result of a derivation with the fat percentage to store back."""

    targets: NutritionTargets
    fat_percentage: float
    over_budget: bool


@dataclass(frozen=True)
class MacroSplit:
    """Fat and carbs seeded from calories and protein."""

    fat_g: int
    carbs_g: int


@dataclass(frozen=True)
class CalorieGoals:
    """Calorie goals for each weight goal."""

    lose: int
    maintain: int
    gain: int


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macro grams summed over a day, or derived from them."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


@dataclass(frozen=True)
class DailySummary:
    """A day's logged totals measured against the targets."""

    totals: MacroTotals
    targets: NutritionTargets | None = None
    progress: MacroTotals | None = None
    remaining: MacroTotals | None = None
