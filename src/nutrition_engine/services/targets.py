"""Cascade rules for daily macro targets."""

import logging
from dataclasses import replace

from nutrition_engine.domain.targets import (
    ActivityLevel,
    CalorieGoals,
    DerivationContext,
    DerivationOutcome,
    GoalType,
    NutritionTargets,
    Sex,
    TargetField,
    UserNutritionProfile,
)
from nutrition_engine.services.macros import (
    CARBS_KCAL_PER_GRAM,
    DEFAULT_FAT_PERCENTAGE,
    calories_from_macros,
    carbs_from_macros,
    fat_grams_from_percentage,
    macros_from_protein,
    round_half_up,
)

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

CALORIE_SAFETY_FLOORS = {
    Sex.FEMALE: 1200,
    Sex.MALE: 1500,
}

LOSE_DEFICIT_KCAL = 500
GAIN_SURPLUS_KCAL = 300

# Carbs are rounded to whole grams after protein and fat, so a split can miss
# the calorie total by up to half a carb gram: 2 kcal when the remainder left
# for carbs is 2 mod 4, for example 806 kcal rounding to 202 g.
BALANCE_TOLERANCE_KCAL = CARBS_KCAL_PER_GRAM / 2

_logger = logging.getLogger(__name__)


def derive(
    current: NutritionTargets,
    changed_field: TargetField,
    new_value: float,
    context: DerivationContext | None = None,
) -> NutritionTargets:
    """Return new targets after ``changed_field`` is set to ``new_value``."""
    return derive_with_outcome(current, changed_field, new_value, context).targets


def derive_with_outcome(
    current: NutritionTargets,
    changed_field: TargetField,
    new_value: float,
    context: DerivationContext | None = None,
) -> DerivationOutcome:
    """Apply the cascade rule for ``changed_field`` and report the new state.

    Nothing is derived while calories are unset, and clearing calories clears
    fat and carbs with them. Negative carbs are returned as-is; clamping the
    requested fat percentage is the caller's job.
    """
    context = context or DerivationContext()
    value = max(0.0, float(new_value))
    fat_percentage = context.fat_percentage

    if changed_field is TargetField.CALORIES:
        targets = replace(current, calories=value)
        if value == 0:
            targets = replace(targets, fat_g=0, carbs_g=0)
        elif current.is_protein_set:
            fat_g = fat_grams_from_percentage(value, fat_percentage)
            targets = replace(
                targets,
                fat_g=fat_g,
                carbs_g=carbs_from_macros(value, current.protein_g, fat_g),
            )
    elif changed_field is TargetField.PROTEIN:
        targets = replace(current, protein_g=value)
        if current.is_calories_set and current.is_protein_set:
            fat_g = fat_grams_from_percentage(current.calories, fat_percentage)
            targets = replace(
                targets,
                fat_g=fat_g,
                carbs_g=carbs_from_macros(current.calories, value, fat_g),
            )
        elif current.is_calories_set and value > 0:
            split = macros_from_protein(current.calories, value)
            fat_percentage = DEFAULT_FAT_PERCENTAGE
            targets = replace(targets, fat_g=split.fat_g, carbs_g=split.carbs_g)
    elif changed_field is TargetField.FAT_PERCENTAGE:
        fat_percentage = value
        targets = current
        if current.is_calories_set:
            fat_g = fat_grams_from_percentage(current.calories, fat_percentage)
            targets = replace(
                current,
                fat_g=fat_g,
                carbs_g=carbs_from_macros(current.calories, current.protein_g, fat_g),
            )
    else:
        # Carbs are the dependent variable; calories are never back-derived.
        targets = replace(current, carbs_g=value)

    over_budget = targets.carbs_g < 0
    if over_budget:
        _logger.info(
            "Derived targets over budget: field=%s carbs=%s",
            changed_field.value,
            targets.carbs_g,
        )
    return DerivationOutcome(
        targets=targets, fat_percentage=fat_percentage, over_budget=over_budget
    )


def check_balance(targets: NutritionTargets) -> bool:
    """Return True when the macros add up to the calorie target."""
    if not targets.is_calories_set:
        return True
    implied = calories_from_macros(targets.protein_g, targets.fat_g, targets.carbs_g)
    return abs(targets.calories - implied) <= BALANCE_TOLERANCE_KCAL


def reset_targets() -> NutritionTargets:
    """Return the unset targets value."""
    return NutritionTargets()


def calculate_calorie_goals(profile: UserNutritionProfile) -> CalorieGoals:
    """Calculate calorie goals with the Mifflin-St Jeor equation."""
    rmr = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    rmr += 5 if profile.sex is Sex.MALE else -161
    maintain = round_half_up(rmr * ACTIVITY_MULTIPLIERS[profile.activity_level])
    lose = max(maintain - LOSE_DEFICIT_KCAL, CALORIE_SAFETY_FLOORS[profile.sex])
    return CalorieGoals(lose=lose, maintain=maintain, gain=maintain + GAIN_SURPLUS_KCAL)


def calculate_daily_targets(profile: UserNutritionProfile) -> NutritionTargets:
    """Derive a full set of targets from a user profile."""
    goals = calculate_calorie_goals(profile)
    calories = {
        GoalType.LOSE: goals.lose,
        GoalType.MAINTAIN: goals.maintain,
        GoalType.GAIN: goals.gain,
    }[profile.goal_type]
    protein_g = round_half_up(max(0.0, profile.weight_kg * profile.protein_per_kg))
    fat_g = fat_grams_from_percentage(calories, profile.fat_percentage)
    return NutritionTargets(
        calories=calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carbs_g=carbs_from_macros(calories, protein_g, fat_g),
    )
