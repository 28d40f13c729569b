"""Calorie-balance arithmetic for macro targets.

All functions are pure: inputs are clamped to non-negative numbers and nothing
raises. ``carbs_from_macros`` keeps its sign so callers can detect an
over-budget split.
"""

import math

from nutrition_engine.domain.targets import MacroSplit

PROTEIN_KCAL_PER_GRAM = 4
CARBS_KCAL_PER_GRAM = 4
FAT_KCAL_PER_GRAM = 9
DEFAULT_FAT_PERCENTAGE = 30


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def fat_grams_from_percentage(calories: float, fat_percentage: float) -> int:
    """Return fat grams supplying ``fat_percentage`` of ``calories``."""
    calories = _non_negative(calories)
    fat_percentage = _non_negative(fat_percentage)
    return round_half_up(calories * fat_percentage / 100 / FAT_KCAL_PER_GRAM)


def fat_percentage_from_grams(calories: float, fat_g: float) -> float:
    """Return the share of ``calories`` supplied by ``fat_g``."""
    calories = _non_negative(calories)
    if calories == 0:
        return 0.0
    return _non_negative(fat_g) * FAT_KCAL_PER_GRAM / calories * 100


def carbs_from_macros(calories: float, protein_g: float, fat_g: float) -> int:
    """Return carbs grams filling the calories left after protein and fat."""
    remaining = (
        _non_negative(calories)
        - _non_negative(protein_g) * PROTEIN_KCAL_PER_GRAM
        - _non_negative(fat_g) * FAT_KCAL_PER_GRAM
    )
    return round_half_up(remaining / CARBS_KCAL_PER_GRAM)


def macros_from_protein(calories: float, protein_g: float) -> MacroSplit:
    """Seed fat at the default percentage and derive carbs from the rest."""
    fat_g = fat_grams_from_percentage(calories, DEFAULT_FAT_PERCENTAGE)
    carbs_g = carbs_from_macros(calories, protein_g, fat_g)
    return MacroSplit(fat_g=fat_g, carbs_g=carbs_g)


def max_fat_percentage(calories: float, protein_g: float) -> float:
    """Return the largest fat percentage that keeps carbs non-negative."""
    calories = _non_negative(calories)
    if calories == 0:
        return 0.0
    available = calories - _non_negative(protein_g) * PROTEIN_KCAL_PER_GRAM
    return max(0.0, available / calories * 100)


def calories_from_macros(protein_g: float, fat_g: float, carbs_g: float) -> float:
    """Return the calories implied by a macro split."""
    return (
        protein_g * PROTEIN_KCAL_PER_GRAM
        + fat_g * FAT_KCAL_PER_GRAM
        + carbs_g * CARBS_KCAL_PER_GRAM
    )


def _non_negative(value: float) -> float:
    return max(0.0, float(value))
