"""Daily totals of logged food against nutrition targets."""

from collections.abc import Iterable

from nutrition_engine.domain.food_logs import FoodLogEntry
from nutrition_engine.domain.targets import DailySummary, MacroTotals, NutritionTargets

MAX_PROGRESS_PERCENT = 100


def daily_totals(
    entries: Iterable[FoodLogEntry], targets: NutritionTargets | None = None
) -> DailySummary:
    """Sum a day's entries and compare them with ``targets``.

    Entries still being estimated hold placeholder zeros and are skipped.
    Progress is capped at 100 % and remaining amounts never go below zero.
    """
    calories = protein = carbs = fat = 0.0
    for entry in entries:
        if entry.is_estimating:
            continue
        calories += entry.calories
        protein += entry.protein
        carbs += entry.carbs
        fat += entry.fat
    totals = MacroTotals(calories=calories, protein=protein, carbs=carbs, fat=fat)
    if targets is None:
        return DailySummary(totals=totals)

    goal = MacroTotals(
        calories=targets.calories,
        protein=targets.protein_g,
        carbs=targets.carbs_g,
        fat=targets.fat_g,
    )
    return DailySummary(
        totals=totals,
        targets=targets,
        progress=MacroTotals(
            calories=_progress(totals.calories, goal.calories),
            protein=_progress(totals.protein, goal.protein),
            carbs=_progress(totals.carbs, goal.carbs),
            fat=_progress(totals.fat, goal.fat),
        ),
        remaining=MacroTotals(
            calories=max(goal.calories - totals.calories, 0),
            protein=max(goal.protein - totals.protein, 0),
            carbs=max(goal.carbs - totals.carbs, 0),
            fat=max(goal.fat - totals.fat, 0),
        ),
    )


def _progress(total: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(total / target * 100, MAX_PROGRESS_PERCENT)
