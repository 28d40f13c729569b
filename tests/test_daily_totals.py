"""Tests for daily totals against targets."""

from datetime import date

import pytest

from nutrition_engine.domain.food_logs import EntryState, FoodLogEntry
from nutrition_engine.domain.targets import MacroTotals, NutritionTargets
from nutrition_engine.services.daily_totals import daily_totals
from tests.conftest import build_entry

TARGETS = NutritionTargets(calories=2000, protein_g=150, fat_g=67, carbs_g=199)


def _entries() -> list[FoodLogEntry]:
    return [
        build_entry(
            id="breakfast",
            calories=450,
            protein=30,
            carbs=50,
            fat=15,
            state=EntryState.ESTIMATED,
        ),
        build_entry(
            id="lunch",
            calories=700,
            protein=45,
            carbs=80,
            fat=22,
            state=EntryState.ESTIMATED,
        ),
        build_entry(
            id="snack",
            calories=0,
            user_calories=200,
            state=EntryState.ESTIMATING,
        ),
    ]


def test_totals_skip_entries_still_estimating() -> None:
    summary = daily_totals(_entries())

    assert summary.totals == MacroTotals(calories=1150, protein=75, carbs=130, fat=37)
    assert summary.targets is None
    assert summary.progress is None
    assert summary.remaining is None


def test_progress_and_remaining() -> None:
    summary = daily_totals(_entries(), TARGETS)

    assert summary.progress is not None
    assert summary.progress.calories == pytest.approx(57.5)
    assert summary.progress.protein == pytest.approx(50)
    assert summary.remaining == MacroTotals(
        calories=850, protein=75, carbs=69, fat=30
    )


def test_progress_is_capped_and_remaining_floored() -> None:
    feast = build_entry(
        calories=2600, protein=90, carbs=300, fat=100, state=EntryState.ESTIMATED
    )

    summary = daily_totals([feast], TARGETS)

    assert summary.progress is not None
    assert summary.progress.calories == 100
    assert summary.progress.fat == 100
    assert summary.progress.protein == pytest.approx(60)
    assert summary.remaining is not None
    assert summary.remaining.calories == 0
    assert summary.remaining.carbs == 0
    assert summary.remaining.protein == 60


def test_unset_targets_report_no_progress() -> None:
    summary = daily_totals([build_entry(calories=300)], NutritionTargets())

    assert summary.progress == MacroTotals()
    assert summary.remaining == MacroTotals()


def test_repository_lists_entries_by_date(food_log_repository) -> None:
    for entry in _entries():
        food_log_repository.add(entry)
    food_log_repository.add(
        build_entry(id="yesterday", log_date=date(2026, 1, 14), calories=900)
    )

    entries = food_log_repository.list_by_date(date(2026, 1, 15))

    assert daily_totals(entries).totals.calories == 1150
