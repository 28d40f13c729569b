"""Tests for the estimation service."""

import asyncio

import pytest

from nutrition_engine.domain.food_logs import (
    EntryState,
    FoodComponent,
    SessionState,
    Unit,
)
from nutrition_engine.errors import EstimationError
from nutrition_engine.services.edit_sessions import EditSession
from tests.conftest import build_entry, build_result


def test_submit_stores_skeleton_then_estimate(
    estimation_service, estimation_client, food_log_repository
) -> None:
    entry = build_entry(user_title="Chicken bowl", user_protein=45)

    outcome = asyncio.run(estimation_service.submit(entry))

    action, skeleton = food_log_repository.history[0]
    assert action == "add"
    assert skeleton.state is EntryState.ESTIMATING
    assert skeleton.calories == 0
    assert estimation_client.text_calls == [("Chicken bowl", None)]
    stored = food_log_repository.get("log-1")
    assert stored == outcome.entry
    assert stored.state is EntryState.ESTIMATED
    assert stored.protein == 45
    assert stored.calories == 500
    assert stored.title == "Chicken bowl"


def test_submit_with_all_values_skips_estimator(
    estimation_service, estimation_client, food_log_repository
) -> None:
    entry = build_entry(
        user_title="Protein shake",
        user_calories=220,
        user_protein=30,
        user_carbs=12,
        user_fat=5,
    )

    outcome = asyncio.run(estimation_service.submit(entry))

    assert estimation_client.text_calls == []
    assert outcome.entry.estimation_confidence == 100
    assert outcome.entry.state is EntryState.ESTIMATED
    assert food_log_repository.get("log-1").calories == 220


def test_submit_image_uses_image_estimator(
    estimation_service, estimation_client
) -> None:
    entry = build_entry(image_ref="https://cdn.example.com/plate.jpg")

    outcome = asyncio.run(estimation_service.submit(entry))

    assert estimation_client.image_calls == [
        ("https://cdn.example.com/plate.jpg", None, None)
    ]
    assert outcome.entry.title == "Chicken and Rice"


def test_submit_invalid_image_deletes_skeleton(
    estimation_service, estimation_client, food_log_repository
) -> None:
    estimation_client.result = build_result(generated_title="Invalid Image")
    entry = build_entry(image_ref="https://cdn.example.com/cat.jpg")

    outcome = asyncio.run(estimation_service.submit(entry))

    assert outcome.invalid_image
    assert outcome.entry is None
    assert food_log_repository.entries == {}


def test_submit_failure_deletes_skeleton(
    estimation_service, estimation_client, food_log_repository
) -> None:
    estimation_client.error = EstimationError("service unavailable", status_code=503)

    with pytest.raises(EstimationError):
        asyncio.run(estimation_service.submit(build_entry(user_title="Soup")))

    assert food_log_repository.entries == {}
    assert food_log_repository.history[-1] == ("delete", "log-1")


def test_unexpected_client_error_is_wrapped(
    estimation_service, estimation_client
) -> None:
    estimation_client.error = RuntimeError("connection reset")

    with pytest.raises(EstimationError, match="connection reset"):
        asyncio.run(estimation_service.submit(build_entry(user_title="Soup")))


def test_text_estimate_lists_components(estimation_service, estimation_client) -> None:
    entry = build_entry(
        user_title="Breakfast",
        description="With butter",
        food_components=[FoodComponent(name="Toast", amount=60, unit=Unit.GRAM)],
    )

    asyncio.run(estimation_service.estimate(entry))

    title, description = estimation_client.text_calls[0]
    assert title == "Breakfast"
    assert description == "With butter\nComponents:\n- Toast: 60 g"


def test_reestimate_failure_restores_previous(
    estimation_service, estimation_client, food_log_repository
) -> None:
    previous = build_entry(
        title="Soup",
        generated_title="Soup",
        calories=300,
        estimation_confidence=70,
        state=EntryState.ESTIMATED,
    )
    food_log_repository.add(previous)
    estimation_client.error = EstimationError("timeout")

    with pytest.raises(EstimationError):
        asyncio.run(estimation_service.reestimate(previous))

    assert food_log_repository.get("log-1") == previous


def test_reestimate_invalid_image_restores_previous(
    estimation_service, estimation_client, food_log_repository
) -> None:
    previous = build_entry(
        title="Salad",
        calories=250,
        image_ref="https://cdn.example.com/salad.jpg",
        state=EntryState.ESTIMATED,
    )
    food_log_repository.add(previous)
    estimation_client.result = build_result(generated_title="Invalid Image")

    outcome = asyncio.run(estimation_service.reestimate(previous))

    assert outcome.invalid_image
    assert outcome.entry == previous
    assert food_log_repository.get("log-1") == previous


def test_reestimate_updates_entry(
    estimation_service, food_log_repository
) -> None:
    previous = build_entry(title="Soup", user_title="Soup", calories=300)
    food_log_repository.add(previous)

    outcome = asyncio.run(estimation_service.reestimate(previous))

    assert outcome.entry.calories == 500
    assert outcome.entry.title == "Soup"
    assert food_log_repository.get("log-1") == outcome.entry


def test_reestimate_session_applies_result(estimation_service) -> None:
    session = EditSession.open(build_entry(title="Soup", calories=300))
    session.update_title("Lentil soup")

    outcome = asyncio.run(estimation_service.reestimate_session(session))

    assert outcome.entry == session.edited_entry
    assert session.state is SessionState.REESTIMATED
    assert session.has_reestimated
    assert session.edited_entry.title == "Lentil soup"
    assert session.edited_entry.calories == 500


def test_reestimate_session_failure_keeps_edits(
    estimation_service, estimation_client
) -> None:
    session = EditSession.open(build_entry(title="Soup"))
    session.update_title("Lentil soup")
    estimation_client.error = EstimationError("timeout")

    with pytest.raises(EstimationError):
        asyncio.run(estimation_service.reestimate_session(session))

    assert session.is_dirty
    assert not session.awaiting_reestimate
    assert session.edited_entry.title == "Lentil soup"


def test_cleanup_incomplete_estimations(
    estimation_service, food_log_repository
) -> None:
    food_log_repository.add(build_entry(id="new", state=EntryState.ESTIMATING))
    food_log_repository.add(
        build_entry(
            id="rerun",
            generated_title="Pasta",
            state=EntryState.ESTIMATING,
        )
    )
    done = build_entry(id="done", generated_title="Salad", state=EntryState.ESTIMATED)
    food_log_repository.add(done)

    removed = estimation_service.cleanup_incomplete_estimations()

    assert removed == ["new"]
    rerun = food_log_repository.get("rerun")
    assert rerun.state is EntryState.ESTIMATED
    assert rerun.needs_user_review
    assert food_log_repository.get("done") == done
