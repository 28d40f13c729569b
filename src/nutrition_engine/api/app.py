"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request

from nutrition_engine.api.models import (
    CalculateTargetsResponse,
    CreateFoodLogRequest,
    DailySummaryRequest,
    DailySummaryResponse,
    DeriveTargetsRequest,
    DeriveTargetsResponse,
    FoodLogEnvelope,
    FoodLogResponse,
    MacroTotalsPayload,
    ProfileRequest,
    TargetsPayload,
)
from nutrition_engine.app_logging import configure_logging
from nutrition_engine.containers import AppContainer
from nutrition_engine.domain.food_logs import FoodLogEntry
from nutrition_engine.domain.targets import DerivationContext, UserNutritionProfile
from nutrition_engine.errors import EstimationError
from nutrition_engine.services.daily_totals import daily_totals
from nutrition_engine.services.estimation import EstimationOutcome
from nutrition_engine.services.macros import max_fat_percentage
from nutrition_engine.services.reconciliation import confidence_level
from nutrition_engine.services.targets import (
    calculate_calorie_goals,
    calculate_daily_targets,
    derive_with_outcome,
)
from nutrition_engine.services.validation import merge_user_values


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    default_fat_percentage = container.settings.default_fat_percentage

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.estimation_service.cleanup_incomplete_estimations()
        except Exception:
            logger.exception("Failed to clean up incomplete estimations")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/targets/derive")
    async def derive_targets(payload: DeriveTargetsRequest) -> DeriveTargetsResponse:
        """Apply one target change and return the cascaded targets."""
        fat_percentage = (
            payload.fat_percentage
            if payload.fat_percentage is not None
            else default_fat_percentage
        )
        outcome = derive_with_outcome(
            payload.current.to_domain(),
            payload.changed_field,
            payload.value,
            DerivationContext(fat_percentage=fat_percentage),
        )
        return DeriveTargetsResponse(
            targets=TargetsPayload.from_domain(outcome.targets),
            fat_percentage=outcome.fat_percentage,
            max_fat_percentage=max_fat_percentage(
                outcome.targets.calories, outcome.targets.protein_g
            ),
            over_budget=outcome.over_budget,
        )

    @app.post("/targets/calculate")
    async def calculate_targets(payload: ProfileRequest) -> CalculateTargetsResponse:
        """Calculate targets from a user profile."""
        profile = UserNutritionProfile(
            sex=payload.sex,
            age=payload.age,
            weight_kg=payload.weight_kg,
            height_cm=payload.height_cm,
            activity_level=payload.activity_level,
            goal_type=payload.goal_type,
            fat_percentage=(
                payload.fat_percentage
                if payload.fat_percentage is not None
                else default_fat_percentage
            ),
            protein_per_kg=payload.protein_per_kg,
        )
        goals = calculate_calorie_goals(profile)
        return CalculateTargetsResponse(
            targets=TargetsPayload.from_domain(calculate_daily_targets(profile)),
            lose=goals.lose,
            maintain=goals.maintain,
            gain=goals.gain,
        )

    @app.post("/food-logs")
    async def create_food_log(
        payload: CreateFoodLogRequest, request: Request
    ) -> FoodLogEnvelope:
        """Store a food log, estimating any values the user left blank."""
        state_container: AppContainer = request.app.state.container
        user_input = merge_user_values(
            payload.calories, payload.protein, payload.carbs, payload.fat
        )
        if not user_input.is_valid:
            raise HTTPException(status_code=422, detail=user_input.errors)
        title = (payload.title or "").strip()
        if user_input.needs_estimation and not (
            title or payload.description or payload.image_ref
        ):
            raise HTTPException(
                status_code=422,
                detail=["A title, description or image is required"],
            )
        entry = FoodLogEntry(
            id=str(uuid4()),
            log_date=payload.log_date or date.today(),
            created_at=datetime.now(tz=UTC),
            title=title,
            description=payload.description,
            user_title=title or None,
            user_calories=user_input.calories,
            user_protein=user_input.protein,
            user_carbs=user_input.carbs,
            user_fat=user_input.fat,
            image_ref=payload.image_ref,
            local_image_ref=payload.local_image_ref,
        )
        try:
            outcome = await state_container.estimation_service.submit(entry)
        except EstimationError as exc:
            logger.warning("Food log estimation failed: %s", exc)
            raise HTTPException(status_code=502, detail="Estimation failed") from exc
        return _envelope(outcome)

    @app.get("/food-logs/{entry_id}")
    async def get_food_log(entry_id: str, request: Request) -> FoodLogResponse:
        """Return a stored food log."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.food_log_repository.get(entry_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Food log not found")
        return _to_response(entry)

    @app.post("/daily-summary")
    async def daily_summary(
        payload: DailySummaryRequest, request: Request
    ) -> DailySummaryResponse:
        """Sum the food logs of a day against optional targets."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.food_log_repository.list_by_date(payload.log_date)
        summary = daily_totals(
            entries, payload.targets.to_domain() if payload.targets else None
        )
        return DailySummaryResponse(
            log_date=payload.log_date,
            entry_count=len(entries),
            totals=MacroTotalsPayload.from_domain(summary.totals),
            targets=payload.targets,
            progress=(
                MacroTotalsPayload.from_domain(summary.progress)
                if summary.progress
                else None
            ),
            remaining=(
                MacroTotalsPayload.from_domain(summary.remaining)
                if summary.remaining
                else None
            ),
        )

    @app.post("/food-logs/{entry_id}/reestimate")
    async def reestimate_food_log(entry_id: str, request: Request) -> FoodLogEnvelope:
        """Re-run the estimation for a stored food log."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.food_log_repository.get(entry_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Food log not found")
        try:
            outcome = await state_container.estimation_service.reestimate(entry)
        except EstimationError as exc:
            logger.warning("Re-estimation failed for %s: %s", entry_id, exc)
            raise HTTPException(status_code=502, detail="Estimation failed") from exc
        return _envelope(outcome)

    return app


def _envelope(outcome: EstimationOutcome) -> FoodLogEnvelope:
    if outcome.invalid_image:
        return FoodLogEnvelope(
            status="invalid_image",
            entry=_to_response(outcome.entry) if outcome.entry else None,
        )
    return FoodLogEnvelope(
        status="ok",
        entry=_to_response(outcome.entry) if outcome.entry else None,
    )


def _to_response(entry: FoodLogEntry) -> FoodLogResponse:
    return FoodLogResponse.from_entry(
        entry, confidence_level(entry.estimation_confidence).value
    )
