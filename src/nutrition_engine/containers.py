"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_engine.adapters.openai_estimation_client import OpenAIEstimationClient
from nutrition_engine.adapters.supabase_estimation_client import (
    SupabaseEstimationClient,
)
from nutrition_engine.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from nutrition_engine.config import ESTIMATION_BACKENDS, Settings
from nutrition_engine.services.estimation import (
    EstimationClient,
    EstimationService,
    FoodLogRepository,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    estimation_client: EstimationClient
    food_log_repository: FoodLogRepository
    estimation_service: EstimationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if resolved_settings.estimation_backend not in ESTIMATION_BACKENDS:
        raise ValueError(
            f"Unknown estimation backend: {resolved_settings.estimation_backend}"
        )
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_log_repository = SupabaseFoodLogRepository(supabase_client)

    if resolved_settings.estimation_backend == "openai":
        if not resolved_settings.openai_api_key:
            raise ValueError("openai_api_key is required for the openai backend")
        openai_client = OpenAIEstimationClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
        )
        estimation_client: EstimationClient = openai_client

        async def close_resources() -> None:
            await openai_client.client.close()

    else:
        supabase_estimation_client = SupabaseEstimationClient.create(
            base_url=resolved_settings.supabase_url,
            api_key=resolved_settings.supabase_anon_key,
            timeout_seconds=resolved_settings.estimation_timeout_seconds,
        )
        estimation_client = supabase_estimation_client

        async def close_resources() -> None:
            await supabase_estimation_client.close()

    estimation_service = EstimationService(
        client=estimation_client,
        repository=food_log_repository,
    )
    return AppContainer(
        settings=resolved_settings,
        estimation_client=estimation_client,
        food_log_repository=food_log_repository,
        estimation_service=estimation_service,
        close_resources=close_resources,
    )
