"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime

import pytest

from nutrition_engine.config import Settings
from nutrition_engine.containers import AppContainer
from nutrition_engine.domain.estimation import EstimationResult
from nutrition_engine.domain.food_logs import EntryState, FoodLogEntry
from nutrition_engine.services.estimation import (
    EstimationClient,
    EstimationService,
    FoodLogRepository,
)


def build_entry(**overrides: object) -> FoodLogEntry:
    """Build a food log entry with test defaults."""
    entry = FoodLogEntry(
        id="log-1",
        log_date=date(2026, 1, 15),
        created_at=datetime(2026, 1, 15, 12, 30, tzinfo=UTC),
    )
    return replace(entry, **overrides)


def build_result(**overrides: object) -> EstimationResult:
    """Build an estimation result with test defaults."""
    values: dict[str, object] = {
        "generated_title": "Chicken and Rice",
        "calories": 500,
        "protein": 30,
        "carbs": 60,
        "fat": 20,
        "estimation_confidence": 85,
    }
    values.update(overrides)
    return EstimationResult(**values)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimator returning a fixed result or raising an error."""

    result: EstimationResult = field(default_factory=build_result)
    error: Exception | None = None
    text_calls: list[tuple[str, str | None]] = field(default_factory=list)
    image_calls: list[tuple[str, str | None, str | None]] = field(
        default_factory=list
    )

    async def estimate_from_text(
        self, title: str, description: str | None = None
    ) -> EstimationResult:
        self.text_calls.append((title, description))
        if self.error is not None:
            raise self.error
        return self.result

    async def estimate_from_image(
        self,
        image_ref: str,
        title: str | None = None,
        description: str | None = None,
    ) -> EstimationResult:
        self.image_calls.append((image_ref, title, description))
        if self.error is not None:
            raise self.error
        return self.result


@dataclass
class InMemoryFoodLogRepository(FoodLogRepository):
    """In-memory food log repository for tests."""

    entries: dict[str, FoodLogEntry] = field(default_factory=dict)
    history: list[tuple[str, object]] = field(default_factory=list)

    def add(self, entry: FoodLogEntry) -> None:
        self.entries[entry.id] = entry
        self.history.append(("add", entry))

    def get(self, entry_id: str) -> FoodLogEntry | None:
        return self.entries.get(entry_id)

    def update(self, entry: FoodLogEntry) -> None:
        self.entries[entry.id] = entry
        self.history.append(("update", entry))

    def delete(self, entry_id: str) -> None:
        self.entries.pop(entry_id, None)
        self.history.append(("delete", entry_id))

    def list_estimating(self) -> list[FoodLogEntry]:
        return [
            entry
            for entry in self.entries.values()
            if entry.state is EntryState.ESTIMATING
        ]

    def list_by_date(self, log_date: date) -> list[FoodLogEntry]:
        entries = [e for e in self.entries.values() if e.log_date == log_date]
        return sorted(entries, key=lambda entry: entry.created_at)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        supabase_anon_key="anon-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def food_log_repository() -> InMemoryFoodLogRepository:
    return InMemoryFoodLogRepository()


@pytest.fixture
def estimation_service(
    estimation_client: FakeEstimationClient,
    food_log_repository: InMemoryFoodLogRepository,
) -> EstimationService:
    return EstimationService(client=estimation_client, repository=food_log_repository)


@pytest.fixture
def container(
    settings: Settings,
    estimation_client: FakeEstimationClient,
    food_log_repository: InMemoryFoodLogRepository,
    estimation_service: EstimationService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimation_client=estimation_client,
        food_log_repository=food_log_repository,
        estimation_service=estimation_service,
        close_resources=close_resources,
    )
