"""Domain models for food log entries and their edits."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal

NEW_COMPONENT_INDEX = "new"


class Unit(Enum):
    """Measurement unit of a food component."""

    GRAM = "g"
    MILLILITER = "ml"
    PIECE = "piece"


class EntryState(Enum):
    """Lifecycle state of a persisted food log entry."""

    DRAFT = "draft"
    ESTIMATING = "estimating"
    ESTIMATED = "estimated"


class SessionState(Enum):
    """State of an edit session over one entry."""

    CLEAN = "clean"
    DIRTY = "dirty"
    AWAITING_REESTIMATE = "awaiting_reestimate"
    REESTIMATED = "reestimated"


class ComponentEditAction(Enum):
    """Action carried by a pending component edit."""

    SAVE = "save"
    DELETE = "delete"


@dataclass(frozen=True)
class Measurement:
    """Amount with a unit."""

    amount: float
    unit: Unit


@dataclass(frozen=True)
class FoodComponent:
    """Ingredient line of a food log entry."""

    name: str
    amount: float
    unit: Unit
    recommended_measurement: Measurement | None = None


@dataclass(frozen=True)
class FoodLogEntry:
    """A logged meal with resolved nutrition values and their provenance.

    ``calories``/``protein``/``carbs``/``fat`` and ``title`` hold the resolved
    values. The ``user_*`` fields hold what the user typed and the
    ``generated_title`` holds what the estimator produced.
    """

    id: str
    log_date: date
    created_at: datetime
    title: str = ""
    description: str | None = None
    food_components: list[FoodComponent] = field(default_factory=list)
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    user_title: str | None = None
    generated_title: str | None = None
    user_calories: float | None = None
    user_protein: float | None = None
    user_carbs: float | None = None
    user_fat: float | None = None
    estimation_confidence: int = 0
    state: EntryState = EntryState.DRAFT
    needs_user_review: bool = False
    image_ref: str | None = None
    local_image_ref: str | None = None

    @property
    def is_estimating(self) -> bool:
        return self.state is EntryState.ESTIMATING

    @property
    def has_all_user_values(self) -> bool:
        return None not in (
            self.user_calories,
            self.user_protein,
            self.user_carbs,
            self.user_fat,
        )


@dataclass(frozen=True)
class PendingComponentEdit:
    """One ingredient edit sent from an external editor to an edit session."""

    log_id: str
    index: int | Literal["new"]
    action: ComponentEditAction
    component: FoodComponent | None = None


@dataclass(frozen=True)
class InvalidImageSignal:
    """Returned when the estimator refused the input image."""

    entry_id: str
