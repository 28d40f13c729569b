"""Models for nutrition estimation results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

INVALID_IMAGE_TITLE = "Invalid Image"


class EstimatedMeasurement(BaseModel):
    """Precision suggestion for a component measured in pieces."""

    amount: float
    unit: str


class EstimatedComponent(BaseModel):
    """Single ingredient line produced by the estimator."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    amount: float = 0
    unit: str = "piece"
    recommended_measurement: EstimatedMeasurement | None = Field(
        default=None, alias="recommendedMeasurement"
    )


class EstimationResult(BaseModel):
    """Structured output of a text or image estimation call."""

    model_config = ConfigDict(populate_by_name=True)

    generated_title: str = Field(alias="generatedTitle")
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    estimation_confidence: int = Field(
        default=0, ge=0, le=100, alias="estimationConfidence"
    )
    food_components: list[EstimatedComponent] = Field(
        default_factory=list, alias="foodComponents"
    )

    @property
    def is_invalid_image(self) -> bool:
        return self.generated_title == INVALID_IMAGE_TITLE


class ConfidenceLevel(Enum):
    """Presentation band of an estimation confidence."""

    UNCERTAIN = "uncertain"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
