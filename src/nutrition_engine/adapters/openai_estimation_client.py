"""OpenAI Responses API client for nutrition estimation."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI
from pydantic import ValidationError

from nutrition_engine.domain.estimation import INVALID_IMAGE_TITLE, EstimationResult
from nutrition_engine.errors import EstimationError
from nutrition_engine.services.estimation import EstimationClient

ESTIMATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "generatedTitle": {"type": "string"},
        "estimationConfidence": {"type": "integer", "minimum": 0, "maximum": 100},
        "calories": {"type": "integer", "minimum": 0},
        "protein": {"type": "integer", "minimum": 0},
        "carbs": {"type": "integer", "minimum": 0},
        "fat": {"type": "integer", "minimum": 0},
        "foodComponents": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "number", "minimum": 0},
                    "unit": {"type": "string", "enum": ["g", "ml", "piece"]},
                    "recommendedMeasurement": {
                        "anyOf": [
                            {
                                "type": "object",
                                "properties": {
                                    "amount": {"type": "number"},
                                    "unit": {"type": "string", "enum": ["g", "ml"]},
                                },
                                "required": ["amount", "unit"],
                                "additionalProperties": False,
                            },
                            {"type": "null"},
                        ]
                    },
                },
                "required": ["name", "amount", "unit", "recommendedMeasurement"],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "generatedTitle",
        "estimationConfidence",
        "calories",
        "protein",
        "carbs",
        "fat",
        "foodComponents",
    ],
    "additionalProperties": False,
}

TEXT_PROMPT = (
    "You are a meticulous nutrition expert. Estimate calories, protein, carbs "
    "and fat in whole integers for the entire meal described below, decompose it "
    "into components, and rate your confidence from 1 to 100. If you use "
    "'piece' for a component, also give a recommended measurement in g or ml."
)

IMAGE_PROMPT = (
    "You are a meticulous nutrition expert. First check that the image shows "
    "food. If it does not, return generatedTitle "
    f"'{INVALID_IMAGE_TITLE}' with every number set to 0. Otherwise estimate "
    "calories, protein, carbs and fat for everything visible, decompose the meal "
    "into components, and rate your confidence from 1 to 100 based on how well "
    "portions can be judged."
)


@dataclass
class OpenAIEstimationClient(EstimationClient):
    """Estimation client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIEstimationClient":
        """Create an OpenAI estimation client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def estimate_from_text(
        self, title: str, description: str | None = None
    ) -> EstimationResult:
        """Estimate a meal from its title and description."""
        content: list[dict[str, object]] = [
            {"type": "input_text", "text": _meal_text(title, description)}
        ]
        return await self._create(TEXT_PROMPT, content)

    async def estimate_from_image(
        self,
        image_ref: str,
        title: str | None = None,
        description: str | None = None,
    ) -> EstimationResult:
        """Estimate a meal from an image URL or data URL."""
        content: list[dict[str, object]] = [
            {"type": "input_image", "image_url": image_ref}
        ]
        if title or description:
            content.insert(
                0, {"type": "input_text", "text": _meal_text(title, description)}
            )
        return await self._create(IMAGE_PROMPT, content)

    async def _create(
        self, instructions: str, content: list[dict[str, object]]
    ) -> EstimationResult:
        try:
            response = await self.client.responses.create(
                model=self.model,
                instructions=instructions,
                input=[{"role": "user", "content": content}],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "nutrition_estimate",
                        "strict": True,
                        "schema": ESTIMATION_SCHEMA,
                    }
                },
            )
        except Exception as exc:
            raise EstimationError(f"OpenAI request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise EstimationError("OpenAI returned an empty response")
        try:
            return EstimationResult.model_validate(json.loads(output_text))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise EstimationError("OpenAI returned malformed data") from exc


def _meal_text(title: str | None, description: str | None) -> str:
    parts = [part for part in (title, description) if part]
    return "\n".join(parts)
