"""Exceptions raised by the nutrition engine."""


class NutritionEngineError(Exception):
    """Base class for engine errors."""


class EstimationError(NutritionEngineError):
    """The estimation collaborator failed (transport or model error)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionClosedError(NutritionEngineError):
    """An edit session was used after commit or discard."""
