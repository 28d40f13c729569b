"""Estimation client backed by Supabase edge functions."""

from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from nutrition_engine.domain.estimation import EstimationResult
from nutrition_engine.errors import EstimationError
from nutrition_engine.services.estimation import EstimationClient


@dataclass
class SupabaseEstimationClient(EstimationClient):
    """HTTPX client for the text and image estimation functions."""

    base_url: str
    api_key: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30

    @classmethod
    def create(
        cls, base_url: str, api_key: str, timeout_seconds: float = 30
    ) -> "SupabaseEstimationClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def estimate_from_text(
        self, title: str, description: str | None = None
    ) -> EstimationResult:
        """Call the text estimation function."""
        return await self._invoke(
            "text-estimation", {"title": title, "description": description}
        )

    async def estimate_from_image(
        self,
        image_ref: str,
        title: str | None = None,
        description: str | None = None,
    ) -> EstimationResult:
        """Call the image estimation function."""
        return await self._invoke(
            "image-estimation",
            {"imageUrl": image_ref, "title": title, "description": description},
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _invoke(
        self, function: str, payload: dict[str, object]
    ) -> EstimationResult:
        url = f"{self.base_url.rstrip('/')}/functions/v1/{function}"
        try:
            response = await self.http_client.post(
                url,
                json={key: value for key, value in payload.items() if value},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "apikey": self.api_key,
                },
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise EstimationError(f"{function} request failed: {exc}") from exc
        if response.is_error:
            raise EstimationError(
                f"{function} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            raise EstimationError(
                f"{function} error: {data['error']}",
                status_code=response.status_code,
            )
        try:
            return EstimationResult.model_validate(data)
        except ValidationError as exc:
            raise EstimationError(f"{function} returned malformed data") from exc
