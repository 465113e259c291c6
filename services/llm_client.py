import logging
from typing import Any, Dict, Optional

import httpx

from core.exceptions import EstimatorUnavailable, MalformedEstimatorOutput

logger = logging.getLogger(__name__)


class LLMClient:
    """
    OpenAI-compatible chat completion client.

    Posts a single user message to ``{base_url}/chat/completions`` and returns
    the text content of the first choice. A missing API key is only reported
    when a request is attempted, so the application can boot without one.
    """

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 60.0,
    ):
        self.model_name = model_name
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.http_client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Closes the underlying HTTP client to release resources."""
        await self.http_client.aclose()

    async def complete(self, prompt: str, temperature: float = 0.7) -> str:
        if not self.api_key:
            raise EstimatorUnavailable("No API key configured for the LLM client")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }

        try:
            logger.debug(f"Calling {self.base_url} with model {self.model_name}")
            response = await self.http_client.post(
                "/chat/completions", headers=headers, json=payload
            )
            response.raise_for_status()
            response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error from LLM API: {e.response.status_code} - {e.response.text}"
            )
            raise EstimatorUnavailable(
                f"LLM API returned an HTTP error: {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error connecting to LLM API: {e}")
            raise EstimatorUnavailable(f"Network error connecting to LLM API: {e}") from e
        except ValueError as e:
            raise MalformedEstimatorOutput(f"LLM API returned a non-JSON body: {e}") from e

        choices = response_data.get("choices") if isinstance(response_data, dict) else None
        if not choices or not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise MalformedEstimatorOutput(f"Response missing 'choices' list: {response_data}")

        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise MalformedEstimatorOutput(f"Response missing message content: {response_data}")

        return content
