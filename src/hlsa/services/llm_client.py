"""LLM Client for chat completion servers.

Uses the OpenAI-compatible API (x.ai Grok by default) to obtain
qualitative judgments and follow-up questions.
"""
import httpx
import logging
from typing import Optional

from hlsa.config import get_settings

logger = logging.getLogger(__name__)


class LLMResponseError(ValueError):
    """Raised when the completion reply does not have the expected shape."""


class LLMClient:
    """Client for OpenAI-compatible chat completion servers."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize LLM client.

        Args:
            transport: Optional httpx transport (used by tests)
        """
        self.settings = get_settings()
        self._base_url = self.settings.llm_base_url.rstrip("/")
        self._model = self.settings.llm_model
        self._timeout = self.settings.llm_timeout
        self._transport = transport

        if not self.settings.llm_api_key:
            logger.warning("LLM_API_KEY is not set; qualitative judges will fall back to neutral scores")

        logger.info(f"LLM client initialized: url={self._base_url}, model={self._model}")

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self._timeout,
            transport=self._transport,
        )

    @property
    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.settings.llm_api_key}"}

    async def check_health(self) -> dict:
        """Check if LLM server is reachable.

        Returns:
            Dictionary with status and model info
        """
        async with self._client(timeout=5.0) as client:
            try:
                resp = await client.get(f"{self._base_url}/models", headers=self._headers)
                if resp.status_code == 200:
                    data = resp.json()
                    models = data.get("data", [])
                    return {
                        "status": "connected",
                        "models": [m.get("id") for m in models],
                    }
                return {"status": "error", "error": f"HTTP {resp.status_code}"}
            except httpx.ConnectError:
                return {
                    "status": "disconnected",
                    "error": f"Cannot connect to LLM server at {self._base_url}",
                }
            except Exception as e:
                return {"status": "error", "error": str(e)}

    async def complete(
        self,
        messages: list[dict],
        temperature: float = 0.3,
        max_tokens: int = 250,
    ) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages [{"role": "...", "content": "..."}]
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Content of the first reply message

        Raises:
            httpx.HTTPError: On transport or HTTP status errors
            LLMResponseError: If the reply has no message content
        """
        payload = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }

        async with self._client() as client:
            resp = await client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers=self._headers,
            )
            resp.raise_for_status()
            try:
                data = resp.json()
            except ValueError as e:
                raise LLMResponseError(f"Completion reply is not JSON: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMResponseError(f"Malformed completion reply: {e!r}") from e
        return content or ""

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def reset_llm_client() -> None:
    """Reset the LLM client singleton (useful for testing)."""
    global _llm_client
    _llm_client = None
