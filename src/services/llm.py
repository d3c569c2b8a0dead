"""LLM services for recipe text generation (Ollama or Anthropic)."""

import logging

import anthropic
import httpx

from src.config import Settings, get_settings
from src.services.exceptions import LLMRequestError

logger = logging.getLogger(__name__)


class LLMService:
    """Service for interacting with Ollama LLM."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.base_url = self.settings.ollama_base_url
        self.model = self.settings.llm_model
        self.timeout = self.settings.llm_timeout_seconds

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a response from the LLM."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json={
                        "model": self.model,
                        "messages": messages,
                        "stream": False,
                        "options": {
                            "temperature": temperature,
                            "num_predict": max_tokens,
                        },
                    },
                )
                response.raise_for_status()
                data = response.json()
                return data["message"]["content"]
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Ollama: {e}")
            raise LLMRequestError(f"Ollama request failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Ollama response shape: {e}")
            raise LLMRequestError("Ollama returned an unexpected response") from e


class AnthropicLLMService:
    """Text generation through the Anthropic Messages API, same interface as LLMService."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.model = self.settings.anthropic_text_model
        self.timeout = self.settings.llm_timeout_seconds
        self._client = client

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.settings.anthropic_api_key:
                raise LLMRequestError("Anthropic API not configured")
            self._client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.timeout,
                max_retries=1,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a response from Claude."""
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            message = await self._get_client().messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except anthropic.APIError as e:
            logger.error(f"Error calling Anthropic: {e}")
            raise LLMRequestError(f"Anthropic request failed: {e}") from e

        return "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )


def get_llm_service(settings: Settings | None = None) -> LLMService | AnthropicLLMService:
    """Get the text LLM service selected by LLM_PROVIDER."""
    settings = settings or get_settings()
    if settings.llm_provider == "anthropic":
        return AnthropicLLMService(settings)
    return LLMService(settings)
