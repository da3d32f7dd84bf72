"""Remote generation provider with OpenAI-compatible API integration.

Security: Credentials are passed per call by the credential pool and are
never logged or embedded in error messages.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI
from pydantic import SecretStr

from backend.app.llm.credentials import redact
from backend.app.llm.errors import ProviderError

logger = logging.getLogger(__name__)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling policy for every generation call."""

    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40
    max_output_tokens: int = 8192


DEFAULT_GENERATION_CONFIG = GenerationConfig()


class GenerationProvider(Protocol):
    """Protocol for remote text generation backends."""

    async def generate_content(
        self,
        prompt: str,
        credential: SecretStr,
        config: GenerationConfig,
    ) -> str:
        """Generate text for a prompt using one credential.

        Args:
            prompt: Complete prompt text
            credential: API credential for this attempt
            config: Sampling configuration

        Returns:
            Raw text produced by the model

        Raises:
            ProviderError: With the HTTP-like status of the failure, if known
        """
        ...


class OpenAICompatibleProvider:
    """Provider for any OpenAI-compatible chat completions endpoint."""

    def __init__(self, model: str, base_url: str | None = GEMINI_OPENAI_BASE_URL):
        """Initialize provider.

        Args:
            model: Model name sent with every request
            base_url: Endpoint root (None for api.openai.com)
        """
        self.model = model
        self.base_url = base_url

    async def generate_content(
        self,
        prompt: str,
        credential: SecretStr,
        config: GenerationConfig,
    ) -> str:
        """Generate text using a short-lived client bound to one credential."""
        # Retries are owned by the credential pool, not the SDK
        client = AsyncOpenAI(
            api_key=credential.get_secret_value(),
            base_url=self.base_url,
            max_retries=0,
        )
        try:
            async with client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=config.temperature,
                    top_p=config.top_p,
                    max_tokens=config.max_output_tokens,
                    extra_body={"top_k": config.top_k},
                )
        except APIStatusError as e:
            message = redact(str(e.message), credential)
            raise ProviderError(message, status_code=e.status_code) from e
        except APITimeoutError as e:
            raise ProviderError("Request timeout while waiting for the model") from e
        except APIConnectionError as e:
            raise ProviderError(redact(f"Connection error: {e}", credential)) from e

        if not response.choices:
            logger.warning("Provider returned no choices")
            return ""

        return response.choices[0].message.content or ""
