"""
OpenAI LLM Provider.
"""

from typing import Any

from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from pollinet_kb.core.message import ConversationMessage
from pollinet_kb.exceptions import ProviderError
from pollinet_kb.providers.base import LLMProvider, LLMResponse
from pollinet_kb.utils.logging import get_logger

logger = get_logger(__name__)


def create_openai_client(
    api_key: str | None = None,
    base_url: str | None = None,
    organization: str | None = None
) -> AsyncOpenAI:
    """Build an AsyncOpenAI client with SDK-level retries disabled."""
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        organization=organization,
        max_retries=0
    )


def to_provider_error(exc: APIError, action: str) -> ProviderError:
    """Translate an OpenAI SDK error into a ProviderError."""
    if isinstance(exc, APIStatusError):
        body = exc.response.text if exc.response is not None else exc.message
        return ProviderError(f"OpenAI {action} failed", status_code=exc.status_code, body=body)
    if isinstance(exc, APIConnectionError):
        return ProviderError(f"Failed to send {action} request: {exc}")
    return ProviderError(f"OpenAI {action} failed: {exc}")


class OpenAIProvider(LLMProvider):
    """
    LLM Provider for the OpenAI chat-completions API.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        client: AsyncOpenAI | None = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.organization = organization
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            self._client = create_openai_client(
                api_key=self.api_key,
                base_url=self.base_url,
                organization=self.organization
            )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
        **kwargs: Any
    ) -> LLMResponse:
        """Get a completion from OpenAI."""
        client = self._get_client()

        params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        params.update(kwargs)

        try:
            response = await client.chat.completions.create(**params)
        except APIError as e:
            raise to_provider_error(e, "chat completion") from e

        if not response.choices:
            raise ProviderError("No response from chat completion: empty choices")

        choice = response.choices[0]
        message = choice.message

        result = LLMResponse(
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0
            },
            finish_reason=choice.finish_reason or "stop"
        )

        if message is not None and message.content:
            result.message = ConversationMessage.assistant(message.content)

        logger.debug(
            "Chat completion finished (%s, %d tokens)",
            result.finish_reason,
            result.usage["total_tokens"]
        )
        return result
