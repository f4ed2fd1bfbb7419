"""Answer generation on top of a chat-completion provider."""

from typing import Optional, Sequence

from pollinet_kb.core.message import ConversationMessage
from pollinet_kb.exceptions import ProviderError, StoreError
from pollinet_kb.providers.base import LLMProvider
from pollinet_kb.utils.logging import get_logger

from .base import BaseVectorStore
from .prompts import DomainProfile, build_fallback_prompt, build_grounded_prompt

logger = get_logger(__name__)


class Generator:
    """Builds prompts and calls the chat-completion provider.

    Two modes share one message layout, ``[system, *history, user]``:

    - grounded: the system prompt carries the retrieved chunks and asks for
      the sentinel phrase when they do not contain the answer;
    - fallback: the system prompt carries the oldest ``max_fallback_chunks``
      chunks of the corpus and allows general domain knowledge.
    """

    def __init__(
        self,
        provider: LLMProvider,
        vectorstore: BaseVectorStore,
        model: str = "gpt-4o-mini",
        domain: Optional[DomainProfile] = None,
        max_conversation_history: int = 10,
        max_fallback_chunks: int = 30,
        grounded_temperature: float = 0.3,
        fallback_temperature: float = 0.7,
        max_tokens: int = 500,
    ):
        self.provider = provider
        self.vectorstore = vectorstore
        self.model = model
        self.domain = domain or DomainProfile()
        self.max_conversation_history = max_conversation_history
        self.max_fallback_chunks = max_fallback_chunks
        self.grounded_temperature = grounded_temperature
        self.fallback_temperature = fallback_temperature
        self.max_tokens = max_tokens

    def trim_history(
        self, history: Sequence[ConversationMessage]
    ) -> list[ConversationMessage]:
        """Keep the most recent ``max_conversation_history`` messages."""
        if self.max_conversation_history <= 0:
            return []
        return list(history[-self.max_conversation_history:])

    def build_messages(
        self,
        system_prompt: str,
        query: str,
        history: Sequence[ConversationMessage],
    ) -> list[dict[str, str]]:
        """Assemble ``[system, *trimmed history, user]`` in API format."""
        messages = [ConversationMessage.system(system_prompt)]
        messages.extend(self.trim_history(history))
        messages.append(ConversationMessage.user(query))
        return [message.to_api_format() for message in messages]

    async def _complete(self, messages: list[dict[str, str]], temperature: float) -> str:
        response = await self.provider.complete(
            messages,
            model=self.model,
            temperature=temperature,
            max_tokens=self.max_tokens,
        )

        if response.message is None:
            raise ProviderError("No response from chat completion: empty message")

        return response.message.content

    async def generate(
        self,
        query: str,
        chunks: list[str],
        history: Sequence[ConversationMessage] = (),
    ) -> str:
        """Answer strictly from the retrieved chunks.

        Returns the sentinel phrase when the chunks do not hold the answer.

        Raises:
            ProviderError: If the completion fails or is empty
        """
        logger.info(f"Generating grounded response from {len(chunks)} chunks")

        system_prompt = build_grounded_prompt(chunks, self.domain)
        messages = self.build_messages(system_prompt, query, history)
        answer = await self._complete(messages, self.grounded_temperature)

        logger.info("Response generated successfully")
        return answer

    async def generate_fallback(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
    ) -> str:
        """Answer from the whole (bounded) corpus or general domain knowledge.

        Returns the domain refusal sentence for unrelated questions.

        Raises:
            ProviderError: If the completion fails or is empty
        """
        logger.info(
            f"Generating fallback response with full {self.domain.name} knowledge base "
            f"(limit: {self.max_fallback_chunks})"
        )

        try:
            corpus = await self.vectorstore.list_recent(self.max_fallback_chunks)
        except StoreError as e:
            logger.warning(f"Could not load fallback context, continuing without it: {e}")
            corpus = []

        logger.info(f"Retrieved {len(corpus)} total chunks for context")

        system_prompt = build_fallback_prompt(corpus, self.domain)
        messages = self.build_messages(system_prompt, query, history)
        return await self._complete(messages, self.fallback_temperature)
