"""
Per-channel conversation history.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import Hashable

from pollinet_kb.core.message import ConversationMessage
from pollinet_kb.utils.logging import get_logger

logger = get_logger(__name__)


class ConversationManager:
    """
    Bounded conversation history for many chat channels.

    Each channel keeps at most ``max_history`` messages, oldest dropped
    first. At most ``max_channels`` channels are kept; the least recently
    used one is evicted when a new channel would exceed the bound.
    """

    def __init__(self, max_history: int = 10, max_channels: int = 1000):
        if max_history < 0:
            raise ValueError("max_history must be non-negative")
        if max_channels < 1:
            raise ValueError("max_channels must be at least 1")
        self.max_history = max_history
        self.max_channels = max_channels
        self._channels: OrderedDict[Hashable, list[ConversationMessage]] = OrderedDict()
        self._lock = asyncio.Lock()

    async def add_message(self, channel_id: Hashable, message: ConversationMessage) -> None:
        """Append a message to a channel's history, trimming to ``max_history``."""
        async with self._lock:
            history = self._channels.get(channel_id)
            if history is None:
                history = []
                self._channels[channel_id] = history
            self._channels.move_to_end(channel_id)

            history.append(message)
            if len(history) > self.max_history:
                del history[: len(history) - self.max_history]

            while len(self._channels) > self.max_channels:
                evicted, _ = self._channels.popitem(last=False)
                logger.debug(f"Evicted conversation history for channel {evicted}")

    async def add_user_message(self, channel_id: Hashable, content: str) -> None:
        await self.add_message(channel_id, ConversationMessage.user(content))

    async def add_assistant_message(self, channel_id: Hashable, content: str) -> None:
        await self.add_message(channel_id, ConversationMessage.assistant(content))

    async def get_history(self, channel_id: Hashable) -> list[ConversationMessage]:
        """Get a copy of a channel's history, oldest first."""
        async with self._lock:
            history = self._channels.get(channel_id)
            if history is None:
                return []
            self._channels.move_to_end(channel_id)
            return list(history)

    async def clear_history(self, channel_id: Hashable) -> None:
        """Forget a channel's history."""
        async with self._lock:
            self._channels.pop(channel_id, None)

    def __len__(self) -> int:
        return len(self._channels)
