"""
Conversation memory owned by chat front-ends.

The RAG pipeline only reads history; appending and bounding it is done here.
"""

from pollinet_kb.memory.conversation import ConversationManager

__all__ = [
    "ConversationManager",
]
