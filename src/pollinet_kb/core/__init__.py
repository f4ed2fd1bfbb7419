"""
Core message types.
"""

from pollinet_kb.core.message import ConversationMessage, Role

__all__ = ["ConversationMessage", "Role"]
