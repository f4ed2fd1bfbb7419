"""
Utility helpers: logging and configuration.
"""

from pollinet_kb.utils.config import KnowledgeBotConfig, load_config
from pollinet_kb.utils.logging import get_logger, set_log_level

__all__ = [
    "KnowledgeBotConfig",
    "load_config",
    "get_logger",
    "set_log_level",
]
