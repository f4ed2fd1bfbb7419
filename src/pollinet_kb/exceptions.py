"""
Knowledge bot exceptions.
"""


class KnowledgeBotError(Exception):
    """Base exception for knowledge bot errors."""

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ProviderError(KnowledgeBotError):
    """Raised when an embedding or chat-completion call fails or returns malformed data."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None
    ):
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message} (status {status_code})"
        if body:
            message = f"{message}: {body}"
        super().__init__(message, code=status_code)


class StoreError(KnowledgeBotError):
    """Raised when the vector store cannot be initialized, read or written."""

    def __init__(self, message: str):
        super().__init__(f"Vector store error: {message}")


class ConfigurationError(KnowledgeBotError):
    """Raised when a required credential or setting is missing or invalid."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")
