"""
Configuration utilities.

Settings come from environment variables (and a local ``.env`` file),
optionally overlaid with values from a YAML or JSON file.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pollinet_kb.exceptions import ConfigurationError


class KnowledgeBotConfig(BaseSettings):
    """Configuration for the knowledge bot RAG core."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials (required)
    openai_api_key: SecretStr
    database_url: SecretStr

    # OpenAI
    openai_base_url: str | None = None
    embedding_model: str = "text-embedding-ada-002"
    embedding_dimension: int = Field(default=1536, gt=0)
    gpt_model: str = "gpt-4o-mini"
    grounded_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    fallback_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, gt=0)

    # Vector store
    embeddings_table: str = "document_embeddings"
    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=10, ge=0)

    # Retrieval and chunking
    top_k_chunks: int = Field(default=5, ge=1)
    max_fallback_chunks: int = Field(default=30, ge=1)
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    # Conversation memory
    max_conversation_history: int = Field(default=10, ge=0)
    max_channels: int = Field(default=1000, ge=1)

    # Knowledge domain
    domain_name: str = "Pollinet"
    domain_description: str = (
        "a decentralized SDK enabling offline Solana transactions "
        "via Bluetooth Low Energy (BLE) mesh networks"
    )
    related_topics: list[str] = ["blockchain", "Solana", "Web3"]

    # Twitter sync
    twitter_bearer_token: SecretStr | None = None
    twitter_username: str = "sol_pollinet"

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> "KnowledgeBotConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "KnowledgeBotConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "KnowledgeBotConfig":
        """Load configuration from file (YAML or JSON)."""
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        elif path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls(**data)
        else:
            raise ConfigurationError(f"Unsupported config file format: {path.suffix}")


def _describe(error: ValidationError) -> str:
    problems: list[str] = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "config"
        if item["type"] == "missing":
            problems.append(f"{field} must be set")
        else:
            problems.append(f"{field}: {item['msg']}")
    return "; ".join(problems)


def load_config(path: str | Path | None = None, **overrides: Any) -> KnowledgeBotConfig:
    """
    Load the knowledge bot configuration.

    Args:
        path: Optional YAML/JSON file whose values take precedence over the environment
        **overrides: Explicit values that take precedence over everything else

    Returns:
        KnowledgeBotConfig instance

    Raises:
        ConfigurationError: If a required credential is missing or a value is invalid
    """
    try:
        if path is not None and Path(path).exists():
            config = KnowledgeBotConfig.from_file(path)
            if overrides:
                config = KnowledgeBotConfig(**{
                    **config.model_dump(exclude_unset=True),
                    **overrides,
                })
            return config
        return KnowledgeBotConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(_describe(e)) from e
