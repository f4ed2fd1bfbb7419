"""
Result types of knowledge-base synchronisation.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class SyncOutcome(str, Enum):
    """What happened to a single ingestion candidate."""
    ADDED = "added"
    SKIPPED = "skipped"


class SyncResult(BaseModel):
    """Summary of one sync run."""
    model_config = ConfigDict(frozen=True)

    added: int
    skipped: int
    last_sync: datetime
