from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class JobRecord:
    """Represents a row from the ocr_jobs table."""

    id: int
    campaign_id: str
    owner_id: str
    provider: str
    status: str
    attempts: int
    filenames: list[str] = field(default_factory=list)
    prompt: str | None = None
    progress: float = 0.0
    record_count: int | None = None
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CredentialRecord:
    """Represents a row from the api_keys table. ``api_key`` is encrypted."""

    user_id: str
    provider: str
    api_key: str = field(repr=False)
    is_active: bool
