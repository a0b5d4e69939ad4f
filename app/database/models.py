import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class JobRecord:
    """Represents a row from the analysis_jobs table."""

    id: int
    archive_uuid: str
    status: str
    attempts: int
    error_message: str | None = None
    analysis_id: int | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class AnalysisRecord:
    """Represents a row from the analyses table."""

    id: int
    status: str
    message: str
    records: list[dict[str, Any]] = field(default_factory=list)
    divergencies: list[dict[str, Any]] = field(default_factory=list)
    analyzed_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class AnalysisPage:
    """One page of the newest-first analyses listing."""

    items: list[AnalysisRecord]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
