from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.analysis.models import BatchReport


@dataclass(slots=True)
class PipelineContext:
    archive_uuid: str
    job_id: int
    archive_bytes: bytes = b""
    report: BatchReport | None = None
    analysis_id: int | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
