from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from app.analysis.fields import (
    PERSONAL_FIELDS,
    VEHICLE_FIELDS,
    FieldName,
    FieldValues,
    empty_fields,
)


class ExtractionMethod(str, Enum):
    TEXT = "text"
    OCR = "ocr"
    VISION = "vision"
    NONE = "none"


class DivergencyKind(str, Enum):
    MISSING_FIELD = "missing_field"
    INCONSISTENT_DATA = "inconsistent_data"
    INVALID_FORMAT = "invalid_format"
    ANOMALY = "anomaly"


class BatchStatus(str, Enum):
    OK = "ok"
    DIVERGENCIES = "divergencies"
    ERROR = "error"


@dataclass(frozen=True)
class Document:
    """One PDF unpacked from the input archive."""

    file_name: str
    raw_bytes: bytes = field(repr=False)


@dataclass(frozen=True)
class ExtractionAttempt:
    """Outcome of the text layer / OCR cascade for one document."""

    method: ExtractionMethod
    text: str
    confidence: float

    @classmethod
    def empty(cls, confidence: float = 0.0) -> "ExtractionAttempt":
        return cls(method=ExtractionMethod.NONE, text="", confidence=confidence)


@dataclass(frozen=True)
class RenderedPage:
    """A rasterized PDF page. Pages under the byte floor never get built."""

    page_number: int
    image_bytes: bytes = field(repr=False)
    width_px: int
    height_px: int
    mime_type: str = "image/png"

    @property
    def size_bytes(self) -> int:
        return len(self.image_bytes)


@dataclass(frozen=True)
class PageExtraction:
    """Fields read by the vision model from one page, with per-field evidence."""

    page_number: int
    personal_fields: FieldValues = field(default_factory=lambda: empty_fields(PERSONAL_FIELDS))
    vehicle_fields: FieldValues = field(default_factory=lambda: empty_fields(VEHICLE_FIELDS))
    evidence: dict[FieldName, str] = field(default_factory=dict)
    raw_text: str = ""

    def value_of(self, name: FieldName) -> str | None:
        if name in self.personal_fields:
            return self.personal_fields[name]
        return self.vehicle_fields.get(name)

    def evidence_for(self, name: FieldName) -> str:
        return self.evidence.get(name, "")


@dataclass(frozen=True)
class ExtractedFields:
    """Personal and vehicle fields for one document, before record metadata."""

    personal_fields: FieldValues = field(default_factory=lambda: empty_fields(PERSONAL_FIELDS))
    vehicle_fields: FieldValues = field(default_factory=lambda: empty_fields(VEHICLE_FIELDS))


@dataclass(frozen=True)
class Record:
    """Final per-document result of the extraction pipeline."""

    file_name: str
    personal_fields: FieldValues
    vehicle_fields: FieldValues
    extraction_method: ExtractionMethod
    text_length: int
    confidence: float
    elapsed_ms: int = 0
    error: str | None = None

    @classmethod
    def failed(cls, file_name: str, error: str, elapsed_ms: int = 0) -> "Record":
        return cls(
            file_name=file_name,
            personal_fields=empty_fields(PERSONAL_FIELDS),
            vehicle_fields=empty_fields(VEHICLE_FIELDS),
            extraction_method=ExtractionMethod.NONE,
            text_length=0,
            confidence=0.0,
            elapsed_ms=elapsed_ms,
            error=error,
        )

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def has_data(self) -> bool:
        values = [*self.personal_fields.values(), *self.vehicle_fields.values()]
        return any(value is not None and value.strip() for value in values)

    def value_of(self, name: FieldName) -> str | None:
        if name in self.personal_fields:
            return self.personal_fields[name]
        return self.vehicle_fields.get(name)

    def to_payload(self) -> dict[str, object]:
        return {
            "fileName": self.file_name,
            "personalData": {name.value: value for name, value in self.personal_fields.items()},
            "vehicleData": {name.value: value for name, value in self.vehicle_fields.items()},
            "metadata": {
                "method": self.extraction_method.value,
                "textLength": self.text_length,
                "confidence": self.confidence,
                "elapsedMs": self.elapsed_ms,
            },
            "error": self.error,
        }


@dataclass(frozen=True)
class Divergency:
    """A field-level conflict between documents of one batch."""

    kind: DivergencyKind
    field: FieldName
    files: tuple[str, ...]
    values_by_file: dict[str, str]
    description: str

    def to_payload(self) -> dict[str, object]:
        return {
            "type": self.kind.value,
            "field": self.field.value,
            "files": list(self.files),
            "values": dict(self.values_by_file),
            "description": self.description,
        }


@dataclass(frozen=True)
class BatchReport:
    """User-visible result of analyzing one archive."""

    status: BatchStatus
    message: str
    records: list[Record] = field(default_factory=list)
    divergencies: list[Divergency] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def error(cls, message: str) -> "BatchReport":
        return cls(status=BatchStatus.ERROR, message=message)

    def to_payload(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "message": self.message,
            "records": [record.to_payload() for record in self.records],
            "divergencies": [divergency.to_payload() for divergency in self.divergencies],
            "timestamp": self.timestamp.isoformat(),
        }
