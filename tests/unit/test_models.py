"""Tests for analysis report models and their stored payloads."""

from datetime import datetime, timezone

from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS, FieldName, empty_fields
from app.analysis.models import (
    BatchReport,
    BatchStatus,
    Divergency,
    DivergencyKind,
    ExtractionMethod,
    Record,
)
from app.database.models import AnalysisPage


def _record() -> Record:
    vehicle = empty_fields(VEHICLE_FIELDS)
    vehicle[FieldName.PLACA] = "ABC1234"
    return Record(
        file_name="apolice.pdf",
        personal_fields=empty_fields(PERSONAL_FIELDS),
        vehicle_fields=vehicle,
        extraction_method=ExtractionMethod.OCR,
        text_length=512,
        confidence=91.5,
        elapsed_ms=830,
    )


class TestRecord:
    def test_payload_shape(self) -> None:
        payload = _record().to_payload()

        assert payload["fileName"] == "apolice.pdf"
        assert payload["vehicleData"]["placa"] == "ABC1234"
        assert payload["personalData"]["nome"] is None
        assert payload["metadata"] == {
            "method": "ocr",
            "textLength": 512,
            "confidence": 91.5,
            "elapsedMs": 830,
        }
        assert payload["error"] is None

    def test_failed_record_has_no_data(self) -> None:
        record = Record.failed("blank.pdf", "No valid pages were rendered from PDF")

        assert not record.succeeded
        assert not record.has_data
        assert record.extraction_method is ExtractionMethod.NONE

    def test_whitespace_values_are_not_data(self) -> None:
        vehicle = empty_fields(VEHICLE_FIELDS)
        vehicle[FieldName.MARCA] = "   "
        record = Record(
            file_name="a.pdf",
            personal_fields=empty_fields(PERSONAL_FIELDS),
            vehicle_fields=vehicle,
            extraction_method=ExtractionMethod.TEXT,
            text_length=60,
            confidence=100.0,
        )

        assert not record.has_data


class TestBatchReport:
    def test_payload_shape(self) -> None:
        divergency = Divergency(
            kind=DivergencyKind.INCONSISTENT_DATA,
            field=FieldName.PLACA,
            files=("a.pdf", "b.pdf"),
            values_by_file={"a.pdf": "ABC1234", "b.pdf": "XYZ9999"},
            description="placa differs",
        )
        report = BatchReport(
            status=BatchStatus.DIVERGENCIES,
            message="Documents analyzed: 2. Divergencies found: 1.",
            records=[_record()],
            divergencies=[divergency],
            timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )

        payload = report.to_payload()

        assert payload["status"] == "divergencies"
        assert payload["timestamp"] == "2026-03-01T00:00:00+00:00"
        assert payload["divergencies"] == [
            {
                "type": "inconsistent_data",
                "field": "placa",
                "files": ["a.pdf", "b.pdf"],
                "values": {"a.pdf": "ABC1234", "b.pdf": "XYZ9999"},
                "description": "placa differs",
            }
        ]

    def test_error_report_is_empty(self) -> None:
        report = BatchReport.error("No PDF files found in the archive")

        assert report.status is BatchStatus.ERROR
        assert report.records == []
        assert report.divergencies == []


class TestAnalysisPage:
    def test_page_count_rounds_up(self) -> None:
        assert AnalysisPage(items=[], total=41, page=1, limit=20).pages == 3
        assert AnalysisPage(items=[], total=0, page=1, limit=20).pages == 0
