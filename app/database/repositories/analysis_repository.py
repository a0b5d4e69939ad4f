from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.analysis.models import BatchReport
from app.database.connection import get_connection
from app.database.models import AnalysisPage, AnalysisRecord

_COLUMNS = "id, status, message, records, divergencies, analyzed_at, created_at"


def _to_record(row: dict[str, Any]) -> AnalysisRecord:
    return AnalysisRecord(
        id=row["id"],
        status=row["status"],
        message=row["message"],
        records=row["records"] or [],
        divergencies=row["divergencies"] or [],
        analyzed_at=row["analyzed_at"],
        created_at=row["created_at"],
    )


class AnalysisRepository:
    """Database operations for the analyses table."""

    def save(self, report: BatchReport) -> int:
        """Store a finalized batch report and return its id."""
        payload = report.to_payload()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO analyses (status, message, records, divergencies, analyzed_at)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        report.status.value,
                        report.message,
                        Jsonb(payload["records"]),
                        Jsonb(payload["divergencies"]),
                        report.timestamp,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT INTO analyses returned no id")
        return int(row[0])

    def find_by_id(self, analysis_id: int) -> AnalysisRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM analyses WHERE id = %s",
                    (analysis_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def list_recent(self, page: int = 1, limit: int = 20) -> AnalysisPage:
        """Newest-first listing. ``page`` is 1-based.

        Raises:
            ValueError: if page or limit is smaller than 1.
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT COUNT(*) AS total FROM analyses")
                count_row = cur.fetchone()
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM analyses
                    ORDER BY analyzed_at DESC, id DESC
                    LIMIT %s OFFSET %s
                    """,
                    (limit, (page - 1) * limit),
                )
                rows = cur.fetchall()

        total = int(count_row["total"]) if count_row else 0
        return AnalysisPage(
            items=[_to_record(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )
