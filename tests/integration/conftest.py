import os
import uuid
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.models import JobRecord

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "sql" / "schema.sql"


def _test_settings() -> Settings:
    saved = os.environ.copy()
    try:
        os.environ.setdefault("DB_DATABASE", "docvalidator_test")
        os.environ.setdefault("EXTRACTION_PROVIDER", "example")
        os.environ.setdefault("DIVERGENCY_ENGINE", "rules")
        return Settings()
    finally:
        os.environ.clear()
        os.environ.update(saved)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(
            host=test_settings.db_host,
            port=test_settings.db_port,
            dbname=test_settings.db_database,
            user=test_settings.db_username,
            password=test_settings.db_password,
            connect_timeout=3,
        ) as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "analysis_jobs":
                    cur.execute("DELETE FROM analysis_jobs WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "analyses":
                    cur.execute("DELETE FROM analyses WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def insert_job(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
) -> Callable[..., JobRecord]:
    def insert(attempts: int = 0, archive_uuid: str | None = None) -> JobRecord:
        archive_uuid = archive_uuid or str(uuid.uuid4())
        with db_conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO analysis_jobs (archive_uuid, status, attempts)
                VALUES (%s::uuid, 'pending', %s)
                RETURNING id
                """,
                (archive_uuid, attempts),
            )
            row = cur.fetchone()
            assert row is not None
        db_conn.commit()
        integration_cleanup.append(("analysis_jobs", row["id"]))
        return JobRecord(
            id=row["id"],
            archive_uuid=archive_uuid,
            status="pending",
            attempts=attempts,
        )

    return insert


@pytest.fixture
def seed_job(insert_job: Callable[..., JobRecord]) -> JobRecord:
    return insert_job()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def archive_on_disk(
    seed_job: JobRecord,
    files_root: Path,
    make_zip: Callable[[dict[str, bytes]], bytes],
    policy_pdf_bytes: bytes,
) -> tuple[JobRecord, Path]:
    path = files_root / f"{seed_job.archive_uuid}.zip"
    path.write_bytes(
        make_zip({"apolice.pdf": policy_pdf_bytes, "proposta.pdf": policy_pdf_bytes})
    )
    return seed_job, files_root
