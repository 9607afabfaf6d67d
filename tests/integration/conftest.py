import os
import uuid
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from cryptography.fernet import Fernet
from psycopg.rows import dict_row

from app.config.settings import Settings
from app.credentials.cipher import CredentialCipher
from app.database.connection import close_pool, get_connection, init_pool
from app.database.models import JobRecord

# The web application owns these tables; the statements mirror the columns
# the worker reads and writes so a blank test database can be used.
_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS ocr_jobs (
        id BIGSERIAL PRIMARY KEY,
        campaign_id TEXT NOT NULL,
        owner_id TEXT NOT NULL,
        provider TEXT NOT NULL,
        filenames TEXT[] NOT NULL DEFAULT '{}',
        prompt TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        attempts INTEGER NOT NULL DEFAULT 0,
        progress DOUBLE PRECISION NOT NULL DEFAULT 0,
        current_chunk INTEGER,
        total_chunks INTEGER,
        record_count INTEGER,
        error_message TEXT,
        locked_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS registration_data (
        id BIGSERIAL PRIMARY KEY,
        campaign_id TEXT NOT NULL,
        name TEXT,
        address TEXT,
        date TEXT,
        ward TEXT,
        page_number INTEGER NOT NULL,
        row_number INTEGER NOT NULL,
        filename TEXT NOT NULL,
        extra JSONB NOT NULL DEFAULT '{}'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_keys (
        user_id TEXT NOT NULL,
        provider TEXT NOT NULL,
        api_key TEXT NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        PRIMARY KEY (user_id, provider)
    )
    """,
)


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "petitions_test")
    return Settings(credential_encryption_key=Fernet.generate_key().decode())


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def campaign_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh campaign key; every row written under it is removed afterwards."""
    key = f"campaign-{uuid.uuid4()}"
    yield key
    with get_connection() as conn:
        conn.execute("DELETE FROM ocr_jobs WHERE campaign_id = %s", (key,))
        conn.execute("DELETE FROM registration_data WHERE campaign_id = %s", (key,))
        conn.commit()


@pytest.fixture
def owner_id(integration_pool: None) -> Generator[str, None, None]:
    key = f"owner-{uuid.uuid4()}"
    yield key
    with get_connection() as conn:
        conn.execute("DELETE FROM api_keys WHERE user_id = %s", (key,))
        conn.commit()


def _insert_job(
    conn: psycopg.Connection[Any],
    campaign_id: str,
    owner_id: str,
    *,
    provider: str = "gemini",
    filenames: list[str] | None = None,
    status: str = "pending",
    attempts: int = 0,
) -> JobRecord:
    with conn.cursor(row_factory=dict_row) as cur:
        cur.execute(
            """
            INSERT INTO ocr_jobs (campaign_id, owner_id, provider, filenames, status, attempts)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id
            """,
            (campaign_id, owner_id, provider, filenames or [], status, attempts),
        )
        row = cur.fetchone()
        assert row is not None
    conn.commit()
    return JobRecord(
        id=row["id"],
        campaign_id=campaign_id,
        owner_id=owner_id,
        provider=provider,
        status=status,
        attempts=attempts,
        filenames=filenames or [],
    )


@pytest.fixture
def make_job(
    db_conn: psycopg.Connection[Any],
    campaign_id: str,
    owner_id: str,
) -> Callable[..., JobRecord]:
    """Insert extra jobs for the test campaign."""

    def factory(**kwargs: Any) -> JobRecord:
        return _insert_job(db_conn, campaign_id, owner_id, **kwargs)

    return factory


@pytest.fixture
def seed_job(
    db_conn: psycopg.Connection[Any],
    campaign_id: str,
    owner_id: str,
) -> JobRecord:
    return _insert_job(db_conn, campaign_id, owner_id, filenames=["petition.pdf"])


@pytest.fixture
def seed_credential(
    db_conn: psycopg.Connection[Any],
    owner_id: str,
    test_settings: Settings,
) -> str:
    cipher = CredentialCipher(test_settings.credential_encryption_key)
    db_conn.execute(
        "INSERT INTO api_keys (user_id, provider, api_key, is_active) VALUES (%s, %s, %s, TRUE)",
        (owner_id, "gemini", cipher.encrypt("g-integration")),
    )
    db_conn.commit()
    return "g-integration"


@pytest.fixture
def sample_pdf_on_disk(
    seed_job: JobRecord,
    tmp_path: Path,
    sample_pdf_bytes: bytes,
) -> Path:
    """Store the job's petition under {root}/{owner}/{campaign}/ and return the root."""
    directory = tmp_path / seed_job.owner_id / seed_job.campaign_id
    directory.mkdir(parents=True)
    (directory / "petition.pdf").write_bytes(sample_pdf_bytes)
    return tmp_path
