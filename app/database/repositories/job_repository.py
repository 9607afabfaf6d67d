from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import JobRecord

_JOB_COLUMNS = """
    id, campaign_id, owner_id, provider, filenames, prompt, status, attempts,
    progress, record_count, error_message, locked_at, created_at, updated_at
"""


class JobRepository:
    """Database operations for the ocr_jobs table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the next pending job using SELECT FOR UPDATE SKIP LOCKED.

        Jobs whose campaign already has a job in processing are skipped, so
        at most one run per campaign is in flight.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_JOB_COLUMNS}
                FROM ocr_jobs j
                WHERE status = 'pending'
                  AND attempts < %s
                  AND NOT EXISTS (
                      SELECT 1 FROM ocr_jobs p
                      WHERE p.campaign_id = j.campaign_id
                        AND p.status = 'processing'
                  )
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            conn.rollback()
            return None

        if not self._lock_campaign(conn, row["campaign_id"]):
            conn.rollback()
            return None

        conn.execute(
            """
            UPDATE ocr_jobs
            SET status = 'processing', progress = 0, locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        job = self._to_record(row)
        job.status = "processing"
        job.progress = 0.0
        return job

    @staticmethod
    def _lock_campaign(conn: psycopg.Connection[Any], campaign_id: str) -> bool:
        """Take a transaction-scoped campaign lock and re-check for a running job."""
        with conn.cursor() as cur:
            cur.execute("SELECT pg_try_advisory_xact_lock(hashtext(%s))", (campaign_id,))
            locked = cur.fetchone()
            if locked is None or not locked[0]:
                return False
            cur.execute(
                """
                SELECT 1 FROM ocr_jobs
                WHERE campaign_id = %s AND status = 'processing'
                LIMIT 1
                """,
                (campaign_id,),
            )
            return cur.fetchone() is None

    def update_progress(
        self,
        job_id: int,
        fraction: float,
        current_chunk: int,
        total_chunks: int,
    ) -> None:
        """Persist batch progress at a chunk boundary."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ocr_jobs
                SET progress = %s, current_chunk = %s, total_chunks = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (fraction, current_chunk, total_chunks, job_id),
            )
            conn.commit()

    def mark_done(self, job_id: int, record_count: int) -> None:
        """Mark a job as done."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ocr_jobs
                SET status = 'done', progress = 1, record_count = %s,
                    error_message = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (record_count, job_id),
            )
            conn.commit()

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as permanently failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ocr_jobs
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def increment_attempts(self, job_id: int) -> None:
        """Increment attempt count and return job to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ocr_jobs
                SET attempts = attempts + 1, status = 'pending',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        """Find a job by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_JOB_COLUMNS} FROM ocr_jobs WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return self._to_record(row)

    @staticmethod
    def _to_record(row: dict[str, Any]) -> JobRecord:
        return JobRecord(
            id=row["id"],
            campaign_id=str(row["campaign_id"]),
            owner_id=str(row["owner_id"]),
            provider=row["provider"],
            status=row["status"],
            attempts=row["attempts"],
            filenames=list(row["filenames"] or []),
            prompt=row["prompt"],
            progress=float(row["progress"] or 0.0),
            record_count=row["record_count"],
            error_message=row["error_message"],
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
