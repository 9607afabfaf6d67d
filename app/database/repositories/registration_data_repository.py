from collections.abc import Sequence
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.exceptions import StorageError
from app.logging.logger import Log
from app.ocr.models import AnnotatedRecord

_INSERT_SQL = """
    INSERT INTO registration_data
        (campaign_id, name, address, date, ward, page_number, row_number, filename, extra)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
"""


class RegistrationDataRepository:
    """Result sink for extracted petition rows (registration_data table)."""

    def replace(self, records: Sequence[AnnotatedRecord], campaign_key: str) -> int:
        """Delete a campaign's rows and insert ``records`` in one transaction.

        Returns:
            Number of inserted rows.

        Raises:
            StorageError: if any statement or the commit fails. The
                transaction is rolled back unless the commit itself failed.
        """
        params = [self._to_params(record, campaign_key) for record in records]
        stage = "connect"
        try:
            with get_connection() as conn:
                try:
                    with conn.cursor() as cur:
                        stage = "delete"
                        cur.execute(
                            "DELETE FROM registration_data WHERE campaign_id = %s",
                            (campaign_key,),
                        )
                        deleted = cur.rowcount
                        if params:
                            stage = "insert"
                            cur.executemany(_INSERT_SQL, params)
                except psycopg.Error:
                    conn.rollback()
                    raise
                stage = "commit"
                conn.commit()
        except psycopg.Error as exc:
            inconsistent = stage == "commit"
            raise StorageError(
                f"Replacing rows for campaign {campaign_key} failed during {stage}: {exc}"
                + (" (state unknown, verify the campaign rows)" if inconsistent else ""),
                campaign_key=campaign_key,
                stage=stage,
                possibly_inconsistent=inconsistent,
            ) from exc

        Log.info(
            f"Replaced rows for campaign {campaign_key}: "
            f"{deleted} deleted, {len(params)} inserted"
        )
        return len(params)

    @staticmethod
    def _to_params(record: AnnotatedRecord, campaign_key: str) -> tuple[Any, ...]:
        row = record.record
        return (
            campaign_key,
            row.name,
            row.address,
            row.date,
            row.ward,
            record.page_number,
            record.row_number,
            record.filename,
            Jsonb(row.extra),
        )
