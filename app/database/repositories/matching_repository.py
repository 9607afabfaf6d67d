from psycopg import sql

from app.database.connection import get_connection


class MatchingRepository:
    """Invokes the voter-record matching procedure stored in the database."""

    def __init__(self, procedure: str) -> None:
        self._procedure = procedure

    def run_for_campaign(self, campaign_key: str) -> object:
        """Call the procedure for one campaign and return its result."""
        query = sql.SQL("SELECT {}(%s)").format(sql.Identifier(self._procedure))
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (campaign_key,))
                row = cur.fetchone()
            conn.commit()
        return row[0] if row else None
