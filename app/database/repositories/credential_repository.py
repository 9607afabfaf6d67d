from collections.abc import Sequence

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.exceptions import CredentialInactiveError, CredentialNotFoundError
from app.database.models import CredentialRecord


class CredentialRepository:
    """Read-only lookups in the api_keys table."""

    def find_active(self, owner_id: str, providers: Sequence[str]) -> CredentialRecord:
        """Find the encrypted key an owner stored for a provider.

        ``providers`` lists every label the provider may be stored under;
        keys saved by older clients use ``OPENAI_API_KEY``-style labels.
        An active row wins over an inactive one.

        Raises:
            CredentialNotFoundError: if no key is stored under any label.
            CredentialInactiveError: if every stored key is deactivated.
        """
        labels = list(providers)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT user_id, provider, api_key, is_active
                    FROM api_keys
                    WHERE user_id = %s AND provider = ANY(%s)
                    ORDER BY is_active DESC
                    LIMIT 1
                    """,
                    (owner_id, labels),
                )
                row = cur.fetchone()

        if row is None:
            raise CredentialNotFoundError(f"No {labels[0]} key stored for owner {owner_id}")
        if not row["is_active"]:
            raise CredentialInactiveError(f"The {labels[0]} key for owner {owner_id} is inactive")

        return CredentialRecord(
            user_id=str(row["user_id"]),
            provider=row["provider"],
            api_key=row["api_key"],
            is_active=True,
        )
