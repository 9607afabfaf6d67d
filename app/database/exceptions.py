class DatabaseError(Exception):
    """Base exception for repository failures."""


class CredentialNotFoundError(DatabaseError):
    """Raised when no credential is stored for an owner/provider pair."""


class CredentialInactiveError(CredentialNotFoundError):
    """Raised when the stored credential has been deactivated."""


class StorageError(DatabaseError):
    """Raised when replacing a campaign's rows fails.

    ``possibly_inconsistent`` is True when the failure hit the commit itself,
    so the caller cannot tell whether the old or the new rows are present.
    """

    def __init__(
        self,
        message: str,
        *,
        campaign_key: str,
        stage: str,
        possibly_inconsistent: bool = False,
    ) -> None:
        super().__init__(message)
        self.campaign_key = campaign_key
        self.stage = stage
        self.possibly_inconsistent = possibly_inconsistent
