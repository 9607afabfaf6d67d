from cryptography.fernet import Fernet, InvalidToken

from app.config.exceptions import ConfigurationError


class CredentialDecryptionError(Exception):
    """Raised when a stored provider key cannot be decrypted."""


class CredentialCipher:
    """Encrypts and decrypts provider keys stored in the credential table."""

    def __init__(self, key: str) -> None:
        if not key:
            raise ConfigurationError("credential_encryption_key is not set")
        try:
            self._fernet = Fernet(key.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise ConfigurationError(f"Invalid credential_encryption_key: {exc}") from exc

    def encrypt(self, secret: str) -> str:
        return self._fernet.encrypt(secret.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise CredentialDecryptionError("Stored provider key could not be decrypted") from exc
