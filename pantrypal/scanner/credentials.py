"""API credential resolution: per-user encrypted secret, then system default."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .result import Err, Ok

if TYPE_CHECKING:
    from .db import SecretDB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    api_key: str
    source: str  # "user" or "system"

    def __repr__(self) -> str:
        return f"Credential(source={self.source!r}, api_key='***')"


class SecretCipher(Protocol):
    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, token: str) -> str: ...


class FernetCipher:
    """Symmetric encryption of stored API keys with a Fernet key."""

    def __init__(self, key: str) -> None:
        try:
            from cryptography.fernet import Fernet
        except ImportError:
            raise ImportError(
                "cryptography is required: pip install cryptography"
            ) from None
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @staticmethod
    def generate_key() -> str:
        from cryptography.fernet import Fernet

        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, token: str) -> str:
        from cryptography.fernet import InvalidToken

        try:
            return self._fernet.decrypt(token.encode()).decode()
        except InvalidToken:
            raise ValueError("secret could not be decrypted") from None


class CredentialResolver:
    """Resolve which API key a request for ``user_id`` should use.

    Order: the user's encrypted secret if present and decryptable, then the
    system default, then None. Resolution never writes anything.
    """

    def __init__(
        self,
        system_key: str = "",
        secrets: SecretDB | None = None,
        cipher: SecretCipher | None = None,
        service: str = "gemini",
    ) -> None:
        self._system_key = system_key
        self._secrets = secrets
        self._cipher = cipher
        self._service = service

    def resolve(self, user_id: str | None) -> Credential | None:
        user_key = self._user_key(user_id) if user_id else None
        if user_key:
            return Credential(api_key=user_key, source="user")
        if self._system_key:
            return Credential(api_key=self._system_key, source="system")
        return None

    def _user_key(self, user_id: str) -> str | None:
        if self._secrets is None or self._cipher is None:
            return None

        match self._secrets.get_encrypted_key(user_id, self._service):
            case Ok(value=None):
                return None
            case Ok(value=token):
                pass
            case Err(error=err):
                logger.warning("Could not read secret for user %s: %s", user_id, err.message)
                return None

        try:
            return self._cipher.decrypt(token) or None
        except ValueError:
            logger.warning("Stored %s key for user %s is not decryptable", self._service, user_id)
            return None
