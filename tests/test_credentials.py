"""Tests for API credential resolution."""

from unittest.mock import MagicMock

import pytest

from pantrypal.scanner.credentials import Credential, CredentialResolver, FernetCipher
from pantrypal.scanner.db import SecretDB
from pantrypal.scanner.result import DbError, DbErrorKind, Err, Ok


@pytest.fixture
def secrets_db(tmp_path):
    db = SecretDB(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def cipher():
    return FernetCipher(FernetCipher.generate_key())


class TestFernetCipher:
    def test_encrypt_decrypt(self, cipher):
        token = cipher.encrypt("sk-user")
        assert token != "sk-user"
        assert cipher.decrypt(token) == "sk-user"

    def test_wrong_key_raises_value_error(self, cipher):
        other = FernetCipher(FernetCipher.generate_key())
        with pytest.raises(ValueError):
            other.decrypt(cipher.encrypt("sk-user"))


class TestCredentialResolver:
    def test_user_key_preferred(self, secrets_db, cipher):
        secrets_db.put_encrypted_key("u1", "gemini", cipher.encrypt("user-key"))
        resolver = CredentialResolver("system-key", secrets_db, cipher)

        cred = resolver.resolve("u1")
        assert cred == Credential(api_key="user-key", source="user")

    def test_system_key_when_user_has_none(self, secrets_db, cipher):
        resolver = CredentialResolver("system-key", secrets_db, cipher)
        cred = resolver.resolve("u1")
        assert cred.api_key == "system-key"
        assert cred.source == "system"

    def test_key_is_per_service(self, secrets_db, cipher):
        secrets_db.put_encrypted_key("u1", "claude", cipher.encrypt("claude-key"))
        resolver = CredentialResolver("system-key", secrets_db, cipher, service="gemini")
        assert resolver.resolve("u1").source == "system"

    def test_undecryptable_user_key_falls_back(self, secrets_db, cipher):
        other = FernetCipher(FernetCipher.generate_key())
        secrets_db.put_encrypted_key("u1", "gemini", other.encrypt("user-key"))
        resolver = CredentialResolver("system-key", secrets_db, cipher)
        assert resolver.resolve("u1").api_key == "system-key"

    def test_no_key_anywhere(self, secrets_db, cipher):
        resolver = CredentialResolver("", secrets_db, cipher)
        assert resolver.resolve("u1") is None

    def test_anonymous_request_uses_system_key(self):
        resolver = CredentialResolver("system-key")
        assert resolver.resolve(None).source == "system"

    def test_store_error_falls_back(self, cipher):
        secrets = MagicMock()
        secrets.get_encrypted_key.return_value = Err(
            DbError(DbErrorKind.OPERATIONAL, "database is locked")
        )
        resolver = CredentialResolver("system-key", secrets, cipher)
        assert resolver.resolve("u1").source == "system"

    def test_resolution_never_writes(self, cipher):
        secrets = MagicMock()
        secrets.get_encrypted_key.return_value = Ok(None)
        resolver = CredentialResolver("system-key", secrets, cipher)

        resolver.resolve("u1")
        resolver.resolve("u1")
        secrets.put_encrypted_key.assert_not_called()

    def test_repr_masks_key(self):
        cred = Credential(api_key="sk-secret", source="user")
        assert "sk-secret" not in repr(cred)
