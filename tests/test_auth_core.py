"""
Tests for the AuthCore orchestrator.

This test suite verifies:
- Registration: email normalization, conflicts (including the lost race),
  no credential or embedding in the result
- Login: success, and indistinguishable failures for wrong password and
  unknown email
- Face verification: match, mismatch, length checks, corrupt stored data,
  unknown user
- Token boundary: authenticate() and me()
- Store failures surface as InternalError
- Composition root wiring from configuration

Run with: pytest tests/test_auth_core.py -v
"""

import sqlite3
from unittest.mock import MagicMock

import pytest

from core import config as config_module
from core.auth_core import (
    AuthCore,
    LoginResult,
    RegisterResult,
    build_auth_core,
    normalize_stored_embedding,
)
from core.errors import (
    ConfigurationError,
    ConflictError,
    DataIntegrityError,
    DuplicateEmailError,
    InternalError,
    InvalidInputError,
    InvalidTokenError,
    UnauthorizedError,
)
from core.matching import EuclideanEmbeddingMatcher
from core.password import PasswordCredential
from core.token_issuer import SECRET_ENV, TokenClaims, TokenIssuer
from core.user_directory import InMemoryUserDirectory, UserDirectory, UserRecord


# ============================================================
# Test Fixtures
# ============================================================

@pytest.fixture
def credential():
    return PasswordCredential({"scrypt_n": 1024})


@pytest.fixture
def issuer():
    return TokenIssuer(secret="test-secret")


@pytest.fixture
def directory():
    return InMemoryUserDirectory()


@pytest.fixture
def auth(directory, credential, issuer):
    return AuthCore(
        directory=directory,
        credential=credential,
        matcher=EuclideanEmbeddingMatcher(),
        issuer=issuer,
    )


@pytest.fixture
def registered(auth):
    return auth.register(
        full_name="Budi Santoso",
        email="budi@mail.com",
        password="rahasia123",
        face_embedding=[0.11, 0.22, 0.33],
    )


def make_core(directory, credential, issuer):
    return AuthCore(
        directory=directory,
        credential=credential,
        matcher=EuclideanEmbeddingMatcher(),
        issuer=issuer,
    )


# ============================================================
# Register
# ============================================================

class TestRegister:

    def test_register_returns_profile_and_token(self, auth, registered, issuer):
        assert isinstance(registered, RegisterResult)
        assert registered.user.email == "budi@mail.com"
        assert registered.user.full_name == "Budi Santoso"
        assert registered.user.id.startswith("usr_")
        assert registered.user.created_at is not None

        claims = issuer.validate(registered.access_token)
        assert claims == TokenClaims(sub=registered.user.id, email="budi@mail.com")

    def test_result_has_no_secret_material(self, registered):
        profile_fields = set(vars(registered.user))
        assert "password_hash" not in profile_fields
        assert "face_embedding" not in profile_fields

    def test_email_is_lowercased(self, auth, directory):
        result = auth.register("Budi", "Budi@MAIL.com", "rahasia123", [0.1])

        assert result.user.email == "budi@mail.com"
        assert directory.find_by_email("budi@mail.com") is not None

    def test_password_is_hashed(self, auth, directory, credential, registered):
        stored = directory.find_by_id(registered.user.id)

        assert stored.password_hash != "rahasia123"
        assert credential.verify("rahasia123", stored.password_hash)
        assert stored.face_embedding == [0.11, 0.22, 0.33]

    def test_empty_embedding_rejected(self, auth, directory):
        with pytest.raises(InvalidInputError):
            auth.register("Budi", "budi@mail.com", "rahasia123", [])
        assert directory.count_users() == 0

    def test_duplicate_email_conflict(self, auth, directory, registered):
        with pytest.raises(ConflictError, match="already registered"):
            auth.register("Someone Else", "BUDI@mail.com", "other-pass", [0.5, 0.5, 0.5])

        assert directory.count_users() == 1
        # The original record is untouched
        assert auth.login("budi@mail.com", "rahasia123").user.full_name == "Budi Santoso"

    def test_lost_race_maps_to_conflict(self, credential, issuer):
        """The store's uniqueness rejection becomes the same ConflictError."""
        directory = MagicMock(spec=UserDirectory)
        directory.find_by_email.return_value = None
        directory.create.side_effect = DuplicateEmailError("budi@mail.com")

        auth = make_core(directory, credential, issuer)

        with pytest.raises(ConflictError, match="already registered"):
            auth.register("Budi", "budi@mail.com", "rahasia123", [0.1])

    def test_store_failure_is_internal_error(self, credential, issuer):
        directory = MagicMock(spec=UserDirectory)
        directory.find_by_email.side_effect = sqlite3.OperationalError("database is locked")

        auth = make_core(directory, credential, issuer)

        with pytest.raises(InternalError) as exc_info:
            auth.register("Budi", "budi@mail.com", "rahasia123", [0.1])
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)


# ============================================================
# Login
# ============================================================

class TestLogin:

    def test_login_success(self, auth, registered, issuer):
        result = auth.login("budi@mail.com", "rahasia123")

        assert isinstance(result, LoginResult)
        assert result.user.id == registered.user.id
        assert result.user.email == "budi@mail.com"
        assert result.user.created_at is None
        assert issuer.validate(result.access_token).sub == registered.user.id

    def test_login_is_case_insensitive_on_email(self, auth, registered):
        assert auth.login("BUDI@Mail.COM", "rahasia123").user.id == registered.user.id

    def test_wrong_password_and_unknown_email_look_the_same(self, auth, registered):
        with pytest.raises(UnauthorizedError) as wrong_password:
            auth.login("budi@mail.com", "salah")
        with pytest.raises(UnauthorizedError) as unknown_email:
            auth.login("nobody@mail.com", "rahasia123")

        assert type(wrong_password.value) is type(unknown_email.value)
        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.kind == unknown_email.value.kind

    def test_corrupt_credential_is_integrity_error(self, credential, issuer):
        directory = MagicMock(spec=UserDirectory)
        directory.find_by_email.return_value = UserRecord(
            id="usr_corrupt00000",
            email="budi@mail.com",
            full_name="Budi",
            password_hash="not-a-credential",
            face_embedding=[0.1],
        )

        auth = make_core(directory, credential, issuer)

        with pytest.raises(DataIntegrityError):
            auth.login("budi@mail.com", "rahasia123")


# ============================================================
# Verify Face
# ============================================================

class TestVerifyFace:

    def test_close_probe_verifies(self, auth, registered):
        result = auth.verify_face(registered.user.id, [0.11, 0.21, 0.33])

        assert result.verified is True
        assert result.distance == pytest.approx(0.01)
        assert result.threshold == 0.6

    def test_far_probe_not_verified(self, auth, registered):
        result = auth.verify_face(registered.user.id, [0.9, -0.5, 0.7])

        assert result.verified is False
        assert result.distance > result.threshold

    def test_empty_probe_rejected(self, auth, registered):
        with pytest.raises(InvalidInputError):
            auth.verify_face(registered.user.id, [])

    def test_length_mismatch_rejected(self, auth, registered):
        with pytest.raises(InvalidInputError, match="length mismatch"):
            auth.verify_face(registered.user.id, [0.11, 0.22])

    def test_unknown_user_is_unauthorized(self, auth):
        with pytest.raises(UnauthorizedError, match="User not found"):
            auth.verify_face("usr_nonexistent0", [0.11, 0.22, 0.33])

    @pytest.mark.parametrize("stored", [None, [], "0.1,0.2,0.3", [0.1, "x", 0.3], [True, 0.2, 0.3]])
    def test_corrupt_stored_embedding(self, credential, issuer, stored):
        directory = MagicMock(spec=UserDirectory)
        directory.find_by_id.return_value = UserRecord(
            id="usr_corrupt00000",
            email="budi@mail.com",
            full_name="Budi",
            password_hash="aa:bb",
            face_embedding=stored,
        )

        auth = make_core(directory, credential, issuer)

        with pytest.raises(DataIntegrityError):
            auth.verify_face("usr_corrupt00000", [0.1, 0.2, 0.3])


# ============================================================
# Token Boundary
# ============================================================

class TestTokenBoundary:

    def test_authenticate_and_me(self, auth, registered):
        identity = auth.authenticate(registered.access_token)

        assert identity.sub == registered.user.id
        assert auth.me(identity) == identity
        assert auth.me(identity).email == "budi@mail.com"

    def test_authenticate_rejects_garbage(self, auth):
        with pytest.raises(InvalidTokenError):
            auth.authenticate("not-a-token")

    def test_end_to_end_flow(self, auth):
        """register -> login -> verify face -> me"""
        registered = auth.register(
            full_name="Budi Santoso",
            email="budi@mail.com",
            password="rahasia123",
            face_embedding=[0.11, 0.22, 0.33],
        )
        assert registered.user.email == "budi@mail.com"
        assert registered.access_token

        login = auth.login("budi@mail.com", "rahasia123")
        assert login.access_token

        identity = auth.authenticate(login.access_token)
        verification = auth.verify_face(identity.sub, [0.11, 0.21, 0.33])
        assert verification.verified is True

        assert auth.me(identity).email == "budi@mail.com"


# ============================================================
# Helpers and Composition Root
# ============================================================

class TestNormalizeStoredEmbedding:

    def test_valid(self):
        assert normalize_stored_embedding([1, 0.5]) == [1.0, 0.5]

    def test_tuple_accepted(self):
        assert normalize_stored_embedding((0.1, 0.2)) == [0.1, 0.2]


class TestBuildAuthCore:

    def test_builds_from_config(self, monkeypatch):
        monkeypatch.delenv(SECRET_ENV, raising=False)
        config = {
            "environment": "development",
            "password": {"scrypt_n": 1024},
            "token": {"secret": "configured-secret", "expires_in_seconds": 3600},
            "face_matching": {"threshold": 0.5},
            "storage": {"backend": "memory"},
        }

        auth = build_auth_core(config)

        assert isinstance(auth.directory, InMemoryUserDirectory)
        assert auth.matcher.threshold == 0.5
        assert auth.credential.n == 1024
        assert auth.issuer.expires_in == 3600

        result = auth.register("Budi", "budi@mail.com", "rahasia123", [0.1])
        assert TokenIssuer(secret="configured-secret").validate(result.access_token).sub == result.user.id

    def test_uses_given_directory(self, directory):
        auth = build_auth_core({"token": {"secret": "s"}}, directory=directory)
        assert auth.directory is directory

    def test_production_without_secret_fails(self, monkeypatch):
        monkeypatch.delenv(SECRET_ENV, raising=False)
        with pytest.raises(ConfigurationError):
            build_auth_core({"environment": "production", "storage": {"backend": "memory"}})

    def test_defaults_to_loaded_config_sections(self, monkeypatch):
        monkeypatch.delenv(SECRET_ENV, raising=False)
        monkeypatch.setattr(config_module, "_config_instance", {
            "environment": "development",
            "password": {"scrypt_n": 2048},
            "token": {"secret": "section-secret", "expires_in_seconds": 60},
            "face_matching": {"threshold": 0.4},
            "storage": {"backend": "memory"},
        })

        auth = build_auth_core()

        assert isinstance(auth.directory, InMemoryUserDirectory)
        assert auth.credential.n == 2048
        assert auth.matcher.threshold == 0.4
        assert auth.issuer.expires_in == 60


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
