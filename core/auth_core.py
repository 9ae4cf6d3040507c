"""
Authentication Core

Orchestrates registration, password login, face re-verification and identity
echo on top of four collaborators passed in explicitly:

    UserDirectory       lookup / create of user records
    PasswordCredential  salted scrypt hash and verify
    EmbeddingMatcher    embedding distance and threshold decision
    TokenIssuer         access token issue and validate

Domain outcomes are raised as core.errors exceptions; nothing is silently
recovered. Login and face verification report an unknown user with the same
UnauthorizedError as a wrong credential so callers cannot probe which
accounts exist.

Usage:
    from core.auth_core import build_auth_core

    auth = build_auth_core()
    result = auth.register("Budi Santoso", "budi@mail.com", "rahasia123", [0.11, 0.22, 0.33])
    claims = auth.authenticate(result.access_token)
    auth.verify_face(claims.sub, [0.11, 0.21, 0.33])
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from core.errors import (
    AuthError,
    ConflictError,
    DataIntegrityError,
    DuplicateEmailError,
    InternalError,
    InvalidInputError,
    UnauthorizedError,
)
from core.matching import EmbeddingMatcher, EuclideanEmbeddingMatcher, FaceVerification
from core.password import PasswordCredential
from core.token_issuer import TokenClaims, TokenIssuer
from core.user_directory import UserDirectory, UserRecord, create_user_directory
from core.validation import is_number

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMAIL_ALREADY_REGISTERED = "Email already registered"
BAD_CREDENTIALS = "Email or password incorrect"
USER_NOT_FOUND = "User not found"
EMBEDDING_REQUIRED = "faceEmbedding must not be empty"
EMBEDDING_LENGTH_MISMATCH = "Embedding length mismatch"
STORED_EMBEDDING_INVALID = "Stored face data is invalid"


# ============================================================
# Results
# ============================================================

@dataclass(frozen=True)
class UserProfile:
    """Public view of a user. Never carries the credential or embedding."""

    id: str
    full_name: str
    email: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: UserRecord, include_created_at: bool = True) -> "UserProfile":
        return cls(
            id=record.id,
            full_name=record.full_name,
            email=record.email,
            created_at=record.created_at if include_created_at else None,
        )


@dataclass(frozen=True)
class RegisterResult:
    user: UserProfile
    access_token: str


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: UserProfile


def normalize_email(email: str) -> str:
    return email.lower()


# ============================================================
# AuthCore
# ============================================================

class AuthCore:
    """
    Registration, login and face verification over injected collaborators.

    Args:
        directory: User record store.
        credential: Password hasher / verifier.
        matcher: Face embedding matcher.
        issuer: Access token issuer.
    """

    def __init__(
        self,
        directory: UserDirectory,
        credential: PasswordCredential,
        matcher: EmbeddingMatcher,
        issuer: TokenIssuer,
    ):
        self.directory = directory
        self.credential = credential
        self.matcher = matcher
        self.issuer = issuer

    def _store_call(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        """
        Run a directory call, converting unexpected failures to InternalError.

        AuthError and DuplicateEmailError pass through unchanged.
        """
        try:
            return fn(*args)
        except (AuthError, DuplicateEmailError):
            raise
        except Exception as e:
            logger.exception(f"User directory failure during {operation}")
            raise InternalError("User store unavailable") from e

    def register(
        self,
        full_name: str,
        email: str,
        password: str,
        face_embedding: Sequence[float],
    ) -> RegisterResult:
        """
        Register a new user with a password and an enrolled face embedding.

        Returns:
            RegisterResult with the public profile and an access token.

        Raises:
            InvalidInputError: If the face embedding is empty.
            ConflictError: If the email is already registered.
        """
        if len(face_embedding) == 0:
            raise InvalidInputError(EMBEDDING_REQUIRED)

        email = normalize_email(email)

        existing = self._store_call("register lookup", self.directory.find_by_email, email)
        if existing is not None:
            logger.info("Registration rejected: email already registered")
            raise ConflictError(EMAIL_ALREADY_REGISTERED)

        password_hash = self.credential.hash(password)

        try:
            user = self._store_call(
                "register create",
                self.directory.create,
                full_name,
                email,
                password_hash,
                list(face_embedding),
            )
        except DuplicateEmailError as e:
            logger.info("Registration lost a race on an existing email")
            raise ConflictError(EMAIL_ALREADY_REGISTERED) from e

        access_token = self.issuer.issue(TokenClaims(sub=user.id, email=user.email))
        logger.info(f"Registered user {user.id} (embedding dim={len(face_embedding)})")

        return RegisterResult(user=UserProfile.from_record(user), access_token=access_token)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password.

        Raises:
            UnauthorizedError: If the user does not exist or the password is
                wrong (same message for both).
            DataIntegrityError: If the stored credential is malformed.
        """
        user = self._store_call(
            "login lookup", self.directory.find_by_email, normalize_email(email)
        )

        if user is None or not self.credential.verify(password, user.password_hash):
            logger.info("Login rejected: bad credentials")
            raise UnauthorizedError(BAD_CREDENTIALS)

        access_token = self.issuer.issue(TokenClaims(sub=user.id, email=user.email))
        logger.info(f"User {user.id} logged in")

        return LoginResult(
            access_token=access_token,
            user=UserProfile.from_record(user, include_created_at=False),
        )

    def verify_face(self, user_id: str, probe_embedding: Sequence[float]) -> FaceVerification:
        """
        Re-verify an authenticated user against their enrolled embedding.

        The caller must already have validated a token naming user_id.

        Raises:
            InvalidInputError: If the probe is empty or its length differs
                from the stored embedding.
            UnauthorizedError: If no user has this id.
            DataIntegrityError: If the stored embedding is malformed.
        """
        if len(probe_embedding) == 0:
            raise InvalidInputError(EMBEDDING_REQUIRED)

        user = self._store_call("verify lookup", self.directory.find_by_id, user_id)
        if user is None:
            logger.warning(f"Face verification for unknown user {user_id}")
            raise UnauthorizedError(USER_NOT_FOUND)

        stored = normalize_stored_embedding(user.face_embedding)
        if len(stored) != len(probe_embedding):
            raise InvalidInputError(EMBEDDING_LENGTH_MISMATCH)

        result = self.matcher.verify(stored, probe_embedding)
        logger.info(
            f"Face verification for {user_id}: verified={result.verified}, "
            f"distance={result.distance:.4f}, threshold={result.threshold}"
        )
        return result

    def authenticate(self, token: str) -> TokenClaims:
        """
        Validate a bearer token and return the identity it carries.

        Raises:
            InvalidTokenError: If the token is invalid or expired.
        """
        return self.issuer.validate(token)

    def me(self, identity: TokenClaims) -> TokenClaims:
        return identity


def normalize_stored_embedding(value: Any) -> List[float]:
    """
    Check that a stored embedding is a non-empty list of finite numbers.

    Raises:
        DataIntegrityError: If it is not.
    """
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        logger.error("Stored face embedding is not a non-empty list")
        raise DataIntegrityError(STORED_EMBEDDING_INVALID)

    if not all(is_number(v) for v in value):
        logger.error("Stored face embedding contains non-numeric values")
        raise DataIntegrityError(STORED_EMBEDDING_INVALID)

    return [float(v) for v in value]


def build_auth_core(
    config: Optional[Dict[str, Any]] = None,
    directory: Optional[UserDirectory] = None,
) -> AuthCore:
    """
    Composition root: build an AuthCore from configuration.

    Args:
        config: Full configuration dict. Defaults to core.config.get_config().
        directory: Optional pre-built directory; otherwise built from the
                   "storage" section.

    Raises:
        ConfigurationError: If the token secret is missing in production.
    """
    if config is None:
        from core import config as settings

        environment = settings.get_environment()
        storage_config = settings.get_storage_config()
        password_config = settings.get_password_config()
        matching_config = settings.get_matching_config()
        token_config = settings.get_token_config()
    else:
        environment = str(config.get("environment", "development")).lower()
        storage_config = config.get("storage", {})
        password_config = config.get("password", {})
        matching_config = config.get("face_matching", {})
        token_config = config.get("token", {})

    if directory is None:
        directory = create_user_directory(storage_config)

    return AuthCore(
        directory=directory,
        credential=PasswordCredential(password_config),
        matcher=EuclideanEmbeddingMatcher(matching_config),
        issuer=TokenIssuer.from_config(token_config, environment=environment),
    )
