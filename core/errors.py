"""
Error Taxonomy for the Authentication Core

Every failure the core reports is raised as a subclass of AuthError at the
point where it is detected and travels unchanged to the boundary layer, which
maps it to a transport response (see api/app.py).

Hierarchy:
    AuthError
    ├── InvalidInputError      caller error, retrying does not help
    │   ├── ShapeMismatchError
    │   └── EmptyEmbeddingError
    ├── ConflictError          email already registered
    ├── UnauthorizedError      bad credentials, bad token, unknown user id
    │   └── InvalidTokenError
    ├── DataIntegrityError     stored credential or embedding is corrupt
    └── InternalError          unexpected store or signing failure

Two signals live outside the hierarchy:
    DuplicateEmailError  raised by a user directory when its uniqueness
                         constraint rejects an insert
    ConfigurationError   raised at startup for unusable configuration
"""


class AuthError(Exception):
    """Base class for all domain errors raised by the authentication core."""

    kind = "auth_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InvalidInputError(AuthError):
    kind = "invalid_input"


class ShapeMismatchError(InvalidInputError):
    """Two embeddings of different length were compared."""

    kind = "shape_mismatch"


class EmptyEmbeddingError(InvalidInputError):
    kind = "empty_embedding"


class ConflictError(AuthError):
    kind = "conflict"


class UnauthorizedError(AuthError):
    kind = "unauthorized"


class InvalidTokenError(UnauthorizedError):
    """Token signature, structure or expiry did not check out."""

    kind = "invalid_token"


class DataIntegrityError(AuthError):
    """Stored data is malformed. Indicates a bug or corruption upstream."""

    kind = "data_integrity"


class InternalError(AuthError):
    kind = "internal"


class DuplicateEmailError(Exception):
    """Raised by a UserDirectory when an insert violates email uniqueness."""

    def __init__(self, email: str):
        super().__init__(f"User with email {email!r} already exists")
        self.email = email


class ConfigurationError(RuntimeError):
    """Raised when the service cannot start with the given configuration."""
