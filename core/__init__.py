"""
Core Module for the Face-Verified Authentication Service

This package contains the framework-free credential and verification core:
password hashing, access tokens, face embedding matching, the user directory
and the AuthCore orchestrator.

Main components:
    - config: Configuration loading and management
    - errors: Domain error taxonomy
    - password: Salted scrypt password credentials
    - token_issuer: Signed, time-limited access tokens
    - matching: Face embedding matching
    - user_directory: User record storage
    - validation: Request payload validation
    - auth_core: Register / login / verify-face orchestration

Usage:
    from core.auth_core import build_auth_core
    auth = build_auth_core()
"""

from core.config import (
    get_config,
    get_section,
    get_password_config,
    get_token_config,
    get_matching_config,
    get_storage_config,
    get_api_config,
    get_server_config,
)

from core.errors import (
    AuthError,
    InvalidInputError,
    ShapeMismatchError,
    EmptyEmbeddingError,
    ConflictError,
    UnauthorizedError,
    InvalidTokenError,
    DataIntegrityError,
    InternalError,
    DuplicateEmailError,
    ConfigurationError,
)

from core.password import PasswordCredential

from core.token_issuer import TokenIssuer, TokenClaims

from core.matching import (
    EmbeddingMatcher,
    EuclideanEmbeddingMatcher,
    FaceVerification,
)

from core.user_directory import (
    UserRecord,
    UserDirectory,
    InMemoryUserDirectory,
    SqliteUserDirectory,
    create_user_directory,
    generate_user_id,
)

from core.auth_core import (
    AuthCore,
    UserProfile,
    RegisterResult,
    LoginResult,
    build_auth_core,
)

__all__ = [
    # Configuration
    "get_config",
    "get_section",
    "get_password_config",
    "get_token_config",
    "get_matching_config",
    "get_storage_config",
    "get_api_config",
    "get_server_config",
    # Errors
    "AuthError",
    "InvalidInputError",
    "ShapeMismatchError",
    "EmptyEmbeddingError",
    "ConflictError",
    "UnauthorizedError",
    "InvalidTokenError",
    "DataIntegrityError",
    "InternalError",
    "DuplicateEmailError",
    "ConfigurationError",
    # Credentials and tokens
    "PasswordCredential",
    "TokenIssuer",
    "TokenClaims",
    # Matching
    "EmbeddingMatcher",
    "EuclideanEmbeddingMatcher",
    "FaceVerification",
    # User directory
    "UserRecord",
    "UserDirectory",
    "InMemoryUserDirectory",
    "SqliteUserDirectory",
    "create_user_directory",
    "generate_user_id",
    # Orchestration
    "AuthCore",
    "UserProfile",
    "RegisterResult",
    "LoginResult",
    "build_auth_core",
]
