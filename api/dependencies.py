"""
FastAPI Dependencies

Provides the AuthCore instance and the authenticated identity to route
handlers. The identity is derived from the Authorization header by an
explicit call to AuthCore.authenticate and handed to the handler as a plain
TokenClaims value.

Tests replace the AuthCore with app.dependency_overrides[get_auth_core].
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from core.auth_core import AuthCore, build_auth_core
from core.errors import UnauthorizedError
from core.token_issuer import TokenClaims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

# Singleton instance built from config.yaml on first use
_auth_core_instance: Optional[AuthCore] = None


def get_auth_core() -> AuthCore:
    """
    Get or create the process-wide AuthCore.

    Raises:
        ConfigurationError: If the configuration is unusable (e.g. no token
            secret in production).
    """
    global _auth_core_instance

    if _auth_core_instance is None:
        _auth_core_instance = build_auth_core()

    return _auth_core_instance


def reset_auth_core() -> None:
    """Close and forget the singleton (used on shutdown)."""
    global _auth_core_instance

    if _auth_core_instance is not None:
        _auth_core_instance.directory.close()
        _auth_core_instance = None


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an "Authorization: Bearer <token>" header value.

    Raises:
        UnauthorizedError: If the header is missing or not a Bearer header.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Token not found")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Token not found")
    return token


def get_current_identity(
    authorization: Optional[str] = Header(None),
    auth: AuthCore = Depends(get_auth_core),
) -> TokenClaims:
    """Resolve the caller's identity from their bearer token."""
    return auth.authenticate(extract_bearer_token(authorization))
