"""
Bearer Token Module

Issues and validates signed, self-contained JWT access tokens. There is no
server-side session store: a token is valid when its signature verifies and
it has not expired. Rotating the signing secret invalidates every
outstanding token.

Usage:
    from core.token_issuer import TokenIssuer, TokenClaims

    issuer = TokenIssuer(secret="change-me")
    token = issuer.issue(TokenClaims(sub="usr_1a2b3c4d5e6f", email="budi@mail.com"))
    claims = issuer.validate(token)
"""

import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from core.errors import ConfigurationError, InternalError, InvalidTokenError

logger = logging.getLogger(__name__)

SECRET_ENV = "JWT_SECRET"
DEV_DEFAULT_SECRET = "local-dev-secret"
DEFAULT_EXPIRES_IN = 24 * 60 * 60


@dataclass(frozen=True)
class TokenClaims:
    """
    Identity claims carried by an access token.

    Attributes:
        sub: The user's unique identifier.
        email: The user's normalized email address.
    """

    sub: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class TokenIssuer:
    """
    Signs and verifies HS256 access tokens.

    Args:
        secret: Shared signing secret.
        algorithm: JWT signing algorithm (default "HS256").
        expires_in: Token lifetime in seconds (default one day).
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in: int = DEFAULT_EXPIRES_IN,
    ):
        if not secret:
            raise ConfigurationError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = int(expires_in)

    @classmethod
    def from_config(
        cls, config: Optional[Dict[str, Any]] = None, environment: str = "development"
    ) -> "TokenIssuer":
        """
        Build an issuer from the "token" config section.

        The secret comes from the JWT_SECRET environment variable, then
        config["secret"]. Outside production a missing secret falls back to
        DEV_DEFAULT_SECRET; in production it is a startup failure.

        Raises:
            ConfigurationError: If no secret is configured in production.
        """
        if config is None:
            config = {}

        secret = os.environ.get(SECRET_ENV) or config.get("secret")
        if not secret:
            if environment == "production":
                raise ConfigurationError(
                    f"{SECRET_ENV} must be set when running in production"
                )
            logger.warning(
                f"{SECRET_ENV} not set, using the development default signing secret"
            )
            secret = DEV_DEFAULT_SECRET

        return cls(
            secret=secret,
            algorithm=config.get("algorithm", "HS256"),
            expires_in=config.get("expires_in_seconds", DEFAULT_EXPIRES_IN),
        )

    def issue(self, claims: TokenClaims) -> str:
        """
        Issue a signed token for the given claims.

        Returns:
            Encoded JWT string with sub, email, iat and exp.

        Raises:
            InternalError: If signing fails.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": claims.sub,
            "email": claims.email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in),
        }

        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.error(f"Failed to sign access token: {e}")
            raise InternalError("Failed to issue access token") from e

    def validate(self, token: str) -> TokenClaims:
        """
        Verify a token's signature and expiry and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, tampered with,
                expired, or missing identity claims.
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Invalid token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub", "email"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired access token")
            raise InvalidTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid access token: {e}")
            raise InvalidTokenError("Invalid token") from e

        sub = payload.get("sub")
        email = payload.get("email")
        if not isinstance(sub, str) or not isinstance(email, str):
            raise InvalidTokenError("Invalid token")

        return TokenClaims(sub=sub, email=email)
