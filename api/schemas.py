"""
Pydantic Schemas for API Request/Response Models

This module defines the data models used on the HTTP boundary of the
authentication service.

JSON field names are camelCase ("fullName", "accessToken"); requests also
accept the snake_case field names. Request models deliberately keep every
field optional and loosely typed: the actual checks happen in
core.validation so that a missing or malformed field produces the same
fixed InvalidInputError message regardless of transport.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# Request Schemas
# ============================================================

class RegisterRequest(CamelModel):
    """Body of POST /auth/register."""
    full_name: Optional[str] = Field(None, description="User's display name")
    email: Optional[str] = Field(None, description="Email address, unique per user")
    password: Optional[str] = Field(None, description="Plain-text password")
    face_embedding: Optional[Any] = Field(
        None,
        description="Enrollment face embedding as an array of numbers"
    )


class LoginRequest(CamelModel):
    """Body of POST /auth/login."""
    email: Optional[str] = None
    password: Optional[str] = None


class FaceVerifyRequest(CamelModel):
    """Body of POST /auth/face-verify."""
    face_embedding: Optional[Any] = Field(
        None,
        description="Probe face embedding, same length as the enrolled one"
    )


# ============================================================
# Response Schemas
# ============================================================

class UserSummary(CamelModel):
    """Public user information."""
    id: str = Field(..., description="Unique user identifier")
    full_name: str = Field(..., description="User's display name")
    email: str = Field(..., description="Normalized email address")


class RegisteredUser(UserSummary):
    created_at: datetime = Field(..., description="Registration timestamp (UTC)")


class RegisterResponse(CamelModel):
    user: RegisteredUser
    access_token: str = Field(..., description="Bearer access token")


class LoginResponse(CamelModel):
    access_token: str = Field(..., description="Bearer access token")
    user: UserSummary


class FaceVerifyResponse(CamelModel):
    """Result of comparing the probe embedding with the enrolled one."""
    verified: bool = Field(..., description="True when distance <= threshold")
    distance: float = Field(..., description="Euclidean distance between embeddings")
    threshold: float = Field(..., description="Acceptance threshold")


class Identity(CamelModel):
    """Claims carried by a validated access token."""
    sub: str = Field(..., description="User ID the token was issued to")
    email: str


class MeResponse(CamelModel):
    user: Identity


class ErrorResponse(CamelModel):
    detail: str = Field(..., description="Human-readable error message")
    error: str = Field(..., description="Error kind, e.g. 'unauthorized'")


# ============================================================
# Health Check Schemas
# ============================================================

class HealthResponse(CamelModel):
    """System health check response."""
    status: str = Field(..., description="Overall status: 'healthy' or 'unhealthy'")
    enrolled_users: int = Field(..., description="Number of registered users")
    version: str
