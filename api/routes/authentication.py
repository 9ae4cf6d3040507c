"""
Authentication API Routes

This module provides the /auth endpoints:
- POST /auth/register     create an account with a face embedding
- POST /auth/login        exchange email + password for an access token
- POST /auth/face-verify  compare a probe embedding with the enrolled one
- GET  /auth/me           echo the identity carried by the access token

Handlers are plain functions so the CPU-bound password hashing runs in
FastAPI's worker thread pool. Domain errors raised by AuthCore are turned
into HTTP responses by the exception handlers registered in api/app.py.
"""

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_auth_core, get_current_identity
from api.schemas import (
    RegisterRequest,
    RegisterResponse,
    RegisteredUser,
    LoginRequest,
    LoginResponse,
    UserSummary,
    FaceVerifyRequest,
    FaceVerifyResponse,
    Identity,
    MeResponse,
    ErrorResponse,
)
from core.auth_core import AuthCore
from core.token_issuer import TokenClaims
from core.validation import (
    validate_face_verify_request,
    validate_login_request,
    validate_register_request,
)

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/auth", tags=["authentication"])

INVALID_INPUT = {400: {"model": ErrorResponse, "description": "Invalid input"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Email already registered"}}
UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Missing or rejected credentials"}}
SERVER_ERROR = {500: {"model": ErrorResponse, "description": "Corrupt stored data or store failure"}}


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**INVALID_INPUT, **CONFLICT, **SERVER_ERROR},
)
def register(request: RegisterRequest, auth: AuthCore = Depends(get_auth_core)):
    """
    Register a new user.

    Returns the public profile and an access token. The password hash and
    the raw embedding are never returned.

    Raises:
        400: Missing fields or malformed / empty faceEmbedding.
        409: Email already registered.
    """
    payload = validate_register_request(request.model_dump(by_alias=True))

    result = auth.register(
        full_name=payload.full_name,
        email=payload.email,
        password=payload.password,
        face_embedding=payload.face_embedding,
    )

    return RegisterResponse(
        user=RegisteredUser(
            id=result.user.id,
            full_name=result.user.full_name,
            email=result.user.email,
            created_at=result.user.created_at,
        ),
        access_token=result.access_token,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={**INVALID_INPUT, **UNAUTHORIZED, **SERVER_ERROR},
)
def login(request: LoginRequest, auth: AuthCore = Depends(get_auth_core)):
    """
    Log in with email and password.

    Raises:
        400: Missing email or password.
        401: Unknown email or wrong password (indistinguishable).
    """
    payload = validate_login_request(request.model_dump(by_alias=True))
    result = auth.login(email=payload.email, password=payload.password)

    return LoginResponse(
        access_token=result.access_token,
        user=UserSummary(
            id=result.user.id,
            full_name=result.user.full_name,
            email=result.user.email,
        ),
    )


@router.post(
    "/face-verify",
    response_model=FaceVerifyResponse,
    responses={**INVALID_INPUT, **UNAUTHORIZED, **SERVER_ERROR},
)
def face_verify(
    request: FaceVerifyRequest,
    identity: TokenClaims = Depends(get_current_identity),
    auth: AuthCore = Depends(get_auth_core),
):
    """
    Verify the authenticated user's face against their enrolled embedding.

    Requires: Authorization: Bearer <token>

    Raises:
        400: Empty probe or length differs from the enrolled embedding.
        401: Missing/invalid token, or the token's user no longer exists.
    """
    payload = validate_face_verify_request(request.model_dump(by_alias=True))
    result = auth.verify_face(identity.sub, payload.face_embedding)

    return FaceVerifyResponse(
        verified=result.verified,
        distance=result.distance,
        threshold=result.threshold,
    )


@router.get("/me", response_model=MeResponse, responses=UNAUTHORIZED)
def me(
    identity: TokenClaims = Depends(get_current_identity),
    auth: AuthCore = Depends(get_auth_core),
):
    """Return the identity carried by the caller's access token."""
    claims = auth.me(identity)
    return MeResponse(user=Identity(sub=claims.sub, email=claims.email))
