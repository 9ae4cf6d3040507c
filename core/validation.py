"""
Request Validation

Turns untyped request payloads (e.g. decoded JSON bodies) into typed input
structs before they reach AuthCore. Each validator either returns the typed
input or raises InvalidInputError with a fixed message.

Field names are accepted in camelCase ("fullName", "faceEmbedding") or
snake_case ("full_name", "face_embedding").
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Mapping, Optional

from core.errors import InvalidInputError

REGISTER_FIELDS_REQUIRED = "fullName, email and password are required"
LOGIN_FIELDS_REQUIRED = "email and password are required"
EMBEDDING_NOT_NUMERIC = "faceEmbedding must be an array of numbers"
TEXT_NOT_UTF8 = "Text fields must be valid UTF-8"


@dataclass(frozen=True)
class RegisterInput:
    full_name: str
    email: str
    password: str
    face_embedding: List[float]


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class FaceVerifyInput:
    face_embedding: List[float]


def _field(payload: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = payload.get(camel)
    if value is None:
        value = payload.get(snake)
    return value


def _non_empty_string(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None

    # JSON allows lone surrogates, which cannot be hashed or stored as UTF-8
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidInputError(TEXT_NOT_UTF8)
    return value


def is_number(value: Any) -> bool:
    """True for finite real numbers. Booleans are not numbers here."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return False

    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers beyond the float range
        return False


def parse_embedding(value: Any) -> List[float]:
    """
    Validate an embedding payload.

    Returns:
        The embedding as a list of floats (possibly empty; emptiness is
        checked by the operation that consumes it).

    Raises:
        InvalidInputError: If the value is not a list of finite numbers.
    """
    if not isinstance(value, (list, tuple)) or not all(is_number(v) for v in value):
        raise InvalidInputError(EMBEDDING_NOT_NUMERIC)
    return [float(v) for v in value]


def validate_register_request(payload: Mapping[str, Any]) -> RegisterInput:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(REGISTER_FIELDS_REQUIRED)

    full_name = _non_empty_string(_field(payload, "fullName", "full_name"))
    email = _non_empty_string(payload.get("email"))
    password = _non_empty_string(payload.get("password"))

    if full_name is None or email is None or password is None:
        raise InvalidInputError(REGISTER_FIELDS_REQUIRED)

    face_embedding = parse_embedding(_field(payload, "faceEmbedding", "face_embedding"))

    return RegisterInput(
        full_name=full_name,
        email=email,
        password=password,
        face_embedding=face_embedding,
    )


def validate_login_request(payload: Mapping[str, Any]) -> LoginInput:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(LOGIN_FIELDS_REQUIRED)

    email = _non_empty_string(payload.get("email"))
    password = _non_empty_string(payload.get("password"))

    if email is None or password is None:
        raise InvalidInputError(LOGIN_FIELDS_REQUIRED)

    return LoginInput(email=email, password=password)


def validate_face_verify_request(payload: Mapping[str, Any]) -> FaceVerifyInput:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(EMBEDDING_NOT_NUMERIC)

    face_embedding = parse_embedding(_field(payload, "faceEmbedding", "face_embedding"))
    return FaceVerifyInput(face_embedding=face_embedding)
