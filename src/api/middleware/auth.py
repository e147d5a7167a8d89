"""Supabase access-token verification.

Every profile and listing request is tied to the identity in the bearer
token. Anonymous Supabase sessions carry a valid signature but no user, so
they are rejected here rather than treated as a caller.
"""

import json
from enum import Enum
from functools import lru_cache
from typing import Any

import jwt
from jwt import PyJWK

from src.core.config import get_settings
from src.schemas.auth import TokenPayload

TOKEN_ALGORITHMS = ["ES256"]
REQUIRED_CLAIMS = ["exp", "iat", "sub"]
ANONYMOUS_ROLE = "anon"


class AuthErrorCode(str, Enum):
    """Authentication error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """Token could not be turned into an authenticated identity."""

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


@lru_cache
def get_signing_key() -> Any:
    """Public key parsed from ``SUPABASE_SIGNING_KEY_JWK``.

    Raises:
        AuthError: If the JWK is missing or malformed.
    """
    jwk_json = get_settings().supabase_signing_key_jwk
    if not jwk_json:
        raise AuthError("Signing key not configured", AuthErrorCode.INVALID_TOKEN)

    try:
        return PyJWK.from_dict(json.loads(jwk_json)).key
    except (json.JSONDecodeError, jwt.PyJWKError) as e:
        raise AuthError(f"Invalid signing key JWK: {e}", AuthErrorCode.INVALID_TOKEN) from e


def _to_payload(claims: dict[str, Any]) -> TokenPayload:
    if claims.get("role") == ANONYMOUS_ROLE:
        raise AuthError("Anonymous sessions cannot manage a profile", AuthErrorCode.UNAUTHORIZED)

    return TokenPayload(
        sub=claims["sub"],
        email=claims.get("email"),
        role=claims.get("role"),
        exp=claims["exp"],
        iat=claims["iat"],
        aud=claims.get("aud"),
        iss=claims.get("iss"),
        user_metadata=claims.get("user_metadata") or {},
    )


def decode_jwt(token: str) -> TokenPayload:
    """Verify a Supabase access token and return its claims.

    The audience is not checked; Supabase issues every user token for
    ``authenticated`` and anonymous tokens are filtered by role instead.

    Args:
        token: The raw JWT from the Authorization header.

    Returns:
        TokenPayload: Verified claims, including ``user_metadata``.

    Raises:
        AuthError: If the token is expired, forged, malformed or anonymous.
    """
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            get_signing_key(),
            algorithms=TOKEN_ALGORITHMS,
            options={"verify_aud": False, "require": REQUIRED_CLAIMS},
        )
        return _to_payload(claims)

    except AuthError:
        raise

    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token has expired", AuthErrorCode.TOKEN_EXPIRED) from e

    except jwt.InvalidSignatureError as e:
        raise AuthError("Invalid token signature", AuthErrorCode.INVALID_SIGNATURE) from e

    except jwt.MissingRequiredClaimError as e:
        raise AuthError(f"Token missing required claim: {e}", AuthErrorCode.INVALID_TOKEN) from e

    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {e}", AuthErrorCode.INVALID_TOKEN) from e

    except Exception as e:
        raise AuthError(f"Token validation failed: {e}", AuthErrorCode.INVALID_TOKEN) from e
