"""
Auth dependencies for the creatorhub API.

`authenticate` verifies the bearer JWT and loads the user row.
`require_creator` gates creator-only routes and must run after it.
"""
import logging
from typing import Optional

import jwt
from fastapi import Depends, Request

from creatorhub.core.database import Database, get_database
from creatorhub.core.errors import AuthenticationError, PermissionError
from creatorhub.core.security import decode_access_token
from creatorhub.features.users.service import get_user
from creatorhub.models.user import CurrentUser, can_own_plans

logger = logging.getLogger("creatorhub")

# Every failure surfaces as the same 401 message; the reason is logged only.
_GENERIC_MESSAGE = "Invalid or missing authentication token"


def _reject(reason: str, exc_info: bool = False) -> AuthenticationError:
    logger.warning(
        "auth.rejected",
        exc_info=exc_info,
        extra={"error_code": "unauthorized", "event_type": f"auth.{reason}"},
    )
    return AuthenticationError(_GENERIC_MESSAGE)


def _extract_bearer_token(header: Optional[str]) -> str:
    if not header:
        raise _reject("missing_header")
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise _reject("malformed_header")
    return parts[1]


def authenticate(request: Request, db: Database = Depends(get_database)) -> CurrentUser:
    """
    Resolve the caller from `Authorization: Bearer <JWT>`.

    Raises:
        AuthenticationError (401): header missing or malformed, token invalid
        or expired, subject unknown, or any unexpected failure.
    """
    token = _extract_bearer_token(request.headers.get("Authorization"))

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise _reject("token_expired")
    except jwt.InvalidTokenError:
        raise _reject("token_invalid")
    except ValueError:
        # Server misconfiguration (no JWT_SECRET)
        raise _reject("secret_missing")
    except Exception:
        raise _reject("token_decode_failed", exc_info=True)

    user_id = payload.get("id")
    if not user_id or not isinstance(user_id, str):
        raise _reject("token_missing_id")

    try:
        user = get_user(db, user_id)
    except Exception:
        raise _reject("user_lookup_failed", exc_info=True)
    if user is None:
        raise _reject("user_not_found")

    current = user.identity()
    request.state.user = current
    return current


def ensure_creator(user: Optional[CurrentUser]) -> CurrentUser:
    if user is None:
        raise AuthenticationError("Unauthorized")
    if not can_own_plans(user.role):
        raise PermissionError("Forbidden: Creator access required")
    return user


def require_creator(user: CurrentUser = Depends(authenticate)) -> CurrentUser:
    return ensure_creator(user)
