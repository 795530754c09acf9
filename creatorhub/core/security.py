from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from creatorhub.core.config import settings, Settings
from creatorhub.models.user import CurrentUser


# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, *, settings_obj: Optional[Settings] = None) -> str:
    """Hash a password with bcrypt."""
    if not password:
        raise ValueError("password_blank")
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError("password_too_long")
    cfg = settings_obj or settings
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=cfg.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash, or input bcrypt refuses
        return False


def create_access_token(
    user: CurrentUser,
    *,
    settings_obj: Optional[Settings] = None,
    expires_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    cfg = settings_obj or settings
    if not cfg.JWT_SECRET:
        raise ValueError("jwt_secret_blank")

    issued = now or datetime.now(timezone.utc)
    lifetime = expires_minutes if expires_minutes is not None else cfg.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    exp = issued + timedelta(minutes=lifetime)

    payload: Dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": int(issued.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=cfg.JWT_ALGORITHM)


def decode_access_token(token: str, *, settings_obj: Optional[Settings] = None) -> Dict[str, Any]:
    """Verify signature and expiry; raises jwt.InvalidTokenError subclasses."""
    cfg = settings_obj or settings
    if not token:
        raise ValueError("token_blank")
    if not cfg.JWT_SECRET:
        raise ValueError("jwt_secret_blank")
    return jwt.decode(token, cfg.JWT_SECRET, algorithms=[cfg.JWT_ALGORITHM])
