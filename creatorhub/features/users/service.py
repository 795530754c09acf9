"""
User domain service.
- register_user(db, email, password)
- authenticate_credentials(db, email, password)
- get_user(db, user_id)
- promote_to_creator(db, user)
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError

from creatorhub.core.database import Database, users
from creatorhub.core.errors import AuthenticationError, BusinessRuleError, ConflictError, NotFoundError
from creatorhub.core.logging import log_event
from creatorhub.core.security import hash_password, verify_password
from creatorhub.models.user import CurrentUser, Role, User, can_be_promoted


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        role=Role(row.role),
        display_name=row.display_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def get_user(db: Database, user_id: str) -> Optional[User]:
    with db.session() as session:
        row = session.execute(select(users).where(users.c.id == user_id)).first()
        if not row:
            return None
        return _row_to_user(row)


def get_user_by_email(db: Database, email: str) -> Optional[User]:
    with db.session() as session:
        row = session.execute(select(users).where(users.c.email == normalize_email(email))).first()
        if not row:
            return None
        return _row_to_user(row)


def create_user(
    db: Database,
    email: str,
    password: Optional[str] = None,
    *,
    role: Role = Role.SUBSCRIBER,
    display_name: Optional[str] = None,
) -> User:
    """Insert a user row. Raises ConflictError on duplicate email."""
    now = datetime.now(timezone.utc)
    user_id = str(uuid4())
    normalized = normalize_email(email)
    try:
        with db.session() as session:
            session.execute(
                insert(users).values(
                    id=user_id,
                    email=normalized,
                    password_hash=hash_password(password) if password else None,
                    display_name=display_name.strip() if display_name and display_name.strip() else None,
                    role=Role(role).value,
                    created_at=now,
                    updated_at=now,
                )
            )
    except IntegrityError:
        raise ConflictError("A user with this email already exists")

    log_event("info", "user.registered", user_id=user_id, event_type="user.registered", extra={"role": Role(role).value})
    return User(
        id=user_id,
        email=normalized,
        role=Role(role),
        display_name=display_name.strip() if display_name and display_name.strip() else None,
        created_at=now,
        updated_at=now,
    )


def register_user(
    db: Database,
    email: str,
    password: str,
    display_name: Optional[str] = None,
    role: Role = Role.SUBSCRIBER,
) -> User:
    """Register a new account. The HTTP route never passes `role`."""
    if get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")
    return create_user(db, email, password, role=role, display_name=display_name)


def get_current_profile(db: Database, user: CurrentUser) -> User:
    profile = get_user(db, user.id)
    if not profile:
        raise NotFoundError("User not found")
    return profile


def authenticate_credentials(db: Database, email: str, password: str) -> User:
    with db.session() as session:
        row = session.execute(select(users).where(users.c.email == normalize_email(email))).first()
    if not row or not verify_password(password, row.password_hash):
        log_event("warning", "auth.login_failed", event_type="auth.login_failed", error_code="unauthorized")
        raise AuthenticationError("Invalid credentials")
    return _row_to_user(row)


def promote_to_creator(db: Database, user: CurrentUser) -> User:
    """Turn a subscriber into a creator so they can own plans and content."""
    existing = get_user(db, user.id)
    if not existing:
        raise NotFoundError("User not found")
    if not can_be_promoted(existing.role):
        raise BusinessRuleError(f"Users with role {existing.role.value} cannot become creators")

    now = datetime.now(timezone.utc)
    with db.session() as session:
        session.execute(
            update(users)
            .where(users.c.id == user.id)
            .values(role=Role.CREATOR.value, updated_at=now)
        )

    log_event("info", "user.promoted", user_id=user.id, event_type="user.promoted")
    return existing.model_copy(update={"role": Role.CREATOR, "updated_at": now})
