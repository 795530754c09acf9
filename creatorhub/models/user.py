"""
creatorhub/models/user.py

User identity, roles and role capability tables.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from creatorhub.models.common import UtcDateTime


class Role(str, Enum):
    CREATOR = "CREATOR"
    SUBSCRIBER = "SUBSCRIBER"
    ADMIN = "ADMIN"


# Capability tables: every Role must appear in each (checked below).
ROLE_CAN_OWN_PLANS: Dict[Role, bool] = {
    Role.CREATOR: True,
    Role.SUBSCRIBER: False,
    Role.ADMIN: False,
}

ROLE_BYPASSES_PAYWALL: Dict[Role, bool] = {
    Role.CREATOR: False,
    Role.SUBSCRIBER: False,
    Role.ADMIN: True,
}

ROLE_CAN_BE_PROMOTED: Dict[Role, bool] = {
    Role.CREATOR: False,
    Role.SUBSCRIBER: True,
    Role.ADMIN: False,
}

for _table_name, _table in (
    ("ROLE_CAN_OWN_PLANS", ROLE_CAN_OWN_PLANS),
    ("ROLE_BYPASSES_PAYWALL", ROLE_BYPASSES_PAYWALL),
    ("ROLE_CAN_BE_PROMOTED", ROLE_CAN_BE_PROMOTED),
):
    _missing = set(Role) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} is missing roles: {sorted(r.value for r in _missing)}")


def can_own_plans(role: Role) -> bool:
    return ROLE_CAN_OWN_PLANS[Role(role)]


def bypasses_paywall(role: Role) -> bool:
    return ROLE_BYPASSES_PAYWALL[Role(role)]


def can_be_promoted(role: Role) -> bool:
    return ROLE_CAN_BE_PROMOTED[Role(role)]


class CurrentUser(BaseModel):
    """Minimal identity projection attached to an authenticated request."""
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: Role


class User(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    role: Role
    display_name: Optional[str] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime

    def identity(self) -> CurrentUser:
        return CurrentUser(id=self.id, email=self.email, role=self.role)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=72)
    display_name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    email: str
    password: str


class AuthResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user: User
    access_token: str
