"""
creatorhub/models/plan.py

Subscription plan models.

A plan is a creator-defined tier: price, billing interval, marketing
features and six content-access capability flags.
"""

from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictBool, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from creatorhub.models.common import UtcDateTime


CONTENT_ACCESS_FLAGS = (
    "regular_content",
    "premium_videos",
    "vr_content",
    "three_sixty_content",
    "live_rooms",
    "interactive_models",
)


def _reject_non_numeric(value: Any) -> Any:
    # bool is an int subclass and numeric strings coerce in lax mode; neither is a number here
    if isinstance(value, (bool, str)):
        raise ValueError("Expected number")
    return value


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field may be omitted but not null")
    return value


def _reject_sub_cent(value: float) -> float:
    # Stored as Numeric(10, 2); anything finer would be rounded away
    if round(value, 2) != value:
        raise ValueError("Price must have at most 2 decimal places")
    return value


MAX_PRICE = 99_999_999.99
MAX_INTERVAL_DAYS = 3650

Price = Annotated[
    float, BeforeValidator(_reject_non_numeric), Field(gt=0, le=MAX_PRICE), AfterValidator(_reject_sub_cent)
]
IntervalDays = Annotated[int, BeforeValidator(_reject_non_numeric), Field(gt=0, le=MAX_INTERVAL_DAYS)]


class ContentAccess(BaseModel):
    """Capability flags a plan unlocks. All six are required."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    regular_content: StrictBool
    premium_videos: StrictBool
    vr_content: StrictBool
    three_sixty_content: StrictBool
    live_rooms: StrictBool
    interactive_models: StrictBool

    def allows(self, flag: str) -> bool:
        return bool(getattr(self, flag))


class PlanCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: StrictStr = Field(min_length=1)
    price: Price
    description: Optional[StrictStr] = None
    features: List[StrictStr]
    interval_in_days: IntervalDays
    is_active: StrictBool = True
    content_access: ContentAccess

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class PlanUpdateRequest(BaseModel):
    """Partial update: same rules as create, every field optional."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: Optional[StrictStr] = Field(default=None, min_length=1)
    price: Optional[Price] = None
    description: Optional[StrictStr] = None
    features: Optional[List[StrictStr]] = None
    interval_in_days: Optional[IntervalDays] = None
    is_active: Optional[StrictBool] = None
    content_access: Optional[ContentAccess] = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class SubscriptionPlan(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    creator_id: str
    name: str
    price: float
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    interval_in_days: int
    is_active: bool = True
    content_access: ContentAccess
    created_at: UtcDateTime
    updated_at: UtcDateTime
