"""
creatorhub/models/subscription.py

Subscriptions link a subscriber to a creator's plan.
Only ACTIVE subscriptions grant access or block plan deletion.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic.alias_generators import to_camel

from creatorhub.models.common import UtcDateTime


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    plan_id: StrictStr


class Subscription(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    subscriber_id: str
    plan_id: Optional[str] = None
    creator_id: str
    status: SubscriptionStatus
    start_date: UtcDateTime
    end_date: Optional[UtcDateTime] = None
    cancelled_at: Optional[UtcDateTime] = None
    created_at: UtcDateTime
