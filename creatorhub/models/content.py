"""
creatorhub/models/content.py

Content items, paywall previews and access decisions.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from pydantic.alias_generators import to_camel

from creatorhub.models.common import UtcDateTime
from creatorhub.models.plan import Price, SubscriptionPlan


class ContentType(str, Enum):
    REGULAR = "REGULAR"
    PREMIUM_VIDEO = "PREMIUM_VIDEO"
    VR = "VR"
    THREE_SIXTY = "THREE_SIXTY"
    LIVE_ROOM = "LIVE_ROOM"
    INTERACTIVE_MODEL = "INTERACTIVE_MODEL"


# Capability flag on ContentAccess each content type requires
REQUIRED_CAPABILITY: Dict[ContentType, str] = {
    ContentType.REGULAR: "regular_content",
    ContentType.PREMIUM_VIDEO: "premium_videos",
    ContentType.VR: "vr_content",
    ContentType.THREE_SIXTY: "three_sixty_content",
    ContentType.LIVE_ROOM: "live_rooms",
    ContentType.INTERACTIVE_MODEL: "interactive_models",
}

_unmapped = set(ContentType) - set(REQUIRED_CAPABILITY)
if _unmapped:
    raise RuntimeError(f"REQUIRED_CAPABILITY is missing content types: {sorted(t.value for t in _unmapped)}")


class AccessReason(str, Enum):
    OWNER = "owner"
    NOT_PREMIUM = "not_premium"
    ADMIN = "admin"
    SUBSCRIPTION = "subscription"
    PURCHASE = "purchase"
    PAYWALL = "paywall"


class PurchaseStatus(str, Enum):
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"


class AccessDecision(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    granted: bool
    reason: AccessReason


class ContentCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: StrictStr = Field(min_length=1, max_length=300)
    description: Optional[StrictStr] = None
    content_type: ContentType = ContentType.REGULAR
    is_premium: StrictBool = False
    price: Optional[Price] = None
    media_url: StrictStr = Field(min_length=1)
    thumbnail_url: Optional[StrictStr] = None
    plan_ids: List[StrictStr] = Field(default_factory=list)


class ContentItem(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    creator_id: str
    title: str
    description: Optional[str] = None
    content_type: ContentType
    is_premium: bool
    price: Optional[float] = None
    media_url: str
    thumbnail_url: Optional[str] = None
    plan_ids: List[str] = Field(default_factory=list)
    created_at: UtcDateTime


class ContentPreview(BaseModel):
    """What a viewer without access may see: never the media itself."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    creator_id: str
    title: str
    content_type: ContentType
    is_premium: bool
    price: Optional[float] = None
    thumbnail_url: Optional[str] = None
    available_plans: List[SubscriptionPlan] = Field(default_factory=list)


class ContentView(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    locked: bool
    access: AccessDecision
    content: Optional[ContentItem] = None
    preview: Optional[ContentPreview] = None


class Purchase(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    content_id: str
    buyer_id: str
    amount: float
    status: PurchaseStatus
    created_at: UtcDateTime
