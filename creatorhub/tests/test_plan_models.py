"""
Tests for plan, role and content models.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from creatorhub.models.content import REQUIRED_CAPABILITY, ContentType
from creatorhub.models.plan import CONTENT_ACCESS_FLAGS, ContentAccess, PlanCreateRequest, PlanUpdateRequest, SubscriptionPlan
from creatorhub.models.user import Role, bypasses_paywall, can_be_promoted, can_own_plans


def _access(**overrides):
    flags = {flag: False for flag in CONTENT_ACCESS_FLAGS}
    flags.update(overrides)
    return flags


def test_create_request_accepts_camel_case_payload():
    req = PlanCreateRequest.model_validate({
        "name": "Gold",
        "price": 19.5,
        "features": ["A", "B"],
        "intervalInDays": 30,
        "contentAccess": {
            "regularContent": True,
            "premiumVideos": True,
            "vrContent": False,
            "threeSixtyContent": False,
            "liveRooms": False,
            "interactiveModels": False,
        },
    })
    assert req.interval_in_days == 30
    assert req.is_active is True
    assert req.description is None
    assert req.content_access.premium_videos is True


def test_create_request_rejects_bool_price():
    with pytest.raises(ValidationError):
        PlanCreateRequest(name="x", price=True, features=[], interval_in_days=30, content_access=_access())


def test_content_access_flags_are_strict():
    with pytest.raises(ValidationError):
        ContentAccess.model_validate({**{f: False for f in ("regularContent", "premiumVideos", "vrContent", "threeSixtyContent", "liveRooms")}, "interactiveModels": "true"})


def test_update_request_tracks_only_supplied_fields():
    req = PlanUpdateRequest.model_validate({"price": 5})
    assert req.model_dump(exclude_unset=True) == {"price": 5.0}


def test_update_request_rejects_null():
    with pytest.raises(ValidationError):
        PlanUpdateRequest.model_validate({"isActive": None})


def test_plan_model_frozen():
    now = datetime.now(timezone.utc)
    plan = SubscriptionPlan(
        id="p1", creator_id="c1", name="Gold", price=9.99, features=[], interval_in_days=30,
        content_access=_access(regular_content=True), created_at=now, updated_at=now,
    )
    with pytest.raises(ValidationError):
        plan.name = "Modified"


def test_plan_serializes_camel_case_and_utc():
    naive = datetime(2026, 1, 2, 3, 4, 5)
    plan = SubscriptionPlan(
        id="p1", creator_id="c1", name="Gold", price=9.99, features=["x"], interval_in_days=30,
        content_access=_access(), created_at=naive, updated_at=naive,
    )
    dumped = plan.model_dump(by_alias=True, mode="json")
    assert dumped["creatorId"] == "c1"
    assert dumped["contentAccess"]["threeSixtyContent"] is False
    assert dumped["createdAt"] == "2026-01-02T03:04:05Z"


def test_every_content_type_maps_to_a_flag():
    assert set(REQUIRED_CAPABILITY) == set(ContentType)
    assert set(REQUIRED_CAPABILITY.values()) == set(CONTENT_ACCESS_FLAGS)


def test_role_capabilities():
    assert can_own_plans(Role.CREATOR) is True
    assert can_own_plans(Role.SUBSCRIBER) is False
    assert can_own_plans(Role.ADMIN) is False
    assert bypasses_paywall(Role.ADMIN) is True
    assert bypasses_paywall(Role.CREATOR) is False
    assert can_be_promoted(Role.SUBSCRIBER) is True
    assert can_be_promoted(Role.CREATOR) is False
    assert can_own_plans("CREATOR") is True
