"""Service-level tests for plan ownership checks and the delete guard."""

import pytest
from sqlalchemy import func, select

from creatorhub.core.database import content_item_plans, subscription_plans
from creatorhub.core.errors import BusinessRuleError, NotFoundError, PermissionError, ValidationError
from creatorhub.features.content.service import create_content
from creatorhub.features.plans.service import create_plan, delete_plan, get_plan, update_plan
from creatorhub.features.subscriptions.service import cancel_subscription, subscribe
from creatorhub.models.plan import CONTENT_ACCESS_FLAGS
from creatorhub.models.user import Role


def payload(**overrides):
    body = {
        "name": "Gold",
        "price": 9.99,
        "features": ["A"],
        "interval_in_days": 30,
        "content_access": {flag: True for flag in CONTENT_ACCESS_FLAGS},
    }
    body.update(overrides)
    return body


def _plan_count(db):
    with db.session() as session:
        return session.execute(select(func.count()).select_from(subscription_plans)).scalar_one()


def test_create_plan_accepts_snake_case_and_stores_creator(db, make_user):
    creator = make_user(Role.CREATOR).identity()
    plan = create_plan(db, creator, payload())
    assert plan.creator_id == creator.id
    assert get_plan(db, plan.id) == plan


def test_create_plan_raises_structured_validation_error(db, make_user):
    creator = make_user(Role.CREATOR).identity()
    with pytest.raises(ValidationError) as exc:
        create_plan(db, creator, payload(price=-1))
    assert [e["loc"] for e in exc.value.errors] == [["price"]]
    assert _plan_count(db) == 0


def test_update_checks_ownership_before_payload(db, make_user):
    owner = make_user(Role.CREATOR).identity()
    intruder = make_user(Role.CREATOR).identity()
    plan = create_plan(db, owner, payload())

    with pytest.raises(PermissionError):
        update_plan(db, intruder, plan.id, {"price": "not a number"})
    with pytest.raises(ValidationError):
        update_plan(db, owner, plan.id, {"price": "not a number"})
    with pytest.raises(NotFoundError):
        update_plan(db, owner, "missing", {"price": 1})


def test_update_bumps_updated_at(db, make_user):
    owner = make_user(Role.CREATOR).identity()
    plan = create_plan(db, owner, payload())
    updated = update_plan(db, owner, plan.id, {"name": "Platinum"})
    assert updated.name == "Platinum"
    assert updated.updated_at >= plan.updated_at
    assert updated.created_at == plan.created_at


def test_delete_guard_blocks_then_allows(db, make_user):
    owner = make_user(Role.CREATOR).identity()
    fan = make_user().identity()
    plan = create_plan(db, owner, payload())
    sub = subscribe(db, fan, {"planId": plan.id})

    with pytest.raises(BusinessRuleError) as exc:
        delete_plan(db, owner, plan.id)
    assert exc.value.message == "Cannot delete plan with active subscriptions"
    assert _plan_count(db) == 1

    cancel_subscription(db, fan, sub.id)
    delete_plan(db, owner, plan.id)
    assert _plan_count(db) == 0
    with pytest.raises(NotFoundError):
        delete_plan(db, owner, plan.id)


def test_delete_detaches_plan_from_content(db, make_user):
    owner = make_user(Role.CREATOR).identity()
    plan = create_plan(db, owner, payload())
    create_content(db, owner, {"title": "Clip", "mediaUrl": "https://cdn.example.com/c.mp4", "planIds": [plan.id]})

    delete_plan(db, owner, plan.id)

    with db.session() as session:
        remaining = session.execute(select(func.count()).select_from(content_item_plans)).scalar_one()
    assert remaining == 0


def test_delete_by_non_owner_is_forbidden(db, make_user):
    owner = make_user(Role.CREATOR).identity()
    intruder = make_user(Role.CREATOR).identity()
    plan = create_plan(db, owner, payload())
    with pytest.raises(PermissionError):
        delete_plan(db, intruder, plan.id)
    assert _plan_count(db) == 1
