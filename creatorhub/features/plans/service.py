"""
creatorhub/features/plans/service.py

Subscription plan service.

Handles:
- Creator-scoped plan CRUD
- Delete guard: a plan with ACTIVE subscriptions cannot be removed
- Public listing of a creator's active plans (paywall / marketing)
"""

from datetime import datetime, timezone
from typing import Any, List
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, insert, update, delete

from creatorhub.core.database import (
    Database,
    content_item_plans,
    subscription_plans,
    subscriptions,
)
from creatorhub.core.errors import BusinessRuleError, NotFoundError, PermissionError, ValidationError
from creatorhub.core.logging import log_event
from creatorhub.models.plan import PlanCreateRequest, PlanUpdateRequest, SubscriptionPlan
from creatorhub.models.subscription import SubscriptionStatus
from creatorhub.models.user import CurrentUser


ACTIVE_SUBSCRIPTIONS_MESSAGE = "Cannot delete plan with active subscriptions"


def row_to_plan(row) -> SubscriptionPlan:
    return SubscriptionPlan(
        id=row.id,
        creator_id=row.creator_id,
        name=row.name,
        price=row.price,
        description=row.description,
        features=list(row.features or []),
        interval_in_days=row.interval_in_days,
        is_active=row.is_active,
        content_access=row.content_access,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _load_owned_plan(session, caller: CurrentUser, plan_id: str, *, for_update: bool = False):
    stmt = select(subscription_plans).where(subscription_plans.c.id == plan_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = session.execute(stmt).first()
    if not row:
        raise NotFoundError("Subscription plan not found")
    if row.creator_id != caller.id:
        raise PermissionError("Forbidden")
    return row


def list_plans(db: Database, creator_id: str) -> List[SubscriptionPlan]:
    """All plans owned by the creator, newest first."""
    with db.session() as session:
        rows = session.execute(
            select(subscription_plans)
            .where(subscription_plans.c.creator_id == creator_id)
            .order_by(subscription_plans.c.created_at.desc(), subscription_plans.c.id.desc())
        ).all()
        return [row_to_plan(row) for row in rows]


def list_creator_active_plans(db: Database, creator_id: str) -> List[SubscriptionPlan]:
    """Plans a creator currently offers, cheapest first."""
    with db.session() as session:
        rows = session.execute(
            select(subscription_plans)
            .where(subscription_plans.c.creator_id == creator_id)
            .where(subscription_plans.c.is_active == True)
            .order_by(subscription_plans.c.price.asc(), subscription_plans.c.created_at.asc())
        ).all()
        return [row_to_plan(row) for row in rows]


def get_plan(db: Database, plan_id: str) -> SubscriptionPlan:
    """Get plan by ID. Readable by any authenticated caller."""
    with db.session() as session:
        row = session.execute(
            select(subscription_plans).where(subscription_plans.c.id == plan_id)
        ).first()
        if not row:
            raise NotFoundError("Subscription plan not found")
        return row_to_plan(row)


def create_plan(db: Database, creator: CurrentUser, payload: Any) -> SubscriptionPlan:
    """
    Validate and persist a new plan owned by `creator`.

    Any creatorId in the payload is ignored.

    Raises:
        ValidationError: payload does not match the plan schema
    """
    try:
        request = PlanCreateRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)

    now = datetime.now(timezone.utc)
    plan_id = str(uuid4())
    values = {
        "id": plan_id,
        "creator_id": creator.id,
        "name": request.name,
        "price": request.price,
        "description": request.description,
        "features": list(request.features),
        "interval_in_days": request.interval_in_days,
        "is_active": request.is_active,
        "content_access": request.content_access.model_dump(by_alias=True),
        "created_at": now,
        "updated_at": now,
    }
    with db.session() as session:
        session.execute(insert(subscription_plans).values(**values))

    log_event("info", "plan.created", user_id=creator.id, plan_id=plan_id, event_type="plan.created")
    return SubscriptionPlan(**values)


def update_plan(db: Database, caller: CurrentUser, plan_id: str, payload: Any) -> SubscriptionPlan:
    """
    Apply a partial update to a plan the caller owns.

    Order of checks: existence (404), ownership (403), then payload (400),
    so a non-owner is refused whatever they send.
    """
    with db.session() as session:
        _load_owned_plan(session, caller, plan_id, for_update=True)

        try:
            request = PlanUpdateRequest.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e)

        changes = request.model_dump(exclude_unset=True)
        if "content_access" in changes:
            changes["content_access"] = request.content_access.model_dump(by_alias=True)
        if "features" in changes:
            changes["features"] = list(changes["features"])
        changes["updated_at"] = datetime.now(timezone.utc)

        session.execute(
            update(subscription_plans)
            .where(subscription_plans.c.id == plan_id)
            .values(**changes)
        )
        row = session.execute(
            select(subscription_plans).where(subscription_plans.c.id == plan_id)
        ).first()
        plan = row_to_plan(row)

    log_event(
        "info",
        "plan.updated",
        user_id=caller.id,
        plan_id=plan_id,
        event_type="plan.updated",
        extra={"fields": ",".join(sorted(k for k in changes if k != "updated_at"))},
    )
    return plan


def delete_plan(db: Database, caller: CurrentUser, plan_id: str) -> None:
    """
    Delete a plan the caller owns, unless an ACTIVE subscription references it.

    The guard and the delete are one conditional statement in one
    transaction, so a subscription created concurrently either lands before
    the delete (and blocks it) or fails on the missing plan.
    """
    with db.session() as session:
        _load_owned_plan(session, caller, plan_id, for_update=True)

        active_exists = (
            select(subscriptions.c.id)
            .where(subscriptions.c.plan_id == plan_id)
            .where(subscriptions.c.status == SubscriptionStatus.ACTIVE.value)
            .exists()
        )
        result = session.execute(
            delete(subscription_plans)
            .where(subscription_plans.c.id == plan_id)
            .where(~active_exists)
        )
        if result.rowcount == 0:
            log_event(
                "warning",
                "plan.delete_blocked",
                user_id=caller.id,
                plan_id=plan_id,
                event_type="plan.delete_blocked",
                error_code="business_rule_violation",
            )
            raise BusinessRuleError(ACTIVE_SUBSCRIPTIONS_MESSAGE)

        # Keep subscription history; drop the plan from content gates
        session.execute(
            update(subscriptions)
            .where(subscriptions.c.plan_id == plan_id)
            .values(plan_id=None)
        )
        session.execute(
            delete(content_item_plans).where(content_item_plans.c.plan_id == plan_id)
        )

    log_event("info", "plan.deleted", user_id=caller.id, plan_id=plan_id, event_type="plan.deleted")
