"""
creatorhub/features/subscriptions/service.py

Subscriber-side subscription lifecycle: subscribe, list, cancel.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select, insert, update

from creatorhub.core.database import Database, subscription_plans, subscriptions
from creatorhub.core.errors import BusinessRuleError, ConflictError, NotFoundError, PermissionError, ValidationError
from creatorhub.core.logging import log_event
from creatorhub.features.plans.service import row_to_plan
from creatorhub.models.plan import SubscriptionPlan
from creatorhub.models.subscription import SubscribeRequest, Subscription, SubscriptionStatus
from creatorhub.models.user import CurrentUser


def _row_to_subscription(row) -> Subscription:
    return Subscription(
        id=row.id,
        subscriber_id=row.subscriber_id,
        plan_id=row.plan_id,
        creator_id=row.creator_id,
        status=SubscriptionStatus(row.status),
        start_date=row.start_date,
        end_date=row.end_date,
        cancelled_at=row.cancelled_at,
        created_at=row.created_at,
    )


def subscribe(db: Database, subscriber: CurrentUser, payload: Any) -> Subscription:
    """
    Start an ACTIVE subscription to a plan.

    Raises:
        ValidationError: body missing planId
        NotFoundError: plan does not exist
        BusinessRuleError: plan inactive, or subscriber owns the plan
        ConflictError: subscriber already has an ACTIVE subscription to it
    """
    try:
        request = SubscribeRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)

    now = datetime.now(timezone.utc)
    subscription_id = str(uuid4())

    with db.session() as session:
        plan = session.execute(
            select(subscription_plans).where(subscription_plans.c.id == request.plan_id)
        ).first()
        if not plan:
            raise NotFoundError("Subscription plan not found")
        if not plan.is_active:
            raise BusinessRuleError("Subscription plan is not active")
        if plan.creator_id == subscriber.id:
            raise BusinessRuleError("Cannot subscribe to your own plan")

        existing = session.execute(
            select(subscriptions.c.id)
            .where(subscriptions.c.subscriber_id == subscriber.id)
            .where(subscriptions.c.plan_id == plan.id)
            .where(subscriptions.c.status == SubscriptionStatus.ACTIVE.value)
        ).first()
        if existing:
            raise ConflictError("Already subscribed to this plan")

        values = {
            "id": subscription_id,
            "subscriber_id": subscriber.id,
            "plan_id": plan.id,
            "creator_id": plan.creator_id,
            "status": SubscriptionStatus.ACTIVE.value,
            "start_date": now,
            "end_date": now + timedelta(days=plan.interval_in_days),
            "cancelled_at": None,
            "created_at": now,
        }
        session.execute(insert(subscriptions).values(**values))

    log_event(
        "info",
        "subscription.created",
        user_id=subscriber.id,
        plan_id=values["plan_id"],
        event_type="subscription.created",
    )
    return Subscription(**values)


def list_subscriptions(db: Database, subscriber_id: str) -> List[Subscription]:
    with db.session() as session:
        rows = session.execute(
            select(subscriptions)
            .where(subscriptions.c.subscriber_id == subscriber_id)
            .order_by(subscriptions.c.created_at.desc(), subscriptions.c.id.desc())
        ).all()
        return [_row_to_subscription(row) for row in rows]


def cancel_subscription(db: Database, caller: CurrentUser, subscription_id: str) -> Subscription:
    """Cancel one of the caller's ACTIVE subscriptions."""
    now = datetime.now(timezone.utc)
    with db.session() as session:
        row = session.execute(
            select(subscriptions).where(subscriptions.c.id == subscription_id).with_for_update()
        ).first()
        if not row:
            raise NotFoundError("Subscription not found")
        if row.subscriber_id != caller.id:
            raise PermissionError("Not authorized to cancel this subscription")
        if row.status != SubscriptionStatus.ACTIVE.value:
            raise BusinessRuleError("Subscription is not active")

        session.execute(
            update(subscriptions)
            .where(subscriptions.c.id == subscription_id)
            .values(status=SubscriptionStatus.CANCELLED.value, cancelled_at=now)
        )
        updated = session.execute(
            select(subscriptions).where(subscriptions.c.id == subscription_id)
        ).first()
        subscription = _row_to_subscription(updated)

    log_event(
        "info",
        "subscription.cancelled",
        user_id=caller.id,
        plan_id=subscription.plan_id,
        event_type="subscription.cancelled",
    )
    return subscription


def active_plans_for_viewer(db: Database, viewer_id: str, creator_id: str) -> List[SubscriptionPlan]:
    """Plans behind the viewer's ACTIVE, unlapsed subscriptions to one creator."""
    now = datetime.now(timezone.utc)
    with db.session() as session:
        rows = session.execute(
            select(subscription_plans)
            .join(subscriptions, subscriptions.c.plan_id == subscription_plans.c.id)
            .where(subscriptions.c.subscriber_id == viewer_id)
            .where(subscriptions.c.creator_id == creator_id)
            .where(subscriptions.c.status == SubscriptionStatus.ACTIVE.value)
            .where(or_(subscriptions.c.end_date.is_(None), subscriptions.c.end_date > now))
        ).all()
        return [row_to_plan(row) for row in rows]
