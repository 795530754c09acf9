"""
creatorhub/features/content/access.py

The one place that decides whether a viewer may see a content item in full.

Every content-serving endpoint goes through `evaluate_access`; the decision
itself is the pure `decide_access` so it can be tested without a database.
"""

from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy import select

from creatorhub.core.database import Database, content_item_plans, content_items, content_purchases
from creatorhub.core.errors import NotFoundError
from creatorhub.features.subscriptions.service import active_plans_for_viewer
from creatorhub.models.content import (
    AccessDecision,
    AccessReason,
    ContentItem,
    ContentType,
    PurchaseStatus,
    REQUIRED_CAPABILITY,
)
from creatorhub.models.plan import SubscriptionPlan
from creatorhub.models.user import CurrentUser, bypasses_paywall


def _plan_unlocks(plan: SubscriptionPlan, item: ContentItem, permitted_plan_ids: Sequence[str]) -> bool:
    if plan.creator_id != item.creator_id:
        return False
    if permitted_plan_ids and plan.id not in permitted_plan_ids:
        return False
    return plan.content_access.allows(REQUIRED_CAPABILITY[ContentType(item.content_type)])


def decide_access(
    viewer: CurrentUser,
    item: ContentItem,
    *,
    subscribed_plans: Iterable[SubscriptionPlan] = (),
    permitted_plan_ids: Optional[Sequence[str]] = None,
    has_purchase: bool = False,
) -> AccessDecision:
    """
    Grant full access when any of these hold, checked in order:

    1. viewer created the item
    2. item is not premium
    3. viewer's role bypasses the paywall (ADMIN)
    4. an ACTIVE subscription plan of the item's creator carries the item's
       capability flag (and is among the item's permitted plans, if it lists any)
    5. viewer completed a one-off purchase of the item

    Otherwise the item stays behind the paywall.
    """
    if item.creator_id == viewer.id:
        return AccessDecision(granted=True, reason=AccessReason.OWNER)
    if not item.is_premium:
        return AccessDecision(granted=True, reason=AccessReason.NOT_PREMIUM)
    if bypasses_paywall(viewer.role):
        return AccessDecision(granted=True, reason=AccessReason.ADMIN)

    permitted = list(permitted_plan_ids if permitted_plan_ids is not None else item.plan_ids)
    if any(_plan_unlocks(plan, item, permitted) for plan in subscribed_plans):
        return AccessDecision(granted=True, reason=AccessReason.SUBSCRIPTION)
    if has_purchase:
        return AccessDecision(granted=True, reason=AccessReason.PURCHASE)
    return AccessDecision(granted=False, reason=AccessReason.PAYWALL)


def load_content_item(db: Database, content_id: str) -> ContentItem:
    with db.session() as session:
        row = session.execute(
            select(content_items).where(content_items.c.id == content_id)
        ).first()
        if not row:
            raise NotFoundError("Content not found")
        plan_ids = session.execute(
            select(content_item_plans.c.plan_id)
            .where(content_item_plans.c.content_id == content_id)
            .order_by(content_item_plans.c.plan_id)
        ).scalars().all()
        return ContentItem(
            id=row.id,
            creator_id=row.creator_id,
            title=row.title,
            description=row.description,
            content_type=ContentType(row.content_type),
            is_premium=row.is_premium,
            price=row.price,
            media_url=row.media_url,
            thumbnail_url=row.thumbnail_url,
            plan_ids=list(plan_ids),
            created_at=row.created_at,
        )


def has_completed_purchase(db: Database, buyer_id: str, content_id: str) -> bool:
    with db.session() as session:
        row = session.execute(
            select(content_purchases.c.id)
            .where(content_purchases.c.content_id == content_id)
            .where(content_purchases.c.buyer_id == buyer_id)
            .where(content_purchases.c.status == PurchaseStatus.COMPLETED.value)
        ).first()
        return row is not None


def evaluate_access(db: Database, viewer: CurrentUser, content_id: str) -> Tuple[ContentItem, AccessDecision]:
    """Load the item and everything the predicate needs, then decide."""
    item = load_content_item(db, content_id)
    decision = decide_access(viewer, item)
    if decision.granted:
        return item, decision

    decision = decide_access(
        viewer,
        item,
        subscribed_plans=active_plans_for_viewer(db, viewer.id, item.creator_id),
        permitted_plan_ids=item.plan_ids,
        has_purchase=has_completed_purchase(db, viewer.id, item.id),
    )
    return item, decision
