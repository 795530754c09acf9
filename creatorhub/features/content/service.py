"""
creatorhub/features/content/service.py

Content items: creation, gated viewing and one-off purchases.

Handles:
- Creator-only content creation with optional permitted plans
- Locked/unlocked views built from the access gate
- Purchases of individually priced items (recorded as completed)
"""

from datetime import datetime, timezone
from typing import Any, List
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, insert
from sqlalchemy.exc import IntegrityError

from creatorhub.core.auth import ensure_creator
from creatorhub.core.database import (
    Database,
    content_item_plans,
    content_items,
    content_purchases,
    subscription_plans,
)
from creatorhub.core.errors import BusinessRuleError, ConflictError, ValidationError
from creatorhub.core.logging import log_event
from creatorhub.features.content.access import evaluate_access, load_content_item
from creatorhub.features.plans.service import list_creator_active_plans
from creatorhub.models.content import (
    ContentCreateRequest,
    ContentItem,
    ContentPreview,
    ContentType,
    ContentView,
    Purchase,
    PurchaseStatus,
)
from creatorhub.models.user import CurrentUser


def _preview(item: ContentItem, available_plans) -> ContentPreview:
    return ContentPreview(
        id=item.id,
        creator_id=item.creator_id,
        title=item.title,
        content_type=item.content_type,
        is_premium=item.is_premium,
        price=item.price,
        thumbnail_url=item.thumbnail_url,
        available_plans=list(available_plans),
    )


def create_content(db: Database, creator: CurrentUser, payload: Any) -> ContentItem:
    """
    Validate and persist a content item owned by `creator`.

    Raises:
        PermissionError: caller is not a creator
        ValidationError: payload does not match the content schema
        BusinessRuleError: a permitted plan is not one of the caller's plans
    """
    ensure_creator(creator)
    try:
        request = ContentCreateRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)

    plan_ids = sorted(set(request.plan_ids))
    now = datetime.now(timezone.utc)
    content_id = str(uuid4())
    values = {
        "id": content_id,
        "creator_id": creator.id,
        "title": request.title,
        "description": request.description,
        "content_type": request.content_type.value,
        "is_premium": request.is_premium,
        "price": request.price,
        "media_url": request.media_url,
        "thumbnail_url": request.thumbnail_url,
        "created_at": now,
    }

    with db.session() as session:
        if plan_ids:
            owned = set(
                session.execute(
                    select(subscription_plans.c.id)
                    .where(subscription_plans.c.id.in_(plan_ids))
                    .where(subscription_plans.c.creator_id == creator.id)
                ).scalars().all()
            )
            unknown = [pid for pid in plan_ids if pid not in owned]
            if unknown:
                raise BusinessRuleError(f"Plans not owned by creator: {', '.join(unknown)}")

        session.execute(insert(content_items).values(**values))
        for plan_id in plan_ids:
            session.execute(insert(content_item_plans).values(content_id=content_id, plan_id=plan_id))

    log_event(
        "info",
        "content.created",
        user_id=creator.id,
        event_type="content.created",
        extra={"content_id": content_id, "content_type": request.content_type.value},
    )
    return ContentItem(**{**values, "content_type": ContentType(values["content_type"]), "plan_ids": plan_ids})


def get_content_view(db: Database, viewer: CurrentUser, content_id: str) -> ContentView:
    """Full item when access is granted, otherwise a paywall preview."""
    item, decision = evaluate_access(db, viewer, content_id)
    if decision.granted:
        return ContentView(locked=False, access=decision, content=item)

    log_event(
        "info",
        "content.access_denied",
        user_id=viewer.id,
        event_type="content.access_denied",
        extra={"content_id": item.id, "reason": decision.reason.value},
    )
    return ContentView(
        locked=True,
        access=decision,
        preview=_preview(item, list_creator_active_plans(db, item.creator_id)),
    )


def purchase_content(db: Database, buyer: CurrentUser, content_id: str) -> Purchase:
    """
    Record a one-off purchase of a priced item.

    No payment provider is called; the purchase is stored as COMPLETED.
    """
    item = load_content_item(db, content_id)
    if not item.price:
        raise BusinessRuleError("Content is not available for individual purchase")
    if item.creator_id == buyer.id:
        raise BusinessRuleError("Cannot purchase your own content")

    now = datetime.now(timezone.utc)
    values = {
        "id": str(uuid4()),
        "content_id": item.id,
        "buyer_id": buyer.id,
        "amount": item.price,
        "status": PurchaseStatus.COMPLETED.value,
        "created_at": now,
    }
    try:
        with db.session() as session:
            existing = session.execute(
                select(content_purchases.c.id)
                .where(content_purchases.c.content_id == item.id)
                .where(content_purchases.c.buyer_id == buyer.id)
            ).first()
            if existing:
                raise ConflictError("Content already purchased")
            session.execute(insert(content_purchases).values(**values))
    except IntegrityError:
        raise ConflictError("Content already purchased")

    log_event(
        "info",
        "content.purchased",
        user_id=buyer.id,
        event_type="content.purchased",
        extra={"content_id": item.id, "amount": item.price},
    )
    return Purchase(**values)


def list_creator_content(db: Database, creator_id: str) -> List[ContentPreview]:
    """A creator's catalogue as previews, newest first."""
    with db.session() as session:
        rows = session.execute(
            select(content_items)
            .where(content_items.c.creator_id == creator_id)
            .order_by(content_items.c.created_at.desc(), content_items.c.id.desc())
        ).all()
        items = [
            ContentPreview(
                id=row.id,
                creator_id=row.creator_id,
                title=row.title,
                content_type=ContentType(row.content_type),
                is_premium=row.is_premium,
                price=row.price,
                thumbnail_url=row.thumbnail_url,
            )
            for row in rows
        ]
    return items
