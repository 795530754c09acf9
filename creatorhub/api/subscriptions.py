"""Subscribe, list and cancel."""

from typing import Any, List

from fastapi import APIRouter, Body, Depends

from creatorhub.core.auth import authenticate
from creatorhub.core.database import Database, get_database
from creatorhub.features.subscriptions import service as subscription_service
from creatorhub.models.subscription import Subscription
from creatorhub.models.user import CurrentUser

router = APIRouter()


@router.post("", response_model=Subscription, status_code=201)
def subscribe(
    payload: Any = Body(None),
    user: CurrentUser = Depends(authenticate),
    db: Database = Depends(get_database),
):
    return subscription_service.subscribe(db, user, payload)


@router.get("", response_model=List[Subscription])
def list_subscriptions(user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return subscription_service.list_subscriptions(db, user.id)


@router.post("/{subscription_id}/cancel", response_model=Subscription)
def cancel_subscription(
    subscription_id: str,
    user: CurrentUser = Depends(authenticate),
    db: Database = Depends(get_database),
):
    return subscription_service.cancel_subscription(db, user, subscription_id)
