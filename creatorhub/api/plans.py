"""
Subscription plan routes.

POST and PUT take the raw JSON body: the service validates it, after the
ownership check for updates.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response

from creatorhub.core.auth import authenticate, require_creator
from creatorhub.core.database import Database, get_database
from creatorhub.features.plans import service as plan_service
from creatorhub.models.plan import SubscriptionPlan
from creatorhub.models.user import CurrentUser

router = APIRouter()


@router.get("", response_model=List[SubscriptionPlan])
def list_plans(creator: CurrentUser = Depends(require_creator), db: Database = Depends(get_database)):
    """The calling creator's plans, newest first."""
    return plan_service.list_plans(db, creator.id)


@router.get("/{plan_id}", response_model=SubscriptionPlan)
def get_plan(plan_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return plan_service.get_plan(db, plan_id)


@router.post("", response_model=SubscriptionPlan, status_code=201)
def create_plan(
    payload: Any = Body(None),
    creator: CurrentUser = Depends(require_creator),
    db: Database = Depends(get_database),
):
    return plan_service.create_plan(db, creator, payload)


@router.put("/{plan_id}", response_model=SubscriptionPlan)
def update_plan(
    plan_id: str,
    payload: Any = Body(None),
    creator: CurrentUser = Depends(require_creator),
    db: Database = Depends(get_database),
):
    return plan_service.update_plan(db, creator, plan_id, payload)


@router.delete("/{plan_id}", status_code=204)
def delete_plan(plan_id: str, creator: CurrentUser = Depends(require_creator), db: Database = Depends(get_database)):
    plan_service.delete_plan(db, creator, plan_id)
    return Response(status_code=204)
