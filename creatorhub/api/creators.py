"""Public-facing views of a creator: offered plans and content catalogue."""

from typing import List

from fastapi import APIRouter, Depends

from creatorhub.core.auth import authenticate
from creatorhub.core.database import Database, get_database
from creatorhub.features.content import service as content_service
from creatorhub.features.plans import service as plan_service
from creatorhub.models.content import ContentPreview
from creatorhub.models.plan import SubscriptionPlan
from creatorhub.models.user import CurrentUser

router = APIRouter()


@router.get("/{creator_id}/plans", response_model=List[SubscriptionPlan])
def creator_plans(creator_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    """Active plans only, cheapest first."""
    return plan_service.list_creator_active_plans(db, creator_id)


@router.get("/{creator_id}/content", response_model=List[ContentPreview])
def creator_content(creator_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return content_service.list_creator_content(db, creator_id)
