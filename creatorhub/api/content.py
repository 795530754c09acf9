"""
Content routes. Every read goes through the access gate in
features.content.access.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from creatorhub.core.auth import authenticate, require_creator
from creatorhub.core.database import Database, get_database
from creatorhub.features.content import service as content_service
from creatorhub.features.content.access import evaluate_access
from creatorhub.models.content import AccessDecision, ContentItem, ContentView, Purchase
from creatorhub.models.user import CurrentUser

router = APIRouter()


@router.post("", response_model=ContentItem, status_code=201)
def create_content(
    payload: Any = Body(None),
    creator: CurrentUser = Depends(require_creator),
    db: Database = Depends(get_database),
):
    return content_service.create_content(db, creator, payload)


@router.get("/{content_id}", response_model=ContentView)
def get_content(content_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return content_service.get_content_view(db, user, content_id)


@router.get("/{content_id}/access", response_model=AccessDecision)
def check_access(content_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    _, decision = evaluate_access(db, user, content_id)
    return decision


@router.post("/{content_id}/purchase", response_model=Purchase, status_code=201)
def purchase_content(content_id: str, user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return content_service.purchase_content(db, user, content_id)
