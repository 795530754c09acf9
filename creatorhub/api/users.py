"""Current-user profile and the become-creator flow."""

from fastapi import APIRouter, Depends

from creatorhub.core.auth import authenticate
from creatorhub.core.database import Database, get_database
from creatorhub.features.users import service as user_service
from creatorhub.models.user import CurrentUser, User

router = APIRouter()


@router.get("/me", response_model=User)
def get_me(user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    return user_service.get_current_profile(db, user)


@router.post("/me/creator", response_model=User)
def become_creator(user: CurrentUser = Depends(authenticate), db: Database = Depends(get_database)):
    """
    Promote the caller to CREATOR.

    Tokens carry the role at issue time but `authenticate` reloads the user
    row, so the existing token works for creator routes straight away.
    """
    return user_service.promote_to_creator(db, user)
