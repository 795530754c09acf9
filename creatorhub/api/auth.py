"""Registration and login."""

from fastapi import APIRouter, Depends

from creatorhub.core.database import Database, get_database
from creatorhub.core.security import create_access_token
from creatorhub.features.users import service as user_service
from creatorhub.models.user import AuthResponse, LoginRequest, RegisterRequest

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(req: RegisterRequest, db: Database = Depends(get_database)):
    """Create a SUBSCRIBER account and return it with an access token."""
    user = user_service.register_user(db, req.email, req.password, display_name=req.display_name)
    return AuthResponse(user=user, access_token=create_access_token(user.identity()))


@router.post("/login", response_model=AuthResponse)
def login(req: LoginRequest, db: Database = Depends(get_database)):
    user = user_service.authenticate_credentials(db, req.email, req.password)
    return AuthResponse(user=user, access_token=create_access_token(user.identity()))
