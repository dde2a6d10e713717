from fastapi import APIRouter, Depends, status
from app.api.dependencies import get_user_service, require_token_claims
from app.core.security import TokenClaims
from app.schemas.blog import (
    AuthResponse,
    LoginRequest,
    LoginResponse,
    UserCreate,
    UserDetailEnvelope,
    UserEnvelope,
    UserListEnvelope,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, users: UserService = Depends(get_user_service)):
    """Register a new user and return it with an access token"""
    user, token = users.register(user_data.email, user_data.name, user_data.password)
    return {"user": user, "token": token}


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, users: UserService = Depends(get_user_service)):
    """Exchange email and password for an access token"""
    user, token = users.login(credentials.email, credentials.password)
    return {"user": user, "token": token}


# Declared before /{user_id} so "profile" is never parsed as an id
@router.get("/profile", response_model=UserDetailEnvelope)
def get_profile(
    claims: TokenClaims = Depends(require_token_claims),
    users: UserService = Depends(get_user_service),
):
    """Current user with their posts and comments"""
    return {"user": users.get_profile(claims.id)}


@router.get("", response_model=UserListEnvelope)
def list_users(users: UserService = Depends(get_user_service)):
    return {"users": users.list_users()}


@router.get("/{user_id}", response_model=UserDetailEnvelope)
def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return {"user": users.get_user(user_id)}


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, users: UserService = Depends(get_user_service)):
    """Create a user without logging them in"""
    user = users.create_user(user_data.email, user_data.name, user_data.password)
    return {"user": user}
