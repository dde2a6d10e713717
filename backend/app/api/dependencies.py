from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import TokenClaims, extract_bearer_token, verify_token
from app.services.comment_service import CommentService
from app.services.post_service import PostService
from app.services.user_service import UserService


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_post_service(db: Session = Depends(get_db)) -> PostService:
    return PostService(db)


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    return CommentService(db)


def require_token_claims(
    authorization: Optional[str] = Header(default=None),
) -> TokenClaims:
    """
    Guard for protected routes.

    Reads the Authorization header, rejects a missing or malformed one with
    UnauthorizedError before any verification, then verifies the token and
    returns its claims. Invalid or expired tokens raise InvalidTokenError.
    Both become a 401 in the exception handlers.
    """
    token = extract_bearer_token(authorization)
    return verify_token(token)
