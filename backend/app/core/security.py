from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from app.core.config import settings
from app.core.exceptions import InvalidTokenError, UnauthorizedError

# CryptContext handles password hashing using bcrypt
# bcrypt generates a random salt per hash and embeds it in the result
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Compared against on logins for unknown emails so both failure paths do a bcrypt check
_dummy_hash: Optional[str] = None


class TokenClaims(BaseModel):
    """Identity carried inside a verified access token"""
    id: int
    email: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def burn_password_check(plain_password: str) -> None:
    """Run a throwaway bcrypt verify so a missing user costs the same as a wrong password"""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash("dummy-password-for-timing")
    pwd_context.verify(plain_password, _dummy_hash)


def issue_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT carrying the user's id and email"""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "id": user_id,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }

    # Algorithm must match in decode - changing this breaks all existing tokens
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """
    Decode and verify a JWT token.

    Raises InvalidTokenError if the signature does not match, the token is
    malformed or expired, or the identity claims are missing.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise InvalidTokenError()

    user_id = payload.get("id")
    email = payload.get("email")
    # bool is an int subclass and must not pass as an id
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
        raise InvalidTokenError()

    return TokenClaims(id=user_id, email=email)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an "Authorization: Bearer <token>" header value.

    Raises UnauthorizedError when the header is absent or malformed. No
    signature check happens here.
    """
    if not authorization:
        raise UnauthorizedError("Authorization header missing")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise UnauthorizedError("Authorization header must be 'Bearer <token>'")

    return token
