import logging
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from app.core.database import MAX_ID
from app.core.exceptions import DuplicateEmailError, InternalError, InvalidCredentialsError, NotFoundError
from app.core.security import burn_password_check, get_password_hash, issue_token, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


def _is_duplicate_email(exc: IntegrityError) -> bool:
    """
    True when the failed insert hit the unique constraint on users.email.

    SQLite reports "UNIQUE constraint failed: users.email"; PostgreSQL reports
    a "duplicate key ... unique constraint "ix_users_email"" violation.
    """
    message = str(exc.orig).lower()
    return "email" in message and ("unique" in message or "duplicate" in message)


class UserService:
    """
    Credential store: user registration, login and user reads.

    Built per request around the request's session (see
    app.api.dependencies.get_user_service).
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert_user(self, email: str, name: Optional[str], password: str) -> User:
        # No existence check first: the unique constraint on users.email decides,
        # so two concurrent registrations cannot both succeed
        db_user = User(
            email=email,
            name=name,
            hashed_password=get_password_hash(password),
        )
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if not _is_duplicate_email(exc):
                logger.error("Integrity error while creating user %s", email, exc_info=True)
                raise InternalError()
            logger.info("Rejected duplicate registration for %s", email)
            raise DuplicateEmailError()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Database error while creating user %s", email, exc_info=True)
            raise InternalError()

        # Refresh to load auto-generated fields (id, created_at)
        self.db.refresh(db_user)
        return db_user

    def register(self, email: str, name: Optional[str], password: str) -> Tuple[User, str]:
        """Create a user and hand back a token for it"""
        user = self._insert_user(email, name, password)
        logger.info("Registered user %s", user.id)
        return user, issue_token(user.id, user.email)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue a fresh token.

        An unknown email and a wrong password raise the same error, and both
        run one bcrypt verification.
        """
        user = self.db.query(User).filter(User.email == email).first()

        if user is None:
            burn_password_check(password)
            logger.info("Login failed: no such user")
            raise InvalidCredentialsError()

        if not verify_password(password, user.hashed_password):
            logger.info("Login failed for user %s", user.id)
            raise InvalidCredentialsError()

        return user, issue_token(user.id, user.email)

    def create_user(self, email: str, name: Optional[str], password: str) -> User:
        """Plain user creation without issuing a token"""
        return self._insert_user(email, name, password)

    def list_users(self) -> List[User]:
        return (
            self.db.query(User)
            .options(selectinload(User.posts))
            .order_by(User.id)
            .all()
        )

    def get_user(self, user_id: int) -> User:
        """Fetch one user with their posts and comments"""
        if not 0 < user_id <= MAX_ID:
            raise NotFoundError("User", user_id)
        user = (
            self.db.query(User)
            .options(selectinload(User.posts), selectinload(User.comments))
            .filter(User.id == user_id)
            .first()
        )
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_profile(self, user_id: int) -> User:
        """The authenticated user's own record; the token may outlive the row"""
        return self.get_user(user_id)
