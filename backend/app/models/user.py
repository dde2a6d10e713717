from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class User(Base):
    """
    User model representing blog authors.

    Stores login credentials and the display name shown next to posts and
    comments. Passwords are stored as bcrypt hashes (never plaintext) and
    the hash is never part of any response schema.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Unique constraint is the only guard against duplicate registrations
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        order_by="Post.id",
    )
    comments = relationship(
        "Comment",
        back_populates="author",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )
