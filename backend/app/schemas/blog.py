"""
Request and response schemas for users, posts and comments.

JSON keys are camelCase on the wire (authorId, createdAt) while the Python
side stays snake_case; requests accept either spelling. No schema here has a
password hash field, so ORM users can be returned directly.
"""

from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from app.core.database import MAX_ID

# Row ids as accepted on input; anything else cannot reference a row
RowId = Annotated[int, Field(gt=0, le=MAX_ID)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Requests
# -----------------------------

class UserCreate(CamelModel):
    email: str = Field(min_length=1)
    name: Optional[str] = None
    password: str = Field(min_length=1)


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PostCreate(CamelModel):
    title: str = Field(min_length=1)
    content: Optional[str] = None
    published: bool = False
    author_id: RowId


class CommentCreate(CamelModel):
    content: str = Field(min_length=1)
    author_id: RowId
    post_id: RowId


# Projections used inside other resources
# -----------------------------

class UserSummary(CamelModel):
    id: int
    email: str
    name: Optional[str]


class CommentAuthor(CamelModel):
    id: int
    name: Optional[str]


class PostTitle(CamelModel):
    id: int
    title: str


# Resources
# -----------------------------

class UserResponse(UserSummary):
    created_at: datetime


class PostResponse(CamelModel):
    id: int
    title: str
    content: Optional[str]
    published: bool
    created_at: datetime
    author_id: int


class CommentResponse(CamelModel):
    id: int
    content: str
    created_at: datetime
    author_id: int
    post_id: int


class UserListItem(UserResponse):
    posts: List[PostTitle]


class UserDetail(UserResponse):
    posts: List[PostResponse]
    comments: List[CommentResponse]


class PostListItem(PostResponse):
    author: UserSummary


class CommentWithAuthor(CommentResponse):
    author: CommentAuthor


class PostDetail(PostListItem):
    comments: List[CommentWithAuthor]


class CommentListItem(CommentWithAuthor):
    post: PostTitle


# Envelopes
# -----------------------------

class AuthResponse(CamelModel):
    user: UserResponse
    token: str


class LoginResponse(CamelModel):
    user: UserSummary
    token: str


class UserEnvelope(CamelModel):
    user: UserResponse


class UserDetailEnvelope(CamelModel):
    user: UserDetail


class UserListEnvelope(CamelModel):
    users: List[UserListItem]


class PostEnvelope(CamelModel):
    post: PostResponse


class PostDetailEnvelope(CamelModel):
    post: PostDetail


class PostListEnvelope(CamelModel):
    posts: List[PostListItem]


class CommentEnvelope(CamelModel):
    comment: CommentResponse


class CommentListEnvelope(CamelModel):
    comments: List[CommentListItem]
