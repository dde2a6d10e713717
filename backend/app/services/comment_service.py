import logging
from typing import List
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from app.core.database import MAX_ID
from app.core.exceptions import InternalError, ValidationError
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: Session):
        self.db = db

    def list_comments(self) -> List[Comment]:
        """All comments with their author and parent post loaded"""
        return (
            self.db.query(Comment)
            .options(joinedload(Comment.author), joinedload(Comment.post))
            .order_by(Comment.id)
            .all()
        )

    def create_comment(self, content: str, author_id: int, post_id: int) -> Comment:
        """Create a comment; both the author and the post must already exist"""
        if not 0 < author_id <= MAX_ID or self.db.get(User, author_id) is None:
            raise ValidationError(f"Author {author_id} does not exist", field="authorId")
        if not 0 < post_id <= MAX_ID or self.db.get(Post, post_id) is None:
            raise ValidationError(f"Post {post_id} does not exist", field="postId")

        db_comment = Comment(content=content, author_id=author_id, post_id=post_id)
        self.db.add(db_comment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("Comment references a missing author or post")
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Database error while creating comment", exc_info=True)
            raise InternalError()

        self.db.refresh(db_comment)
        return db_comment
