import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload
from app.core.database import MAX_ID
from app.core.exceptions import InternalError, NotFoundError, ValidationError
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, db: Session):
        self.db = db

    def list_posts(self) -> List[Post]:
        """All posts with their author loaded"""
        return (
            self.db.query(Post)
            .options(joinedload(Post.author))
            .order_by(Post.id)
            .all()
        )

    def get_post(self, post_id: int) -> Post:
        """One post with its author and its comments (each with author)"""
        if not 0 < post_id <= MAX_ID:
            raise NotFoundError("Post", post_id)
        post = (
            self.db.query(Post)
            .options(
                joinedload(Post.author),
                selectinload(Post.comments).joinedload(Comment.author),
            )
            .filter(Post.id == post_id)
            .first()
        )
        if post is None:
            raise NotFoundError("Post", post_id)
        return post

    def create_post(
        self,
        title: str,
        author_id: int,
        content: Optional[str] = None,
        published: bool = False,
    ) -> Post:
        """
        Create a post owned by an existing user.

        Raises ValidationError if author_id does not reference a user; the
        foreign key on posts.author_id backs the same rule at the database.
        """
        if not 0 < author_id <= MAX_ID or self.db.get(User, author_id) is None:
            raise ValidationError(f"Author {author_id} does not exist", field="authorId")

        db_post = Post(
            title=title,
            content=content,
            published=published,
            author_id=author_id,
        )
        self.db.add(db_post)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError(f"Author {author_id} does not exist", field="authorId")
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Database error while creating post", exc_info=True)
            raise InternalError()

        self.db.refresh(db_post)
        return db_post
