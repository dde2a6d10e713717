from fastapi import APIRouter, Depends, status
from app.api.dependencies import get_comment_service
from app.schemas.blog import CommentCreate, CommentEnvelope, CommentListEnvelope
from app.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=CommentListEnvelope)
def list_comments(comments: CommentService = Depends(get_comment_service)):
    """List all comments with their author and post"""
    return {"comments": comments.list_comments()}


@router.post("", response_model=CommentEnvelope, status_code=status.HTTP_201_CREATED)
def create_comment(comment: CommentCreate, comments: CommentService = Depends(get_comment_service)):
    db_comment = comments.create_comment(
        content=comment.content,
        author_id=comment.author_id,
        post_id=comment.post_id,
    )
    return {"comment": db_comment}
