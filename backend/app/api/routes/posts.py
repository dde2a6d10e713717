from fastapi import APIRouter, Depends, status
from app.api.dependencies import get_post_service
from app.schemas.blog import PostCreate, PostDetailEnvelope, PostEnvelope, PostListEnvelope
from app.services.post_service import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListEnvelope)
def list_posts(posts: PostService = Depends(get_post_service)):
    """List all posts with their authors"""
    return {"posts": posts.list_posts()}


@router.get("/{post_id}", response_model=PostDetailEnvelope)
def get_post(post_id: int, posts: PostService = Depends(get_post_service)):
    """Get a post with its author and comments"""
    return {"post": posts.get_post(post_id)}


@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
def create_post(post: PostCreate, posts: PostService = Depends(get_post_service)):
    db_post = posts.create_post(
        title=post.title,
        content=post.content,
        published=post.published,
        author_id=post.author_id,
    )
    return {"post": db_post}
