"""Comment endpoints: public submission per post plus admin moderation."""

from fastapi import APIRouter, Depends, Query, Response, status

from quillpost.api.v1.dependencies import (
    AdminDep,
    CommentServiceDep,
    OptionalUserDep,
    PostServiceDep,
    read_rate_limit,
    write_rate_limit,
)
from quillpost.core.errors import NotFoundError
from quillpost.schemas.comment import Comment, CommentCreate
from quillpost.schemas.post import Post
from quillpost.schemas.user import CurrentUser

post_comments_router = APIRouter(prefix="/posts/{slug}/comments", tags=["comments"])
router = APIRouter(prefix="/comments", tags=["comments"])


def _visible_post(slug: str, posts: PostServiceDep, user: CurrentUser | None) -> Post:
    post = posts.get(slug)
    if post.status == "draft" and (user is None or not user.has_role("author")):
        raise NotFoundError(f"Post '{slug}' not found")
    return post


@post_comments_router.get(
    "/",
    response_model=list[Comment],
    dependencies=[Depends(read_rate_limit)],
)
async def list_post_comments(
    slug: str,
    posts: PostServiceDep,
    comments: CommentServiceDep,
    user: OptionalUserDep,
    parent_id: str | None = Query(None, alias="parentId", description="Only replies to this comment"),
) -> list[Comment]:
    """List approved comments for a post.

    Without ``parentId`` this returns top-level comments newest first; with it,
    the replies to that comment oldest first.
    """
    post = _visible_post(slug, posts, user)
    return comments.thread(post.id, parent_id)


@post_comments_router.post(
    "/",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(write_rate_limit)],
)
async def create_comment(
    slug: str,
    payload: CommentCreate,
    posts: PostServiceDep,
    comments: CommentServiceDep,
    user: OptionalUserDep,
) -> Comment:
    """Submit a comment; it stays hidden until an admin approves it."""
    post = _visible_post(slug, posts, user)
    return comments.create(post.id, payload)


@router.get("/", response_model=list[Comment], dependencies=[Depends(read_rate_limit)])
async def list_all_comments(_: AdminDep, comments: CommentServiceDep) -> list[Comment]:
    """List every comment, approved or not, for moderation."""
    return comments.list_all()


@router.get("/{post_id}", response_model=list[Comment], dependencies=[Depends(read_rate_limit)])
async def list_comments_for_post(
    post_id: str,
    _: AdminDep,
    comments: CommentServiceDep,
    approved: bool = Query(False, description="List approved comments instead of the moderation queue"),
) -> list[Comment]:
    """List one post's comments by approval state, newest first."""
    return comments.list_for_post(post_id, approved=approved)


@router.post(
    "/{post_id}/{comment_id}/approve",
    response_model=Comment,
    dependencies=[Depends(write_rate_limit)],
)
async def approve_comment(
    post_id: str,
    comment_id: str,
    _: AdminDep,
    comments: CommentServiceDep,
) -> Comment:
    return comments.approve(comment_id, post_id)


@router.delete(
    "/{post_id}/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(write_rate_limit)],
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    _: AdminDep,
    comments: CommentServiceDep,
) -> Response:
    comments.delete(comment_id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
