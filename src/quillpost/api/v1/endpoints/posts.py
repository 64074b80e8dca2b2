# src/quillpost/api/v1/endpoints/posts.py
"""Post endpoints for the Quillpost API."""

from fastapi import APIRouter, Depends, Query, Response, status

from quillpost.api.v1.dependencies import (
    AuthorDep,
    OptionalUserDep,
    PostServiceDep,
    read_rate_limit,
    write_rate_limit,
)
from quillpost.core.errors import NotFoundError
from quillpost.schemas.post import Post, PostCreate, PostList, PostStatus, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=PostList, dependencies=[Depends(read_rate_limit)])
async def list_posts(
    service: PostServiceDep,
    user: OptionalUserDep,
    status_filter: PostStatus | None = Query(None, alias="status", description="Filter by status"),
) -> PostList:
    """List posts, most recently published first.

    Anonymous readers only ever see published posts; authors may list drafts.
    """
    if user is None or not user.has_role("author"):
        if status_filter == "draft":
            return PostList(posts=[])
        status_filter = "published"
    return PostList(posts=service.list_posts(status_filter))


@router.get("/{slug}", response_model=Post, dependencies=[Depends(read_rate_limit)])
async def get_post(slug: str, service: PostServiceDep, user: OptionalUserDep) -> Post:
    """Get a post by slug.

    Raises:
        NotFoundError: If the slug is unknown, or the post is a draft and the
            caller is not an author.
    """
    post = service.get(slug)
    if post.status == "draft" and (user is None or not user.has_role("author")):
        raise NotFoundError(f"Post '{slug}' not found")
    if post.status == "published":
        service.record_view(post)
    return post


@router.post(
    "/",
    response_model=Post,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(write_rate_limit)],
)
async def create_post(payload: PostCreate, user: AuthorDep, service: PostServiceDep) -> Post:
    """Create a new post.

    Raises:
        SlugConflictError: If another post already uses the slug (409).
    """
    return service.create(payload, user)


@router.put("/{slug}", response_model=Post, dependencies=[Depends(write_rate_limit)])
async def update_post(
    slug: str,
    changes: PostUpdate,
    user: AuthorDep,
    service: PostServiceDep,
) -> Post:
    """Update a post; only its author or an admin may do so."""
    return service.update(slug, changes, user)


@router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(write_rate_limit)],
)
async def delete_post(slug: str, user: AuthorDep, service: PostServiceDep) -> Response:
    """Permanently delete a post; only its author or an admin may do so."""
    service.delete(slug, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
