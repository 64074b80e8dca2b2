"""Static page endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from quillpost.api.v1.dependencies import (
    AuthorDep,
    OptionalUserDep,
    PageServiceDep,
    read_rate_limit,
    write_rate_limit,
)
from quillpost.core.errors import NotFoundError
from quillpost.schemas.page import Page, PageCreate, PageUpdate
from quillpost.schemas.post import PostStatus
from quillpost.services.post_service import author_from_user

router = APIRouter(prefix="/pages", tags=["pages"])


@router.get("/", response_model=list[Page], dependencies=[Depends(read_rate_limit)])
async def list_pages(
    pages: PageServiceDep,
    user: OptionalUserDep,
    status_filter: PostStatus | None = Query(None, alias="status"),
) -> list[Page]:
    """List pages in menu order; anonymous readers see published pages only."""
    if user is None or not user.has_role("author"):
        status_filter = "published"
    return pages.list_pages(status_filter)


@router.get("/sidebar", response_model=list[Page], dependencies=[Depends(read_rate_limit)])
async def sidebar_pages(pages: PageServiceDep) -> list[Page]:
    return pages.sidebar()


@router.get("/{slug}", response_model=Page, dependencies=[Depends(read_rate_limit)])
async def get_page(slug: str, pages: PageServiceDep, user: OptionalUserDep) -> Page:
    page = pages.find_by_slug(slug)
    if page is None or (page.status == "draft" and (user is None or not user.has_role("author"))):
        raise NotFoundError(f"Page '{slug}' not found")
    return page


@router.post(
    "/",
    response_model=Page,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(write_rate_limit)],
)
async def create_page(payload: PageCreate, user: AuthorDep, pages: PageServiceDep) -> Page:
    return pages.create(payload, author_from_user(user))


@router.put("/{page_id}", response_model=Page, dependencies=[Depends(write_rate_limit)])
async def update_page(
    page_id: str,
    changes: PageUpdate,
    _: AuthorDep,
    pages: PageServiceDep,
) -> Page:
    return pages.update(page_id, changes)


@router.delete(
    "/{page_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(write_rate_limit)],
)
async def delete_page(page_id: str, _: AuthorDep, pages: PageServiceDep) -> Response:
    pages.delete(page_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
