"""Tests for static page endpoints."""

from fastapi import status


def _create_page(client, headers, slug="about", **fields):
    payload = {"slug": slug, "title": slug.title(), "content": "Page body", **fields}
    return client.post("/api/v1/pages/", json=payload, headers=headers)


def test_create_page_requires_author(client, reader_headers) -> None:
    assert _create_page(client, reader_headers).status_code == status.HTTP_403_FORBIDDEN
    assert _create_page(client, {}).status_code == status.HTTP_401_UNAUTHORIZED


def test_create_published_page_sets_published_at(client, author_headers) -> None:
    response = _create_page(client, author_headers, status="published", showInSidebar=True)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["publishedAt"] is not None
    assert data["showInSidebar"] is True
    assert data["author"]["email"] == "author@example.com"


def test_create_page_slug_conflict(client, author_headers) -> None:
    _create_page(client, author_headers)

    response = _create_page(client, author_headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert "about" in response.json()["detail"]


def test_list_pages_in_menu_order(client, author_headers) -> None:
    _create_page(client, author_headers, slug="contact", status="published", order=2)
    _create_page(client, author_headers, slug="about", status="published", order=1)
    _create_page(client, author_headers, slug="drafty", order=0)

    public = client.get("/api/v1/pages/").json()
    everything = client.get("/api/v1/pages/", headers=author_headers).json()

    assert [page["slug"] for page in public] == ["about", "contact"]
    assert [page["slug"] for page in everything] == ["drafty", "about", "contact"]


def test_sidebar_lists_flagged_published_pages(client, author_headers) -> None:
    _create_page(client, author_headers, slug="about", status="published", showInSidebar=True, order=2)
    _create_page(client, author_headers, slug="links", status="published", showInSidebar=True, order=1)
    _create_page(client, author_headers, slug="hidden", status="published")
    _create_page(client, author_headers, slug="draft-side", showInSidebar=True)

    response = client.get("/api/v1/pages/sidebar")

    assert response.status_code == status.HTTP_200_OK
    assert [page["slug"] for page in response.json()] == ["links", "about"]


def test_get_page_by_slug_hides_drafts(client, author_headers) -> None:
    _create_page(client, author_headers, slug="about", status="published")
    _create_page(client, author_headers, slug="wip")

    assert client.get("/api/v1/pages/about").json()["slug"] == "about"
    assert client.get("/api/v1/pages/wip").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/api/v1/pages/wip", headers=author_headers).status_code == status.HTTP_200_OK
    assert client.get("/api/v1/pages/missing").status_code == status.HTTP_404_NOT_FOUND


def test_update_page_first_publish(client, author_headers) -> None:
    page = _create_page(client, author_headers).json()
    assert page["publishedAt"] is None

    published = client.put(
        f"/api/v1/pages/{page['id']}",
        json={"status": "published", "metaDescription": "About us"},
        headers=author_headers,
    ).json()
    reverted = client.put(
        f"/api/v1/pages/{page['id']}", json={"status": "draft"}, headers=author_headers
    ).json()

    assert published["publishedAt"] is not None
    assert published["metaDescription"] == "About us"
    assert reverted["publishedAt"] == published["publishedAt"]
    assert reverted["slug"] == "about"


def test_update_missing_page_is_404(client, author_headers) -> None:
    response = client.put("/api/v1/pages/nope", json={"title": "x"}, headers=author_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_page(client, author_headers) -> None:
    page = _create_page(client, author_headers, status="published").json()

    response = client.delete(f"/api/v1/pages/{page['id']}", headers=author_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/pages/about").status_code == status.HTTP_404_NOT_FOUND


def test_unordered_pages_lead_the_menu(client, author_headers) -> None:
    _create_page(client, author_headers, slug="about", status="published", order=1)
    _create_page(client, author_headers, slug="colophon", status="published")

    response = client.get("/api/v1/pages/")

    assert [page["slug"] for page in response.json()] == ["colophon", "about"]
