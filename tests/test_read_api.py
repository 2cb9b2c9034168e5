from unittest.mock import AsyncMock, patch

import pytest

from conftest import cookie_header

API = "/api/v1"


@pytest.fixture()
def alice(register):
    return register("alice")


@pytest.fixture()
def bob(register):
    return register("bob")


def _add(client, record, title, **fields):
    data = {"url": f"https://example.com/{title}", "title": title, "category": "null", **fields}
    body = client.post(f"{API}/actions/add-new-bookmark", data=data, headers=cookie_header(record)).json()
    assert body["success"] is True, body
    return body["bookmark"]


@pytest.mark.parametrize("path", ["/categories", "/categories/count", "/bookmarks", "/bookmarks/count", "/tags", "/files/1"])
def test_reads_require_a_session(client, path):
    response = client.get(f"{API}{path}")
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Not authenticated"


def test_bookmark_listing_filters_and_counts(client, alice, bob):
    _add(client, alice, "first", flagged="on", tags='["python"]')
    _add(client, alice, "second")
    _add(client, bob, "elsewhere")
    headers = cookie_header(alice)

    assert client.get(f"{API}/bookmarks/count", headers=headers).json() == {"count": 2}
    titles = [b["title"] for b in client.get(f"{API}/bookmarks", params={"order_by": "title", "order_direction": "asc"}, headers=headers).json()]
    assert titles == ["first", "second"]

    flagged = client.get(f"{API}/bookmarks", params={"flagged": "true"}, headers=headers).json()
    assert [b["title"] for b in flagged] == ["first"]
    assert [t["name"] for t in flagged[0]["tags"]] == ["python"]

    paged = client.get(f"{API}/bookmarks", params={"order_by": "title", "order_direction": "asc", "limit": 1, "page": 2}, headers=headers).json()
    assert [b["title"] for b in paged] == ["second"]

    bare = client.get(f"{API}/bookmarks", params={"expand": "category"}, headers=headers).json()
    assert all(b["tags"] is None and b["owner"] is None for b in bare)

    assert [t["name"] for t in client.get(f"{API}/tags", headers=headers).json()] == ["python"]


def test_foreign_rows_are_not_found(client, alice, bob):
    bobs = _add(client, bob, "private")
    bobs_category = client.get(f"{API}/categories", headers=cookie_header(bob)).json()[0]["id"]

    assert client.get(f"{API}/bookmarks/{bobs['id']}", headers=cookie_header(alice)).status_code == 404
    assert client.get(f"{API}/categories/{bobs_category}", headers=cookie_header(alice)).status_code == 404
    assert client.get(f"{API}/bookmarks/{bobs['id']}", headers=cookie_header(bob)).status_code == 200


def test_category_read_and_count(client, alice):
    headers = cookie_header(alice)
    categories = client.get(f"{API}/categories", headers=headers).json()
    assert [c["name"] for c in categories] == ["Uncategorized"]
    assert categories[0]["owner"]["username"] == "alice"
    assert client.get(f"{API}/categories/count", headers=headers).json() == {"count": 1}

    one = client.get(f"{API}/categories/{categories[0]['id']}", params={"expand": "parent"}, headers=headers).json()
    assert one["owner"] is None
    assert one["initial"] is True


def test_stored_images_are_served_to_their_owner(client, alice, bob):
    with patch("bookmarks_api.services.bookmarks.fetch_image", new=AsyncMock(return_value=b"\x89PNG data")):
        bookmark = _add(client, alice, "pic", main_image_url="https://cdn.example.com/pic.png")

    file_id = bookmark["main_image_id"]
    response = client.get(f"{API}/files/{file_id}", headers=cookie_header(alice))
    assert response.status_code == 200
    assert response.content == b"\x89PNG data"
    assert response.headers["content-type"] == "image/png"

    assert client.get(f"{API}/files/{file_id}", headers=cookie_header(bob)).status_code == 404
