import asyncio
from datetime import date, timedelta

import httpx
import pytest

from library_backend.app import app, get_book_service

CLEAN_CODE = {
    "title": "Clean Code",
    "author": "Robert C. Martin",
    "isbn": "9780132350884",
    "publishedDate": "2008-08-01",
}
REFACTORING = {
    "title": "Refactoring",
    "author": "Martin Fowler",
    "isbn": "9780134757599",
    "publishedDate": "2018-11-20",
}


@pytest.mark.anyio
async def test_create_list_and_delete_book(client):
    resp = await client.post("/api/books", json=CLEAN_CODE)
    assert resp.status_code == 201
    created = resp.json()
    assert isinstance(created["id"], int)
    assert created["title"] == "Clean Code"
    assert created["publishedDate"] == "2008-08-01"

    listing = await client.get("/api/books")
    assert listing.status_code == 200
    assert created in listing.json()

    deleted = await client.delete(f"/api/books/{created['id']}")
    assert deleted.status_code == 204
    assert deleted.content == b""

    missing = await client.get(f"/api/books/{created['id']}")
    assert missing.status_code == 404
    body = missing.json()
    assert body["status"] == 404
    assert body["message"] == f"Book not found with id: {created['id']}"
    assert body["errors"] is None
    assert body["timestamp"]


@pytest.mark.anyio
async def test_get_book_returns_input_plus_id(client):
    created = (await client.post("/api/books", json=REFACTORING)).json()
    resp = await client.get(f"/api/books/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {**REFACTORING, "id": created["id"]}


@pytest.mark.anyio
async def test_id_in_create_body_is_ignored(client):
    resp = await client.post("/api/books", json={**CLEAN_CODE, "id": 999})
    assert resp.status_code == 201
    assert resp.json()["id"] != 999


@pytest.mark.anyio
async def test_published_date_is_optional(client):
    payload = {key: value for key, value in CLEAN_CODE.items() if key != "publishedDate"}
    resp = await client.post("/api/books", json=payload)
    assert resp.status_code == 201
    assert resp.json()["publishedDate"] is None


@pytest.mark.anyio
async def test_duplicate_isbn_on_create_returns_409(client):
    await client.post("/api/books", json=CLEAN_CODE)
    resp = await client.post("/api/books", json={**REFACTORING, "isbn": CLEAN_CODE["isbn"]})
    assert resp.status_code == 409
    assert resp.json()["message"] == f"ISBN already exists: {CLEAN_CODE['isbn']}"

    listing = (await client.get("/api/books")).json()
    assert [book["title"] for book in listing] == ["Clean Code"]


@pytest.mark.anyio
async def test_update_replaces_all_fields(client):
    created = (await client.post("/api/books", json=CLEAN_CODE)).json()
    replacement = {
        "title": "Clean Code (2nd printing)",
        "author": "Uncle Bob",
        "isbn": "0132350882",
        "publishedDate": "2009-01-01",
    }
    resp = await client.put(f"/api/books/{created['id']}", json=replacement)
    assert resp.status_code == 200
    assert resp.json() == {**replacement, "id": created["id"]}


@pytest.mark.anyio
async def test_update_keeping_same_isbn_is_allowed(client):
    created = (await client.post("/api/books", json=CLEAN_CODE)).json()
    resp = await client.put(f"/api/books/{created['id']}", json={**CLEAN_CODE, "title": "Clean Code!"})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Clean Code!"


@pytest.mark.anyio
async def test_update_to_another_books_isbn_returns_409(client):
    await client.post("/api/books", json=CLEAN_CODE)
    other = (await client.post("/api/books", json=REFACTORING)).json()
    resp = await client.put(f"/api/books/{other['id']}", json={**REFACTORING, "isbn": CLEAN_CODE["isbn"]})
    assert resp.status_code == 409

    unchanged = (await client.get(f"/api/books/{other['id']}")).json()
    assert unchanged["isbn"] == REFACTORING["isbn"]


@pytest.mark.anyio
async def test_update_nonexistent_returns_404(client):
    resp = await client.put("/api/books/999", json=CLEAN_CODE)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Book not found with id: 999"
    assert (await client.get("/api/books")).json() == []


@pytest.mark.anyio
async def test_delete_nonexistent_returns_404(client):
    resp = await client.delete("/api/books/999")
    assert resp.status_code == 404
    assert resp.json()["status"] == 404


@pytest.mark.anyio
async def test_validation_error_shape(client):
    resp = await client.post(
        "/api/books",
        json={"title": " ", "author": "a" * 101, "isbn": "123", "publishedDate": "2999-01-01"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] == 400
    assert body["message"] == "Validation failed"
    assert body["errors"] == {
        "title": "Title is required",
        "author": "Author must not exceed 100 characters",
        "isbn": "ISBN must be 10 or 13 digits",
        "publishedDate": "Published date cannot be in the future",
    }


@pytest.mark.anyio
async def test_missing_fields_are_reported_per_field(client):
    resp = await client.post("/api/books", json={"title": "Only a title"})
    assert resp.status_code == 400
    assert resp.json()["errors"] == {"author": "Author is required", "isbn": "ISBN is required"}


@pytest.mark.anyio
async def test_null_fields_are_reported_as_required(client):
    resp = await client.post("/api/books", json={**CLEAN_CODE, "title": None, "author": None, "isbn": None})
    assert resp.status_code == 400
    assert resp.json()["errors"] == {
        "title": "Title is required",
        "author": "Author is required",
        "isbn": "ISBN is required",
    }


@pytest.mark.anyio
async def test_malformed_json_returns_400(client):
    resp = await client.post(
        "/api/books",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert "body" in resp.json()["errors"]


@pytest.mark.anyio
async def test_update_validates_before_lookup(client):
    resp = await client.put("/api/books/999", json={**CLEAN_CODE, "isbn": "12345678901"})
    assert resp.status_code == 400
    assert resp.json()["errors"] == {"isbn": "ISBN must be 10 or 13 digits"}


@pytest.mark.anyio
async def test_today_is_accepted_tomorrow_is_not(client):
    today = await client.post("/api/books", json={**CLEAN_CODE, "publishedDate": date.today().isoformat()})
    assert today.status_code == 201

    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    resp = await client.post("/api/books", json={**REFACTORING, "publishedDate": tomorrow})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_unknown_route_uses_error_shape(client):
    resp = await client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Not Found"


@pytest.mark.anyio
async def test_unexpected_error_returns_generic_500(overrides):
    class BrokenService:
        def list(self):
            raise RuntimeError("database password is hunter2")

    app.dependency_overrides[get_book_service] = lambda: BrokenService()
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        resp = await client.get("/api/books")
    assert resp.status_code == 500
    assert resp.json()["message"] == "An unexpected error occurred"
    assert "hunter2" not in resp.text


@pytest.mark.anyio
async def test_cors_allows_any_origin(client):
    resp = await client.get("/api/books", headers={"Origin": "http://desktop.local"})
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.anyio
async def test_request_id_is_echoed(client):
    resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "abc-123"


@pytest.mark.anyio
async def test_health_smoke_parallel(client):
    results = await asyncio.gather(*[client.get("/health") for _ in range(5)])
    assert all(r.status_code == 200 for r in results)
