"""Books, reading progress and achievements over HTTP."""

import pytest

from core import dependencies
from models.reading_progress import ReadingProgressModel

from conftest import signup

ADMIN = {"X-Admin-Token": "s3cret"}


@pytest.fixture(autouse=True)
def admin_token(monkeypatch):
    monkeypatch.setattr(dependencies, "ADMIN_TOKEN", "s3cret")


@pytest.fixture
def book(client):
    response = client.post(
        "/api/admin/books",
        json={"title": "Holes", "author": "Louis Sachar", "genre": "Adventure", "pages": 233},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/books"),
        ("get", "/api/reading-progress"),
        ("get", "/api/reading-progress/x"),
        ("put", "/api/reading-progress/x"),
        ("get", "/api/achievements"),
        ("get", "/api/user-achievements"),
    ],
)
def test_anonymous_is_unauthorized(client, method, path):
    kwargs = {"json": {}} if method == "put" else {}
    assert getattr(client, method)(path, **kwargs).status_code == 401


def test_catalogue_needs_admin_token(client):
    body = {"title": "Holes", "author": "Louis Sachar", "genre": "Adventure"}
    assert client.post("/api/admin/books", json=body).status_code == 403
    assert client.post(
        "/api/admin/achievements", json={"name": "A", "description": "B", "icon": "c"}
    ).status_code == 403


def test_reading_progress_flow(client, new_client, book):
    signup(client, "student", email="kid@x.com")
    book_id = book["book_id"]

    assert [b["book_id"] for b in client.get("/api/books").json()] == [book_id]
    assert client.get(f"/api/reading-progress/{book_id}").status_code == 404

    started = client.put(f"/api/reading-progress/{book_id}", json={"progress": 25})
    assert started.status_code == 200
    assert started.json()["status"] == "reading"
    assert started.json()["book"]["title"] == "Holes"

    done = client.put(f"/api/reading-progress/{book_id}", json={"status": "completed"})
    assert done.json()["progress"] == 100
    assert done.json()["completed_at"] is not None

    assert client.get(f"/api/reading-progress/{book_id}").json()["status"] == "completed"
    assert [p["book_id"] for p in client.get("/api/reading-progress").json()] == [book_id]

    # Progress belongs to the reader
    other = new_client()
    signup(other, "teacher", email="t@x.com")
    assert other.get("/api/reading-progress").json() == []


def test_reading_progress_errors(client, book):
    signup(client, "student")
    path = f"/api/reading-progress/{book['book_id']}"

    assert client.put("/api/reading-progress/missing", json={"progress": 5}).status_code == 404
    assert client.put(path, json={"progress": 101}).status_code == 422
    assert client.put(path, json={"status": "abandoned"}).status_code == 422
    assert client.put(path, json={"user_id": "someone"}).status_code == 422


def test_achievements(client):
    student = signup(client, "student")
    created = client.post(
        "/api/admin/achievements",
        json={"name": "Bookworm", "description": "Finish five books", "icon": "book"},
        headers=ADMIN,
    ).json()

    assert [a["name"] for a in client.get("/api/achievements").json()] == ["Bookworm"]
    assert client.get("/api/user-achievements").json() == []

    body = {"user_id": student["user_id"], "achievement_id": created["achievement_id"]}
    awarded = client.post("/api/admin/user-achievements", json=body, headers=ADMIN)
    assert awarded.status_code == 200
    again = client.post("/api/admin/user-achievements", json=body, headers=ADMIN)
    assert again.json()["earned_at"] == awarded.json()["earned_at"]

    earned = client.get("/api/user-achievements").json()
    assert [e["achievement"]["name"] for e in earned] == ["Bookworm"]

    missing = client.post(
        "/api/admin/user-achievements",
        json={"user_id": "missing", "achievement_id": created["achievement_id"]},
        headers=ADMIN,
    )
    assert missing.status_code == 404


def test_deleting_account_removes_progress(client, book, database):
    student = signup(client, "student")
    client.put(f"/api/reading-progress/{book['book_id']}", json={"progress": 10})

    assert client.delete(f"/api/admin/users/{student['user_id']}", headers=ADMIN).status_code == 200

    db = database.session()
    assert db.query(ReadingProgressModel).count() == 0
    db.close()
