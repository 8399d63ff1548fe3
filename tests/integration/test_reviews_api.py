import pytest
from fastapi.testclient import TestClient

from tests.integration.conftest import DataFactory, auth_headers


@pytest.fixture
def reviewed_book(test_data: DataFactory):
    author = test_data.create_user(name="Author User")
    other = test_data.create_user(name="Other User")
    book = test_data.create_book(title="Rebecca", avg_rating=2.0, review_count=1)
    review = test_data.create_review(author, book, rating=2, text="Slow start.")
    test_data.commit()
    return {"author": author, "other": other, "book": book, "review": review}


def test_update_review_recomputes_rating(client: TestClient, reviewed_book):
    review = reviewed_book["review"]

    response = client.put(
        f"/reviews/{review.id}",
        json={"rating": 5},
        headers=auth_headers(reviewed_book["author"]),
    )

    assert response.status_code == 200
    assert response.json()["rating"] == 5
    assert response.json()["text"] == "Slow start."
    book = client.get(f"/books/{reviewed_book['book'].id}").json()
    assert book["avg_rating"] == 5.0
    assert book["review_count"] == 1


def test_update_review_forbidden_for_non_author(client: TestClient, reviewed_book):
    response = client.put(
        f"/reviews/{reviewed_book['review'].id}",
        json={"text": "Hijacked"},
        headers=auth_headers(reviewed_book["other"]),
    )
    assert response.status_code == 403


def test_update_review_not_found(client: TestClient, reviewed_book):
    response = client.put(
        "/reviews/9999", json={"rating": 1}, headers=auth_headers(reviewed_book["author"])
    )
    assert response.status_code == 404


def test_delete_review_resets_aggregates(client: TestClient, reviewed_book):
    response = client.delete(
        f"/reviews/{reviewed_book['review'].id}", headers=auth_headers(reviewed_book["author"])
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Review deleted."}
    book = client.get(f"/books/{reviewed_book['book'].id}").json()
    assert book["avg_rating"] == 0.0
    assert book["review_count"] == 0
    assert book["reviews"] == []


def test_delete_review_forbidden_for_non_author(client: TestClient, reviewed_book):
    response = client.delete(
        f"/reviews/{reviewed_book['review'].id}", headers=auth_headers(reviewed_book["other"])
    )
    assert response.status_code == 403


def test_delete_review_requires_auth(client: TestClient, reviewed_book):
    response = client.delete(f"/reviews/{reviewed_book['review'].id}")
    assert response.status_code == 401
