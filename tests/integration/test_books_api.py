import pytest
from fastapi.testclient import TestClient

from tests.integration.conftest import DataFactory, auth_headers


@pytest.fixture
def sample_books(test_data: DataFactory):
    dune = test_data.create_book(
        title="Dune",
        author="Frank Herbert",
        genres=["Science Fiction"],
        published_year=1965,
        description="A science fiction epic on Arrakis.",
    )
    foundation = test_data.create_book(
        title="Foundation",
        author="Isaac Asimov",
        genres=["Science Fiction", "Classic"],
        published_year=1951,
    )
    test_data.commit()
    return [dune, foundation]


def test_list_books(client: TestClient, sample_books):
    response = client.get("/books")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["size"] == 10
    assert [item["title"] for item in data["items"]] == ["Dune", "Foundation"]


def test_list_books_search_matches_title_or_author(client: TestClient, sample_books):
    by_author = client.get("/books?search=asimov").json()
    by_title = client.get("/books?search=DUNE").json()

    assert [item["title"] for item in by_author["items"]] == ["Foundation"]
    assert [item["title"] for item in by_title["items"]] == ["Dune"]


def test_list_books_rejects_page_zero(client: TestClient):
    response = client.get("/books?page=0")
    assert response.status_code == 422


def test_get_book_by_id_includes_reviews(client: TestClient, test_data: DataFactory, sample_books):
    dune = sample_books[0]
    reviewer = test_data.create_user(name="Paul")
    test_data.create_review(reviewer, dune, rating=5, text="Spice must flow.")
    test_data.commit()

    response = client.get(f"/books/{dune.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == dune.id
    assert data["author"] == "Frank Herbert"
    assert data["genres"] == ["Science Fiction"]
    assert [review["text"] for review in data["reviews"]] == ["Spice must flow."]


def test_get_book_not_found(client: TestClient):
    response = client.get("/books/9999")
    assert response.status_code == 404


def test_create_review_updates_book_aggregates(
    client: TestClient, test_data: DataFactory, sample_books
):
    dune = sample_books[0]
    first = test_data.create_user(name="First")
    second = test_data.create_user(name="Second")
    test_data.commit()

    url = f"/books/{dune.id}/reviews"
    r1 = client.post(url, json={"rating": 5, "text": "Epic."}, headers=auth_headers(first))
    r2 = client.post(url, json={"rating": 4, "text": "Long."}, headers=auth_headers(second))

    assert r1.status_code == 201
    assert r2.status_code == 201
    assert r1.json()["book_id"] == dune.id

    book = client.get(f"/books/{dune.id}").json()
    assert book["review_count"] == 2
    assert book["avg_rating"] == 4.5


def test_create_review_requires_auth(client: TestClient, sample_books):
    response = client.post(f"/books/{sample_books[0].id}/reviews", json={"rating": 5, "text": "x"})
    assert response.status_code == 401


def test_create_review_rejects_duplicate(client: TestClient, test_data: DataFactory, sample_books):
    user = test_data.create_user(name="Twice")
    test_data.commit()
    url = f"/books/{sample_books[0].id}/reviews"

    first = client.post(url, json={"rating": 3, "text": "Ok"}, headers=auth_headers(user))
    assert first.status_code == 201
    response = client.post(url, json={"rating": 4, "text": "Again"}, headers=auth_headers(user))

    assert response.status_code == 409


def test_create_review_unknown_book(client: TestClient, reader):
    response = client.post(
        "/books/9999/reviews", json={"rating": 4, "text": "Ghost"}, headers=auth_headers(reader)
    )
    assert response.status_code == 404


@pytest.mark.parametrize("rating", [0, 6])
def test_create_review_rejects_out_of_range_rating(
    client: TestClient, reader, sample_books, rating: int
):
    response = client.post(
        f"/books/{sample_books[0].id}/reviews",
        json={"rating": rating, "text": "Hmm"},
        headers=auth_headers(reader),
    )
    assert response.status_code == 422
