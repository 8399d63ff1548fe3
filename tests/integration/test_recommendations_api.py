from unittest.mock import create_autospec

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from bookverse_api.dependencies.recommendations import get_ranker
from bookverse_api.main import app
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.services.llm_ranking import HuggingFaceRanker, RankingResult
from tests.integration.conftest import DataFactory, auth_headers


@pytest.fixture
def mystery_catalog(test_data: DataFactory):
    books = {
        "A": test_data.create_book(
            title="Shadows at Midnight",
            author="Agatha Vale",
            genres=["Mystery"],
            description="A detective unravels secrets.",
            avg_rating=4.8,
            review_count=100,
        ),
        "B": test_data.create_book(
            title="The Long Summer",
            author="Beth Rowe",
            genres=["Fiction"],
            description="Family saga across generations.",
            avg_rating=4.2,
            review_count=50,
        ),
        "C": test_data.create_book(
            title="Cozy Corpse",
            author="Cara Lind",
            genres=["Mystery"],
            description="Village whodunit, cozy charm.",
            avg_rating=3.5,
            review_count=10,
        ),
        "D": test_data.create_book(
            title="Cold Run",
            author="Dan Pike",
            genres=["Thriller"],
            description="Spies race against time.",
            avg_rating=4.5,
            review_count=75,
        ),
    }
    test_data.commit()
    return books


@pytest.fixture
def fan(test_data: DataFactory, mystery_catalog):
    user = test_data.create_user(name="Mystery Fan")
    test_data.create_favorite(user, mystery_catalog["A"])
    test_data.commit()
    return user


def _ids(response) -> list[int]:
    return [item["id"] for item in response.json()["recommendations"]]


def test_hybrid_recommendations_personalised_and_exclude_favorites(
    client: TestClient, mystery_catalog, fan
):
    response = client.get("/recommendations?limit=3", headers=auth_headers(fan))

    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "hybrid"
    ids = _ids(response)
    expected = {mystery_catalog[key].id for key in ("B", "C", "D")}
    assert set(ids) == expected
    assert mystery_catalog["A"].id not in ids
    # the genre match lifts C above the better-rated B
    assert ids.index(mystery_catalog["C"].id) < ids.index(mystery_catalog["B"].id)


def test_hybrid_recommendations_pagination_shape(client: TestClient, mystery_catalog, fan):
    response = client.get("/recommendations?page=2&limit=2", headers=auth_headers(fan))

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}
    assert len(data["recommendations"]) == 1
    assert data["recommendations"][0]["relevance_score"] < 1.0


def test_hybrid_recommendations_anonymous(client: TestClient, mystery_catalog):
    response = client.get("/recommendations?limit=4")

    assert response.status_code == 200
    assert set(_ids(response)) == {book.id for book in mystery_catalog.values()}


def test_relevance_scores_strictly_decrease(client: TestClient, mystery_catalog):
    response = client.get("/recommendations?limit=4")

    scores = [item["relevance_score"] for item in response.json()["recommendations"]]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


def test_limit_is_clamped(client: TestClient, mystery_catalog):
    response = client.get("/recommendations/top-rated?limit=100")

    assert response.status_code == 200
    assert response.json()["pagination"]["limit"] == 50


def test_top_rated_ignores_user(client: TestClient, mystery_catalog, fan):
    anonymous = client.get("/recommendations/top-rated?limit=2")
    personal = client.get("/recommendations/top-rated?limit=2", headers=auth_headers(fan))

    assert anonymous.json()["mode"] == "top-rated"
    assert _ids(anonymous) == [mystery_catalog["A"].id, mystery_catalog["D"].id]
    assert _ids(personal) == _ids(anonymous)


def test_recommendations_are_cached_within_ttl(
    client: TestClient, test_data: DataFactory, mystery_catalog
):
    first = client.get("/recommendations/top-rated?limit=2")
    test_data.create_book(title="Late Arrival", avg_rating=5.0, review_count=999)
    test_data.commit()
    second = client.get("/recommendations/top-rated?limit=2")

    assert second.json()["recommendations"] == first.json()["recommendations"]


def test_llm_recommendations_fall_back_to_heuristic_order(
    client: TestClient, mystery_catalog, fan
):
    llm = client.get("/recommendations/llm?limit=3", headers=auth_headers(fan))

    assert llm.status_code == 200
    assert llm.json()["mode"] == "llm"
    assert mystery_catalog["A"].id not in _ids(llm)
    assert len(_ids(llm)) == 3


def test_llm_recommendations_apply_model_order(client: TestClient, mystery_catalog, fan):
    ranker = create_autospec(HuggingFaceRanker, instance=True)
    ranker.enabled = True
    ranker.rank.return_value = RankingResult(order=[mystery_catalog["B"].id])
    app.dependency_overrides[get_ranker] = lambda: ranker

    response = client.get("/recommendations/llm?limit=3", headers=auth_headers(fan))

    assert response.status_code == 200
    assert _ids(response)[0] == mystery_catalog["B"].id
    ranker.rank.assert_called_once()


def test_empty_catalog_returns_empty_list(client: TestClient, reader):
    for path in ("/recommendations", "/recommendations/top-rated", "/recommendations/llm"):
        response = client.get(path, headers=auth_headers(reader))
        assert response.status_code == 200
        assert response.json()["recommendations"] == []
        assert response.json()["pagination"]["total_pages"] == 0


def test_data_access_failure_returns_generic_error(client: TestClient):
    from bookverse_api.dependencies.books import get_books_repository

    repo = create_autospec(BooksRepository, instance=True, spec_set=True)
    repo.find_books.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    app.dependency_overrides[get_books_repository] = lambda: repo

    response = client.get("/recommendations")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch recommendations."}


def test_malformed_user_header_rejected(client: TestClient):
    response = client.get("/recommendations", headers={"X-User-Id": "-3"})
    assert response.status_code == 401


def test_out_of_range_stored_book_returns_generic_error(client: TestClient):
    from bookverse_api.dependencies.books import get_books_repository
    from bookverse_api.models import Book

    repo = create_autospec(BooksRepository, instance=True, spec_set=True)
    repo.find_books.return_value = [
        Book(
            id=1,
            title="Broken",
            author="Anon",
            description="",
            genres=[],
            published_year=2000,
            avg_rating=9.0,
            review_count=0,
        )
    ]
    app.dependency_overrides[get_books_repository] = lambda: repo

    response = client.get("/recommendations/top-rated")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch recommendations."}


@pytest.mark.parametrize("page", ["0", "-3"])
def test_page_below_one_reads_as_first_page(client: TestClient, mystery_catalog, page: str):
    response = client.get(f"/recommendations?page={page}&limit=2")

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["page"] == 1
    assert len(data["recommendations"]) == 2
    assert data["recommendations"][0]["relevance_score"] == 1.0
