from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bookverse_api.dependencies.auth import get_current_user_id
from bookverse_api.dependencies.books import get_book_service, get_review_service
from bookverse_api.domain import BookId, UserId
from bookverse_api.errors import BookNotFoundError, DuplicateReviewError
from bookverse_api.schemas.book import BookDetail, PaginatedBooks
from bookverse_api.schemas.review import ReviewCreate, ReviewRead
from bookverse_api.services.book_service import BookService
from bookverse_api.services.review_service import ReviewService

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=PaginatedBooks)
def list_books(
    svc: Annotated[BookService, Depends(get_book_service)],
    page: int = Query(1, ge=1, description="Page number"),
    search: str | None = Query(None, description="Case-insensitive title or author search"),
) -> PaginatedBooks:
    """Retrieve a paginated list of books from the catalog."""
    return svc.get_books(page=page, search=search)


@router.get("/{book_id}", response_model=BookDetail)
def get_book_by_id(
    book_id: BookId,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> BookDetail:
    """Retrieve a book together with its reviews."""
    book = svc.get_book(book_id)
    if not book:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with id {book_id} not found",
        )
    return book


@router.post(
    "/{book_id}/reviews",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Book not found"},
        409: {"description": "Book already reviewed by this user"},
    },
)
def create_review(
    book_id: BookId,
    payload: ReviewCreate,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    svc: Annotated[ReviewService, Depends(get_review_service)],
) -> ReviewRead:
    """Review a book and refresh its rating aggregates."""
    try:
        return svc.create_review(user_id=user_id, book_id=book_id, payload=payload)
    except BookNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DuplicateReviewError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
