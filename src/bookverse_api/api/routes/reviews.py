from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from bookverse_api.dependencies.auth import get_current_user_id
from bookverse_api.dependencies.books import get_review_service
from bookverse_api.domain import ReviewId, UserId
from bookverse_api.errors import ReviewNotFoundError, ReviewPermissionError
from bookverse_api.schemas.review import ReviewDeleted, ReviewRead, ReviewUpdate
from bookverse_api.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])

_RESPONSES = {
    401: {"description": "Not authenticated"},
    403: {"description": "Not the review author"},
    404: {"description": "Review not found"},
}


@router.put("/{review_id}", response_model=ReviewRead, responses=_RESPONSES)
def update_review(
    review_id: ReviewId,
    payload: ReviewUpdate,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    svc: Annotated[ReviewService, Depends(get_review_service)],
) -> ReviewRead:
    try:
        return svc.update_review(user_id=user_id, review_id=review_id, payload=payload)
    except ReviewNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReviewPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.delete("/{review_id}", response_model=ReviewDeleted, responses=_RESPONSES)
def delete_review(
    review_id: ReviewId,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    svc: Annotated[ReviewService, Depends(get_review_service)],
) -> ReviewDeleted:
    try:
        svc.delete_review(user_id=user_id, review_id=review_id)
    except ReviewNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReviewPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return ReviewDeleted()
