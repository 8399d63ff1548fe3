from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from bookverse_api.dependencies.auth import get_current_user_id
from bookverse_api.dependencies.users import get_user_service
from bookverse_api.domain import UserId
from bookverse_api.errors import BookNotFoundError
from bookverse_api.schemas.user import FavoriteToggleRequest, FavoriteToggleResponse, UserProfile
from bookverse_api.services.user_service import UserService

router = APIRouter(prefix="/me", tags=["users"])


@router.get(
    "",
    response_model=UserProfile,
    summary="Get Current User Profile",
    description="Fetches the current user's profile together with their favorited books.",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "User not found"}},
)
def get_my_profile(
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    svc: Annotated[UserService, Depends(get_user_service)],
) -> UserProfile:
    profile = svc.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


@router.post(
    "/favorites",
    response_model=FavoriteToggleResponse,
    summary="Toggle Favorite",
    description="Adds the book to the user's favorites, or removes it if already there.",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Book not found"}},
)
def toggle_favorite(
    payload: FavoriteToggleRequest,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    svc: Annotated[UserService, Depends(get_user_service)],
) -> FavoriteToggleResponse:
    try:
        return svc.toggle_favorite(user_id=user_id, book_id=payload.book_id)
    except BookNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
