"""Account routes for the signed-in user: profile, password, favorites."""

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_recipe_repo, get_user_repo
from api.models import (
    ChangePasswordRequest,
    FavoriteToggleResponse,
    FavoritesResponse,
    MessageResponse,
    PasswordStatusResponse,
    ProfileResponse,
    RecipeResponse,
    SetPasswordRequest,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserResponse,
)
from api.security import get_current_user_required
from domain.model.user import User
from port.recipe_repository import RecipeRepository
from port.user_repository import UserRepository
from services import auth_service, favorites_service, profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["account"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
    recipe_repo: RecipeRepository = Depends(get_recipe_repo),
):
    profile = profile_service.get_profile(user_repo, recipe_repo, current_user.id)
    return ProfileResponse(
        user=UserResponse.from_domain(profile.user),
        recipes=[RecipeResponse.from_domain(r) for r in profile.recipes],
        recipe_count=profile.recipe_count,
    )


@router.put("/profile", response_model=UpdateProfileResponse)
def update_profile(
    request: UpdateProfileRequest,
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
):
    user = profile_service.update_profile(
        user_repo, current_user.id, **request.model_dump(exclude_unset=True),
    )
    return UpdateProfileResponse(message="Profile updated successfully", user=UserResponse.from_domain(user))


@router.get("/password-status", response_model=PasswordStatusResponse)
def password_status(current_user: User = Depends(get_current_user_required)):
    return PasswordStatusResponse(**auth_service.password_status(current_user))


@router.post("/set-password", response_model=MessageResponse)
def set_password(
    request: SetPasswordRequest,
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
):
    """Give a Google-created account a password so it can also log in by email."""
    auth_service.set_password(user_repo, current_user.id, request.password)
    return MessageResponse(message="Password set successfully")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
):
    auth_service.change_password(
        user_repo, current_user.id, request.current_password, request.new_password,
    )
    return MessageResponse(message="Password changed successfully")


@router.get("/favorites", response_model=FavoritesResponse)
def list_favorites(
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
    recipe_repo: RecipeRepository = Depends(get_recipe_repo),
):
    recipes = favorites_service.list_favorites(user_repo, recipe_repo, current_user.id)
    return FavoritesResponse(favorites=[RecipeResponse.from_domain(r) for r in recipes])


@router.post("/favorites/{recipe_id}", response_model=FavoriteToggleResponse)
def toggle_favorite(
    recipe_id: str,
    current_user: User = Depends(get_current_user_required),
    user_repo: UserRepository = Depends(get_user_repo),
    recipe_repo: RecipeRepository = Depends(get_recipe_repo),
):
    """Toggle, not set: posting twice removes the favorite again."""
    result = favorites_service.toggle(user_repo, recipe_repo, current_user.id, recipe_id)
    return FavoriteToggleResponse(
        message="Added to favorites" if result.favorited else "Removed from favorites",
        favorited=result.favorited,
        favorites=result.favorites,
    )
