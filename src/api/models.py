"""Pydantic models for API request/response.

JSON field names are camelCase for the browser client; Python attributes
stay snake_case.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from domain.model.recipe import Recipe
from domain.model.user import User


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── requests ─────────────────────────────────────────────────


class SendCodeRequest(ApiModel):
    """Request model for starting (or restarting) a local signup."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class VerifyCodeRequest(ApiModel):
    email: EmailStr
    code: str = Field(..., pattern=r"^\s*\d{6}\s*$", description="6-digit verification code")


class LoginRequest(ApiModel):
    """Request model for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class SetPasswordRequest(ApiModel):
    password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)


class UpdateProfileRequest(ApiModel):
    name: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = Field(None, ge=1, le=150)
    bio: Optional[str] = Field(None, max_length=500)
    photo: Optional[str] = None
    banner_image: Optional[str] = None


# ── responses ────────────────────────────────────────────────


class UserResponse(ApiModel):
    """Public view of a user; never carries credentials or codes."""
    id: str
    name: str
    email: str
    photo: Optional[str] = None
    banner_image: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    auth_provider: Optional[str] = None
    is_verified: bool
    has_password: bool
    favorites: list[str] = []
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            photo=user.photo,
            banner_image=user.banner_image,
            age=user.age,
            bio=user.bio,
            auth_provider=user.auth_provider,
            is_verified=user.is_verified,
            has_password=user.has_password,
            favorites=user.favorites,
            created_at=user.created_at,
        )


class RecipeResponse(ApiModel):
    id: str
    title: str
    description: str
    image: Optional[str] = None
    user_id: Optional[str] = None
    user_name: str
    created_at: datetime

    @classmethod
    def from_domain(cls, recipe: Recipe) -> "RecipeResponse":
        return cls(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            image=recipe.image,
            user_id=recipe.user_id,
            user_name=recipe.user_name,
            created_at=recipe.created_at,
        )


class MessageResponse(ApiModel):
    message: str


class SendCodeResponse(ApiModel):
    message: str
    email: str
    expires_in_minutes: int


class AuthResponse(ApiModel):
    """Response model for authentication."""
    message: str
    token: str
    user: UserResponse


class VerifyTokenResponse(ApiModel):
    valid: bool
    user: UserResponse


class ProfileResponse(ApiModel):
    user: UserResponse
    recipes: list[RecipeResponse]
    recipe_count: int


class UpdateProfileResponse(ApiModel):
    message: str
    user: UserResponse


class PasswordStatusResponse(ApiModel):
    has_password: bool
    auth_provider: Optional[str] = None
    has_google: bool


class FavoriteToggleResponse(ApiModel):
    message: str
    favorited: bool
    favorites: list[str]


class FavoritesResponse(ApiModel):
    favorites: list[RecipeResponse]


class ErrorResponse(ApiModel):
    message: str
    field_errors: Optional[dict[str, str]] = None
