"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API layer maps each family to an HTTP status code and a
``{"message", "fieldErrors"}`` payload.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    message = "Request failed"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── validation (400) ─────────────────────────────────────────


class ValidationError(DomainError):
    """Input violates a business validation rule."""

    def __init__(self, message: str | None = None, field: str | None = None):
        self.field = field
        super().__init__(message)


class SamePasswordError(ValidationError):
    message = "New password must be different from the current password"

    def __init__(self):
        super().__init__(field='newPassword')


# ── authentication (401) ─────────────────────────────────────


class AuthenticationError(DomainError):
    """Credentials or token were rejected. Never says which factor failed."""

    message = "Authentication failed"


class InvalidCredentialsError(AuthenticationError):
    message = "Invalid email or password"


class EmailNotVerifiedError(AuthenticationError):
    message = "Please verify your email before logging in"


class InvalidOrExpiredCodeError(AuthenticationError):
    message = "Invalid or expired verification code"


class InvalidTokenError(AuthenticationError):
    message = "Token is not valid"


# ── conflict (409) ───────────────────────────────────────────


class ConflictError(DomainError):
    """Entity state or a unique key forbids the operation."""


class DuplicateError(ConflictError):
    """Entity with the same unique key already exists."""

    message = "Entity already exists"


class AlreadyRegisteredError(DuplicateError):
    message = "User with this email already exists"


class PasswordAlreadySetError(ConflictError):
    message = "Password is already set. Use change password instead"


class NoPasswordSetError(ConflictError):
    message = "No password set for this account. Use set password instead"


# ── not found (404) ──────────────────────────────────────────


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    message = "Not found"


class UserNotFoundError(NotFoundError):
    message = "User not found"


class RecipeNotFoundError(NotFoundError):
    message = "Recipe not found"


# ── upstream / persistence (500) ─────────────────────────────


class UpstreamError(DomainError):
    """A collaborator failed. Details stay in the server log."""

    message = "Something went wrong. Please try again later"


class NotificationError(UpstreamError):
    """Outbound email could not be delivered."""


class IdentityProviderError(UpstreamError):
    """The OAuth provider handshake failed."""


class IdentityLinkError(UpstreamError):
    """Persisting an external identity link failed."""
