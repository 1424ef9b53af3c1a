"""Authentication routes: email-code signup, login, token check, Google sign-in.

Handlers that hash or compare passwords are plain ``def`` so FastAPI runs
them in its threadpool instead of blocking the event loop.
"""

import logging
import os
import secrets
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, Query, status
from fastapi.responses import RedirectResponse

from api.dependencies import get_identity_provider, get_notifier, get_user_repo
from api.models import (
    AuthResponse,
    LoginRequest,
    SendCodeRequest,
    SendCodeResponse,
    UserResponse,
    VerifyCodeRequest,
    VerifyTokenResponse,
)
from api.security import get_current_user_required
from domain.model.errors import DomainError
from domain.model.user import User
from port.identity_provider import IdentityProviderPort
from port.notification import NotificationPort
from port.user_repository import UserRepository
from services import auth_service, identity_linker, session_service, verification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

OAUTH_NONCE_COOKIE = "oauth_nonce"
OAUTH_COOKIE_PATH = "/api/auth/google"
OAUTH_COOKIE_SECURE = os.getenv("OAUTH_COOKIE_SECURE", "false").lower() == "true"


def _auth_response(message: str, user: User) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=session_service.issue(user.id, user.email),
        user=UserResponse.from_domain(user),
    )


def _safe_redirect_path(path: str | None) -> str:
    """Only same-site absolute paths; anything else lands on the home page."""
    if not path or not path.startswith("/") or path.startswith("//"):
        return "/"
    return path


def _clear_nonce(response: RedirectResponse) -> RedirectResponse:
    response.delete_cookie(OAUTH_NONCE_COOKIE, path=OAUTH_COOKIE_PATH)
    return response


@router.post("/send-code", response_model=SendCodeResponse)
def send_code(
    request: SendCodeRequest,
    repo: UserRepository = Depends(get_user_repo),
    notifier: NotificationPort = Depends(get_notifier),
):
    """Start a local signup, or resend the code for a pending one."""
    user = verification_service.request_code(
        repo, notifier, request.name, request.email, request.password,
    )
    return SendCodeResponse(
        message="Verification code sent to your email",
        email=user.email,
        expires_in_minutes=verification_service.OTP_TTL_MINUTES,
    )


@router.post("/verify-code", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def verify_code(request: VerifyCodeRequest, repo: UserRepository = Depends(get_user_repo)):
    """Confirm the emailed code; the account becomes verified and is signed in."""
    user = verification_service.verify_code(repo, request.email, request.code)
    logger.info("User registered", extra={"userId": user.id})
    return _auth_response("Email verified successfully", user)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, repo: UserRepository = Depends(get_user_repo)):
    user = auth_service.authenticate(repo, request.email, request.password)
    return _auth_response("Login successful", user)


@router.get("/verify", response_model=VerifyTokenResponse)
def verify(current_user: User = Depends(get_current_user_required)):
    """Check that the presented token is still valid."""
    return VerifyTokenResponse(valid=True, user=UserResponse.from_domain(current_user))


@router.get("/google")
def google_login(
    redirect_to: str | None = Query(None, alias="redirectTo"),
    provider: IdentityProviderPort = Depends(get_identity_provider),
):
    """Step one of the handshake: send the browser to Google."""
    nonce = secrets.token_urlsafe(16)
    state = session_service.issue_state(_safe_redirect_path(redirect_to), nonce)
    response = RedirectResponse(provider.authorization_url(state), status_code=status.HTTP_302_FOUND)
    # Binds the state to this browser; the callback rejects a state without it
    response.set_cookie(
        OAUTH_NONCE_COOKIE, nonce,
        max_age=session_service.STATE_TTL_MINUTES * 60,
        path=OAUTH_COOKIE_PATH,
        httponly=True,
        samesite="lax",
        secure=OAUTH_COOKIE_SECURE,
    )
    return response


@router.get("/google/callback")
def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    nonce: str | None = Cookie(None, alias=OAUTH_NONCE_COOKIE),
    repo: UserRepository = Depends(get_user_repo),
    provider: IdentityProviderPort = Depends(get_identity_provider),
):
    """Step two: link the Google identity and hand a token to the frontend.

    Failures redirect to the login page instead of returning JSON, since the
    browser arrives here through a redirect. The nonce cookie is single-use.
    """
    failure_url = f"{FRONTEND_URL}/login?" + urlencode({"error": "oauth_failed"})
    failure = _clear_nonce(RedirectResponse(failure_url, status_code=status.HTTP_302_FOUND))
    if error or not code or not state:
        logger.info("Google sign-in cancelled or malformed", extra={"error": error})
        return failure

    try:
        redirect_to = session_service.read_state(state, nonce)
        identity = provider.exchange_code(code)
        user = identity_linker.link_or_create(repo, identity)
    except DomainError as e:
        logger.warning("Google sign-in failed", extra={"error_type": type(e).__name__, "error": e.message})
        return failure

    repo.update_last_login(user.id)
    user_json = UserResponse.from_domain(user).model_dump_json(by_alias=True)
    query = urlencode({
        "token": session_service.issue(user.id, user.email),
        "user": user_json,
        "redirectTo": redirect_to,
    })
    logger.info("User signed in with Google", extra={"userId": user.id})
    return _clear_nonce(
        RedirectResponse(f"{FRONTEND_URL}/auth/callback?{query}", status_code=status.HTTP_302_FOUND)
    )
