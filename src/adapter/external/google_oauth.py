"""Google OAuth 2.0 adapter.

Implements IdentityProviderPort with the authorization-code flow:
authorization_url() starts the browser redirect, exchange_code() trades the
callback code for tokens and reads the userinfo endpoint.

Docs: https://developers.google.com/identity/protocols/oauth2/web-server
"""

import logging
import os
from urllib.parse import urlencode

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from domain.model.errors import IdentityProviderError
from domain.model.user import ExternalIdentity

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = "openid email profile"
API_TIMEOUT_SECONDS = 10.0


class GoogleOAuthAdapter:
    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.client_id = client_id or os.getenv("GOOGLE_CLIENT_ID")
        self.client_secret = client_secret or os.getenv("GOOGLE_CLIENT_SECRET")
        self.redirect_uri = redirect_uri or os.getenv(
            "GOOGLE_REDIRECT_URI", "http://localhost:5001/api/auth/google/callback"
        )
        self._transport = transport

    def authorization_url(self, state: str) -> str:
        if not self.client_id:
            raise IdentityProviderError("Google sign-in is not configured")
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> ExternalIdentity:
        """Exchange an authorization code for the Google account's identity."""
        if not (self.client_id and self.client_secret):
            raise IdentityProviderError("Google sign-in is not configured")

        try:
            with httpx.Client(timeout=API_TIMEOUT_SECONDS, transport=self._transport) as client:
                token_response = _post_with_retry(client, GOOGLE_TOKEN_URL, {
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                })
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise IdentityProviderError("Google token response had no access token")

                info_response = _get_with_retry(client, GOOGLE_USERINFO_URL, access_token)
                info_response.raise_for_status()
                info = info_response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Google OAuth HTTP error",
                extra={"status_code": e.response.status_code, "url": str(e.request.url)},
            )
            raise IdentityProviderError("Google rejected the sign-in") from e
        except httpx.RequestError as e:
            logger.warning("Google OAuth request error", extra={"error_type": type(e).__name__})
            raise IdentityProviderError("Could not reach Google") from e

        return _to_identity(info)


def _to_identity(info: dict) -> ExternalIdentity:
    provider_id = info.get("sub")
    email = info.get("email")
    if not provider_id or not email:
        raise IdentityProviderError("Google profile is missing id or email")
    if info.get("email_verified") is False:
        raise IdentityProviderError("Google account email is not verified")
    return ExternalIdentity(
        provider_id=str(provider_id),
        email=email,
        name=info.get("name") or email.split("@")[0],
        photo=info.get("picture"),
    )


# ── HTTP helpers ─────────────────────────────────────────────

_transient = retry(
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=4),
    reraise=True,
)


@_transient
def _post_with_retry(client: httpx.Client, url: str, data: dict) -> httpx.Response:
    return client.post(url, data=data)


@_transient
def _get_with_retry(client: httpx.Client, url: str, access_token: str) -> httpx.Response:
    return client.get(url, headers={"Authorization": f"Bearer {access_token}"})
