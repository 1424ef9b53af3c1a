"""In-memory implementation of IdentityProviderPort for testing."""

from urllib.parse import urlencode

from domain.model.errors import IdentityProviderError
from domain.model.user import ExternalIdentity


class FakeIdentityProvider:
    """Maps callback codes to preconfigured identities."""

    def __init__(self, identities: dict[str, ExternalIdentity] | None = None):
        self.identities = identities or {}

    def authorization_url(self, state: str) -> str:
        return "https://accounts.example.com/auth?" + urlencode({"state": state})

    def exchange_code(self, code: str) -> ExternalIdentity:
        identity = self.identities.get(code)
        if identity is None:
            raise IdentityProviderError("Unknown authorization code")
        return identity
