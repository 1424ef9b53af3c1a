"""Identity provider port: redirect-based OAuth handshake."""

from typing import Protocol

from domain.model.user import ExternalIdentity


class IdentityProviderPort(Protocol):
    def authorization_url(self, state: str) -> str:
        """URL the browser is redirected to in order to start the handshake."""
        ...

    def exchange_code(self, code: str) -> ExternalIdentity:
        """Trade the callback code for the provider's identity.

        Raise IdentityProviderError on any provider failure.
        """
        ...
