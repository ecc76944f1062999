"""Client-credentials token acquisition for Microsoft Graph."""

from __future__ import annotations

import logging

import msal

from .config import Settings
from .errors import AuthError

logger = logging.getLogger(__name__)


class CredentialProvider:
    """Exchange the app registration's client secret for a Graph bearer token."""

    GRAPH_SCOPE = ["https://graph.microsoft.com/.default"]

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._app: msal.ConfidentialClientApplication | None = None

    @property
    def app(self) -> msal.ConfidentialClientApplication:
        if self._app is None:
            self._app = msal.ConfidentialClientApplication(
                client_id=self.settings.graph_client_id,
                client_credential=self.settings.graph_client_secret,
                authority=self.settings.authority_url,
            )
        return self._app

    def acquire_token(self) -> str:
        try:
            result = self.app.acquire_token_silent(self.GRAPH_SCOPE, account=None)
            if not result:
                logger.debug("No cached Graph token; requesting a new one")
                result = self.app.acquire_token_for_client(scopes=self.GRAPH_SCOPE)
        except (ValueError, OSError) as exc:
            raise AuthError(f"Unable to obtain Graph token: {exc}") from exc
        if not result or "access_token" not in result:
            description = (result or {}).get("error_description") or (result or {}).get("error")
            raise AuthError(f"Unable to obtain Graph token: {description}")
        return result["access_token"]
