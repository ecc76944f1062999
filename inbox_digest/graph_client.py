"""Microsoft Graph helper focused on unread-message listing and sending."""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from requests import Response

from .auth import CredentialProvider
from .config import Settings
from .errors import AuthError, FetchError, SendError
from .models import Email

logger = logging.getLogger(__name__)


class GraphClient:
    """Thin wrapper around the Graph mail endpoints used by the digest."""

    GRAPH_BASE = "https://graph.microsoft.com/v1.0"
    MESSAGE_FIELDS = "id,subject,body,bodyPreview,from,isRead"

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialProvider | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.credentials = credentials or CredentialProvider(settings)
        self.session = session or requests.Session()
        self.timeout = settings.http_timeout_seconds

    def list_unread(self, mailbox_id: str, max_messages: int | None = None) -> list[Email]:
        """Return unread messages in the configured folder, following Graph paging."""
        folder = quote(self.settings.graph_mail_folder)
        url = f"{self.GRAPH_BASE}{self._user_root(mailbox_id)}/mailFolders/{folder}/messages"
        params = {
            "$filter": "isRead eq false",
            "$select": self.MESSAGE_FIELDS,
            "$top": self.settings.graph_page_size,
        }
        headers = {"Prefer": 'outlook.body-content-type="text"'}

        emails: list[Email] = []
        while url:
            logger.debug("Fetching Graph messages page %s", url)
            try:
                response = self._request("GET", url, params=params, headers=headers)
                payload = response.json()
            except (requests.RequestException, ValueError) as exc:
                raise FetchError(f"Listing unread messages for {mailbox_id} failed: {exc}") from exc

            for raw in payload.get("value", []):
                emails.append(self._to_email(raw))
                if max_messages and len(emails) >= max_messages:
                    return emails

            url = payload.get("@odata.nextLink")
            params = None  # nextLink already carries the query

        return emails

    def send(self, to_address: str, subject: str, body_text: str) -> None:
        """Send a plain-text message from the sender mailbox to one recipient."""
        url = f"{self.GRAPH_BASE}{self._user_root(self.settings.sender_mailbox)}/sendMail"
        message = {
            "message": {
                "subject": subject,
                "body": {"contentType": "Text", "content": body_text},
                "toRecipients": [{"emailAddress": {"address": to_address}}],
            },
            "saveToSentItems": True,
        }
        logger.info("Sending '%s' to %s", subject, to_address)
        try:
            self._request("POST", url, json=message)
        except (requests.RequestException, AuthError) as exc:
            raise SendError(f"Sending '{subject}' to {to_address} failed: {exc}") from exc

    def mark_read(self, email_id: str) -> None:
        url = (
            f"{self.GRAPH_BASE}{self._user_root(self.settings.graph_mailbox)}"
            f"/messages/{quote(email_id)}"
        )
        try:
            self._request("PATCH", url, json={"isRead": True})
        except (requests.RequestException, AuthError) as exc:
            raise SendError(f"Marking message {email_id} read failed: {exc}") from exc

    def _request(self, method: str, url: str, **kwargs) -> Response:
        headers = {"Authorization": f"Bearer {self.credentials.acquire_token()}"}
        headers.update(kwargs.pop("headers", None) or {})
        resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        if resp.status_code >= 400:
            logger.error("Graph request failed (%s): %s", resp.status_code, resp.text)
            resp.raise_for_status()
        return resp

    @staticmethod
    def _user_root(mailbox_id: str) -> str:
        return f"/users/{quote(mailbox_id)}"

    @staticmethod
    def _to_email(raw: dict) -> Email:
        sender = (raw.get("from") or {}).get("emailAddress") or {}
        body = raw.get("body") or {}
        return Email(
            id=raw["id"],
            subject=raw.get("subject") or "",
            body_text=body.get("content") or raw.get("bodyPreview") or "",
            sender_address=sender.get("address", ""),
            sender_name=sender.get("name"),
            is_read=bool(raw.get("isRead", False)),
        )
