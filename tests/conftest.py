from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from inbox_digest.config import Settings
from inbox_digest.models import Classification, Email

BASE_ENV = {
    "GRAPH_TENANT_ID": "tenant-123",
    "GRAPH_CLIENT_ID": "client-123",
    "GRAPH_CLIENT_SECRET": "secret-123",
    "GRAPH_MAILBOX": "owner@example.com",
    "AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com/",
    "AZURE_OPENAI_API_KEY": "key-123",
    "AZURE_OPENAI_DEPLOYMENT": "gpt-4o",
}

ENV_NAMES = [
    *BASE_ENV,
    "TENANT_ID",
    "CLIENT_ID",
    "CLIENT_SECRET",
    "GRAPH_SENDER_MAILBOX",
    "GRAPH_AUTHORITY",
    "GRAPH_MAIL_FOLDER",
    "SUMMARY_EMAIL_ADDRESS",
    "MARK_READ_AFTER_SUMMARY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's shell environment out of Settings."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    def make(**overrides) -> Settings:
        values = {**BASE_ENV, **overrides}
        return Settings(_env_file=None, **values)

    return make


@pytest.fixture
def settings(make_settings):
    return make_settings()


def make_email(email_id: str, subject: str, sender: str = "someone@example.com", body: str = "Body") -> Email:
    return Email(id=email_id, subject=subject, body_text=body, sender_address=sender)


def make_classification(category="work", importance="low", action="no_action", summary="Summary.") -> Classification:
    return Classification(
        category=category, importance=importance, suggested_action=action, summary=summary
    )


def fake_response(status_code: int = 200, payload=None, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response
