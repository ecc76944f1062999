"""Azure OpenAI email classifier."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests
from pydantic import ValidationError

from .config import Settings
from .errors import ClassificationError
from .models import Category, Classification, Importance, SuggestedAction
from .utils import or_sentinel, strip_code_fence, truncate

logger = logging.getLogger(__name__)

NO_SUBJECT = "No Subject"
NO_CONTENT = "No Content"


def _choices(enum_cls) -> str:
    return " | ".join(member.value for member in enum_cls)


PROMPT_TEMPLATE = f"""You are an email assistant. Classify this email and suggest what to do.

Subject: {{subject}}
Body: {{body}}

Respond with JSON only, no prose and no Markdown, using exactly these four fields:
{{{{
  "category": "{_choices(Category)}",
  "importance": "{_choices(Importance)}",
  "suggestedAction": "{_choices(SuggestedAction)}",
  "summary": "one or two sentence summary"
}}}}
"""


def build_prompt(subject: str | None, body_text: str | None, max_body_chars: int = 0) -> str:
    """Embed subject and body in the fixed classification prompt."""
    subject = or_sentinel(subject, NO_SUBJECT)
    body = truncate(or_sentinel(body_text, NO_CONTENT), max_body_chars)
    return PROMPT_TEMPLATE.format(subject=subject, body=body)


def parse_classification(content: str) -> Classification:
    """Validate a completion's text against the Classification schema."""
    try:
        payload = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise ClassificationError(f"Response is not JSON: {content!r}") from exc
    if not isinstance(payload, dict):
        raise ClassificationError(f"Response is not a JSON object: {content!r}")
    try:
        return Classification.model_validate(payload)
    except ValidationError as exc:
        raise ClassificationError(f"Response does not match the schema: {exc}") from exc


class EmailClassifier:
    """Ask a chat deployment for a category/importance/action/summary judgment."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        endpoint = settings.azure_openai_endpoint.rstrip("/")
        self.url = (
            f"{endpoint}/openai/deployments/{settings.azure_openai_deployment}/chat/completions"
        )

    def classify(self, subject: str | None, body_text: str | None) -> Classification | None:
        """Return a Classification, or None when any step fails."""
        try:
            return self._classify(subject, body_text)
        except ClassificationError as exc:
            logger.warning("Classification failed for '%s': %s", subject or NO_SUBJECT, exc)
            return None

    def _classify(self, subject: str | None, body_text: str | None) -> Classification:
        prompt = build_prompt(subject, body_text, self.settings.classifier_max_body_chars)
        body: dict[str, Any] = {
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.settings.classifier_temperature,
        }
        try:
            response = self.session.post(
                self.url,
                params={"api-version": self.settings.azure_openai_api_version},
                headers={"api-key": self.settings.azure_openai_api_key},
                json=body,
                timeout=self.settings.http_timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ClassificationError(f"Completion request failed: {exc}") from exc

        if response.status_code >= 400:
            raise ClassificationError(
                f"Completion request failed ({response.status_code}): {response.text}"
            )

        content = self._extract_content(response)
        logger.debug("Completion content: %s", content)
        return parse_classification(content)

    @staticmethod
    def _extract_content(response) -> str:
        try:
            payload = response.json()
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ClassificationError(f"Completion response has no content: {exc}") from exc
        if not isinstance(content, str) or not content.strip():
            raise ClassificationError("Completion response has empty content")
        return content
