"""Configuration management for the weekly inbox digest."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


@dataclass(frozen=True)
class Configured:
    """A summary destination address was provided."""

    address: str


@dataclass(frozen=True)
class Unset:
    """No summary destination; the report goes to standard output."""


SummaryDestination = Configured | Unset


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    graph_tenant_id: str = Field(..., validation_alias=AliasChoices("GRAPH_TENANT_ID", "TENANT_ID"))
    graph_client_id: str = Field(..., validation_alias=AliasChoices("GRAPH_CLIENT_ID", "CLIENT_ID"))
    graph_client_secret: str = Field(
        ..., validation_alias=AliasChoices("GRAPH_CLIENT_SECRET", "CLIENT_SECRET")
    )
    graph_authority: str | None = Field(None, alias="GRAPH_AUTHORITY")
    graph_mailbox: str = Field(..., alias="GRAPH_MAILBOX")
    graph_sender_mailbox: str | None = Field(None, alias="GRAPH_SENDER_MAILBOX")
    graph_mail_folder: str = Field("Inbox", alias="GRAPH_MAIL_FOLDER")
    graph_page_size: int = Field(25, alias="GRAPH_PAGE_SIZE")

    summary_email_address: str | None = Field(None, alias="SUMMARY_EMAIL_ADDRESS")
    summary_subject: str = Field("Email Summary", alias="SUMMARY_SUBJECT")

    azure_openai_endpoint: str = Field(..., alias="AZURE_OPENAI_ENDPOINT")
    azure_openai_api_key: str = Field(..., alias="AZURE_OPENAI_API_KEY")
    azure_openai_api_version: str = Field("2024-02-01", alias="AZURE_OPENAI_API_VERSION")
    azure_openai_deployment: str = Field(..., alias="AZURE_OPENAI_DEPLOYMENT")
    classifier_temperature: float = Field(0.2, alias="CLASSIFIER_TEMPERATURE")
    classifier_max_body_chars: int = Field(4000, alias="CLASSIFIER_MAX_BODY_CHARS")

    http_timeout_seconds: float = Field(30, alias="HTTP_TIMEOUT_SECONDS")
    mark_read_after_summary: bool = Field(False, alias="MARK_READ_AFTER_SUMMARY")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "graph_tenant_id",
        "graph_client_id",
        "graph_client_secret",
        "graph_authority",
        "graph_mailbox",
        "graph_sender_mailbox",
        "summary_email_address",
        "azure_openai_endpoint",
        "azure_openai_api_key",
        "azure_openai_deployment",
        mode="before",
    )
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("graph_mail_folder", mode="before")
    @classmethod
    def _normalize_mail_folder(cls, value):
        if isinstance(value, str):
            return value.strip() or "Inbox"
        return value

    @classmethod
    def load(cls, **overrides) -> "Settings":
        """Build settings once at startup, turning validation failures into ConfigError."""
        try:
            return cls(**overrides)
        except ValidationError as exc:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
            raise ConfigError(
                f"Invalid or missing configuration: {', '.join(fields) or 'unknown'}"
            ) from exc

    @property
    def authority_url(self) -> str:
        if self.graph_authority:
            return self.graph_authority.rstrip("/")
        return f"https://login.microsoftonline.com/{self.graph_tenant_id}"

    @property
    def sender_mailbox(self) -> str:
        """Mailbox the summary is sent from; defaults to the summarised mailbox."""
        return self.graph_sender_mailbox or self.graph_mailbox

    @property
    def summary_destination(self) -> SummaryDestination:
        if self.summary_email_address:
            return Configured(self.summary_email_address)
        return Unset()
