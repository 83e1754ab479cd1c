"""Configuration management for the mailer CLI."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .routes import Endpoint, Route, alias
from .utils import split_list

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    api_key: str = Field(..., alias="MAILER_API_KEY")
    api_base_url: HttpUrl = Field(..., alias="MAILER_API_BASE_URL")
    default_endpoint: Endpoint = Field(Endpoint.NEW, alias="MAILER_API_ENDPOINT_DEFAULT")
    request_timeout: float = Field(30.0, alias="MAILER_REQUEST_TIMEOUT")

    sender_name: str = Field(..., alias="MAILER_FROM")
    alias: str | None = Field(None, alias="MAILER_ALIAS")
    alias_invoice: str | None = Field(None, alias="MAILER_ALIAS_INVOICE")
    domain: str = Field(..., alias="MAILER_DOMAIN")
    reply_to_raw: str = Field("", alias="MAILER_REPLY_TO")

    invoice_json: Path = Field(Path("data/invoices.json"), alias="MAILER_INVOICE_JSON")
    invoice_pdf: Path = Field(Path("data/invoice.pdf"), alias="MAILER_INVOICE_PDF")
    quote_pdf: Path = Field(Path("data/offerte.pdf"), alias="MAILER_QUOTE_PDF")
    numbers_parser: str = Field("numbers-parser", alias="MAILER_NUMBERS_PARSER")

    test_email: str | None = Field(None, alias="MAILER_TEST_EMAIL")
    automations_email: str | None = Field(None, alias="MAILER_AUTOMATIONS_EMAIL")

    timezone: str = Field("Europe/Amsterdam", alias="MAILER_TIMEZONE")
    appointment_duration_minutes: int = Field(120, alias="MAILER_APPOINTMENT_DURATION")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "alias",
        "alias_invoice",
        "test_email",
        "automations_email",
        mode="before",
    )
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("default_endpoint", mode="before")
    @classmethod
    def _default_endpoint_blank(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return Endpoint.NEW
        return value

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @property
    def base_url(self) -> str:
        return str(self.api_base_url).rstrip("/")

    @property
    def reply_to(self) -> list[str]:
        return split_list(self.reply_to_raw, delimiters=";,")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def appointment_duration(self) -> timedelta:
        return timedelta(minutes=self.appointment_duration_minutes)

    def sender_alias(self, route: Route) -> str:
        """Resolve the alias for a route, honouring configured overrides."""
        if route == Route.INVOICE and self.alias_invoice:
            return self.alias_invoice
        if route == Route.SEND and self.alias:
            return self.alias
        return alias(route)
