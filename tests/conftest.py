"""Shared fixtures for the mailer test suite."""

import os

import pytest

from mailer.config import Settings


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4 fake invoice")
    return path


@pytest.fixture
def quote_file(tmp_path):
    path = tmp_path / "quote.pdf"
    path.write_bytes(b"%PDF-1.4 fake quote")
    return path


@pytest.fixture
def settings(tmp_path, pdf_file, quote_file, monkeypatch):
    """Settings built from explicit values; ambient MAILER_* variables are cleared."""
    for key in list(os.environ):
        if key.startswith("MAILER_"):
            monkeypatch.delenv(key, raising=False)
    return Settings(
        _env_file=None,
        MAILER_API_KEY="test-api-key",
        MAILER_API_BASE_URL="https://mail.example.test/api",
        MAILER_FROM="Hondenschool Test",
        MAILER_DOMAIN="example.test",
        MAILER_REPLY_TO="support@example.test",
        MAILER_INVOICE_JSON=str(tmp_path / "invoices.json"),
        MAILER_INVOICE_PDF=str(pdf_file),
        MAILER_QUOTE_PDF=str(quote_file),
        MAILER_TEST_EMAIL="test@example.test",
        MAILER_AUTOMATIONS_EMAIL="automations@example.test",
    )
