"""Envelope construction, omission of empty fields and endpoint tables."""

import base64
import json
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from mailer.models import EmailIdentity, FileType, OutboundEnvelope, RecipientSet, TemplateSelector
from mailer.payloads import (
    INVOICE_DEFAULTS,
    PayloadBuilder,
    affiliate_endpoint,
    appointment_endpoint,
    invoice_endpoint,
    lead_endpoint,
    quote_endpoint,
    resolution_endpoint,
    service_endpoint,
)
from mailer.routes import Endpoint, Route, alias
from mailer.scheduling import schedule


@pytest.fixture
def builder(settings):
    return PayloadBuilder(settings)


class TestEnvelopeOmission:
    def _envelope(self, **kwargs):
        return OutboundEnvelope(
            sender=EmailIdentity("Hondenschool", "info", "example.test"),
            recipients=kwargs.pop("recipients", RecipientSet(to=["anna@example.test"])),
            template=TemplateSelector(category="send", file="new", variables={"name": "Anna"}),
            **kwargs,
        )

    def test_empty_optional_fields_are_absent(self):
        body = self._envelope().to_dict()

        for key in ("cc", "bcc", "subject", "headers", "replyTo", "attachments"):
            assert key not in body
        assert body["to"] == ["anna@example.test"]

    def test_empty_strings_and_lists_are_absent(self):
        body = self._envelope(subject="", headers={}, reply_to=[]).to_dict()

        assert "subject" not in body
        assert "headers" not in body
        assert "replyTo" not in body

    def test_to_is_present_even_when_empty(self):
        body = self._envelope(recipients=RecipientSet(to=[])).to_dict()
        assert body["to"] == []

    def test_non_empty_optional_fields_are_present(self):
        body = self._envelope(
            recipients=RecipientSet(to=["a@example.test"], cc=["c@example.test"], bcc=["b@example.test"]),
            subject="Hallo",
            headers={"X-Campaign": "spring"},
            reply_to=["support@example.test"],
        ).to_dict()

        assert body["cc"] == ["c@example.test"]
        assert body["bcc"] == ["b@example.test"]
        assert body["subject"] == "Hallo"
        assert body["headers"] == {"X-Campaign": "spring"}
        assert body["replyTo"] == ["support@example.test"]

    def test_serializes_to_json_bytes(self):
        body = json.loads(self._envelope().to_json())
        assert body["from"] == {"name": "Hondenschool", "alias": "info", "domain": "example.test"}
        assert body["template"] == {"category": "send", "file": "new", "variables": {"name": "Anna"}}

    def test_template_without_category_or_file(self):
        assert TemplateSelector(variables={}).to_dict() == {"variables": {}}


class TestEndpointTables:
    def test_invoice(self):
        assert invoice_endpoint() == Endpoint.ISSUE
        assert invoice_endpoint(expired=True) == Endpoint.EXPIRED
        assert invoice_endpoint(simple=True) == Endpoint.ISSUE_SIMPLE
        assert invoice_endpoint(expired=True, simple=True) == Endpoint.EXPIRED

    def test_lead_check_beats_follow(self):
        assert lead_endpoint() == Endpoint.CONFIRMATION
        assert lead_endpoint(follow=True) == Endpoint.FOLLOW
        assert lead_endpoint(check=True, follow=True) == Endpoint.CHECK

    def test_service_demo_beats_follow(self):
        assert service_endpoint() == Endpoint.ONBOARDING
        assert service_endpoint(follow=True) == Endpoint.FOLLOW
        assert service_endpoint(demo=True, follow=True) == Endpoint.DEMO

    def test_quote_resolution_appointment(self):
        assert quote_endpoint() == Endpoint.ISSUE
        assert quote_endpoint(follow=True) == Endpoint.FOLLOW
        assert resolution_endpoint() == Endpoint.REVIEW
        assert resolution_endpoint(follow=True) == Endpoint.FOLLOW
        assert appointment_endpoint() == Endpoint.CONFIRMATION
        assert appointment_endpoint(reminder=True) == Endpoint.REMINDER

    def test_affiliate_has_no_default(self):
        assert affiliate_endpoint() is None
        assert affiliate_endpoint(food=True) == Endpoint.FOOD


class TestInvoiceBuilder:
    def test_maps_parsed_fields_into_variables(self, builder):
        data = {
            "client_name": "Anna",
            "client_email": "anna@example.test",
            "invoice_id": "202401",
            "revenue_amount": "100.00",
            "amount": "121.00",
            "vat_amount": "21.00",
            "vat_percentage": "21",
        }

        body = builder.invoice(data, "anna@example.test").to_dict()
        variables = body["template"]["variables"]

        assert body["template"]["category"] == "invoice"
        assert body["template"]["file"] == "issue"
        assert variables["invoice_number"] == "202401"
        assert variables["amount"] == "100.00"
        assert variables["total"] == "121.00"
        assert body["to"] == ["anna@example.test"]
        assert body["bcc"] == ["automations@example.test"]
        assert body["replyTo"] == ["support@example.test"]
        assert body["from"]["alias"] == alias(Route.INVOICE)

    def test_missing_fields_use_defaults(self, builder):
        variables = builder.invoice({}, "anna@example.test").template.variables

        assert variables["invoice_number"] == INVOICE_DEFAULTS["invoice_id"] == "000000"
        assert variables["due_date"] == "N/A"
        assert variables["vat_amount"] == "0.00"
        assert variables["terms_current"] == "0"

    def test_attaches_pdf_named_after_invoice_number(self, builder, pdf_file):
        envelope = builder.invoice({"invoice_id": "202401"}, "anna@example.test")

        [attachment] = envelope.attachments
        assert attachment.name == "factuur-202401.pdf"
        assert attachment.type == FileType.PDF
        assert base64.b64decode(attachment.value) == pdf_file.read_bytes()

    def test_expired_endpoint_selects_template_file(self, builder):
        envelope = builder.invoice({}, "anna@example.test", Endpoint.EXPIRED)
        assert envelope.template.file == "expired"

    def test_invoice_alias_override(self, settings):
        settings.alias_invoice = "facturen"
        envelope = PayloadBuilder(settings).invoice({}, "anna@example.test")
        assert envelope.sender.alias == "facturen"


class TestAppointmentBuilder:
    def test_variables_and_invites_follow_sorted_order(self, builder):
        scheduled = schedule(
            [
                {"date": "02/01/2024", "time": "10:00", "day": "dinsdag"},
                {"date": "01/01/2024", "time": "09:00", "day": "maandag"},
            ],
            "Anna",
            "Rex",
            ZoneInfo("Europe/Amsterdam"),
            clock=lambda: datetime(2024, 1, 1, tzinfo=UTC),
        )

        body = builder.appointment("Anna", "anna@example.test", "Rex", scheduled).to_dict()

        days = [item["day"] for item in body["template"]["variables"]["appointments"]]
        names = [item["name"] for item in body["attachments"]]
        assert days == ["maandag", "dinsdag"]
        assert names == ["appointment-01-01-2024-Rex.ics", "appointment-02-01-2024-Rex.ics"]
        assert body["template"]["variables"]["dog"] == "Rex"
        assert body["from"]["alias"] == alias(Route.APPOINTMENT)


class TestClientBuilders:
    def test_lead_availability_is_nested_in_order(self, builder):
        availability = {"vrijdag": {"start": "09:00", "end": "12:00"}, "maandag": {"start": "13:00", "end": "17:00"}}

        body = builder.lead("Anna", "anna@example.test", availability=availability).to_dict()

        assert list(body["template"]["variables"]["availability"]) == ["vrijdag", "maandag"]

    def test_lead_without_availability_or_dog(self, builder):
        variables = builder.lead("Anna", "anna@example.test").template.variables
        assert "availability" not in variables
        assert "dog" not in variables

    def test_quote_issue_attaches_offerte(self, builder):
        envelope = builder.quote("Anna", "anna@example.test")

        assert [a.name for a in envelope.attachments] == ["offerte.pdf"]
        assert envelope.sender.alias == alias(Route.QUOTE)

    def test_quote_follow_has_no_attachment(self, builder):
        body = builder.quote("Anna", "anna@example.test", Endpoint.FOLLOW).to_dict()
        assert "attachments" not in body

    def test_extra_variables_override_defaults(self, builder):
        envelope = builder.service("Anna", "anna@example.test", variables={"name": "Anna B.", "plan": "basis"})
        assert envelope.template.variables["name"] == "Anna B."
        assert envelope.template.variables["plan"] == "basis"

    def test_cc_and_bcc_only_when_given(self, builder):
        body = builder.resolution("Anna", "anna@example.test", cc=["x@example.test"]).to_dict()
        assert body["cc"] == ["x@example.test"]
        assert "bcc" not in body


class TestCustomMessage:
    def test_uses_custom_alias_by_default(self, builder):
        envelope = builder.custom_message("Anna", "anna@example.test", "Tot morgen!")

        assert envelope.sender.alias == alias(Route.CUSTOM)
        assert envelope.template.variables["body"] == "Tot morgen!"
        assert envelope.attachments == []

    def test_quote_variant_switches_alias_and_attaches_quote(self, builder):
        envelope = builder.custom_message("Anna", "anna@example.test", "Zie bijlage", with_quote=True)

        assert envelope.sender.alias == alias(Route.QUOTE)
        assert [a.name for a in envelope.attachments] == ["offerte.pdf"]


class TestMailBuilder:
    def test_explicit_reply_to_replaces_configured(self, builder):
        body = builder.mail(["a@example.test"], reply_to=[]).to_dict()
        assert "replyTo" not in body

    def test_alias_override(self, builder):
        assert builder.mail(["a@example.test"], alias_override="kantoor").sender.alias == "kantoor"

    def test_template_fetch_has_only_template(self, builder):
        body = builder.template_fetch("invoice", "issue").to_dict()
        assert set(body) == {"from", "to", "template"}
        assert body["to"] == []


def test_mail_sender_name_and_domain_overrides(builder):
    sender = builder.mail(["a@example.test"], sender_name="Kantoor", domain="other.test").sender

    assert sender.name == "Kantoor"
    assert sender.domain == "other.test"
    assert sender.alias == alias(Route.SEND)
