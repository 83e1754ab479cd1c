"""Envelope builders and endpoint tables for each command family."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .attachments import invite_attachment, load_attachment
from .config import Settings
from .models import (
    Attachment,
    EmailIdentity,
    FileType,
    OutboundEnvelope,
    RecipientSet,
    TemplateSelector,
)
from .routes import Endpoint, Route, alias
from .scheduling import ScheduledAppointment

logger = logging.getLogger(__name__)

QUOTE_ATTACHMENT_NAME = "offerte.pdf"

# Invoice fields arrive as strings from the numbers-parser export; missing
# ones fall back to these literals so a partial record is still sendable.
INVOICE_DEFAULTS: dict[str, str] = {
    "client_name": "Unknown",
    "client_email": "Unknown",
    "invoice_id": "000000",
    "due_date": "N/A",
    "product_line": "N/A",
    "revenue_amount": "0.00",
    "amount": "0.00",
    "vat_percentage": "0.00",
    "vat_amount": "0.00",
    "account_value": "0.00",
    "account_fulfilled": "0.00",
    "terms_total": "0",
    "terms_current": "0",
}


def invoice_endpoint(expired: bool = False, simple: bool = False) -> Endpoint:
    if expired:
        return Endpoint.EXPIRED
    if simple:
        return Endpoint.ISSUE_SIMPLE
    return Endpoint.ISSUE


def appointment_endpoint(reminder: bool = False) -> Endpoint:
    return Endpoint.REMINDER if reminder else Endpoint.CONFIRMATION


def lead_endpoint(follow: bool = False, check: bool = False) -> Endpoint:
    if check:
        return Endpoint.CHECK
    if follow:
        return Endpoint.FOLLOW
    return Endpoint.CONFIRMATION


def service_endpoint(follow: bool = False, demo: bool = False) -> Endpoint:
    if demo:
        return Endpoint.DEMO
    if follow:
        return Endpoint.FOLLOW
    return Endpoint.ONBOARDING


def quote_endpoint(follow: bool = False) -> Endpoint:
    return Endpoint.FOLLOW if follow else Endpoint.ISSUE


def resolution_endpoint(follow: bool = False) -> Endpoint:
    return Endpoint.FOLLOW if follow else Endpoint.REVIEW


def affiliate_endpoint(food: bool = False) -> Optional[Endpoint]:
    """Affiliate mail has no default; ``None`` means nothing should be sent."""
    if food:
        return Endpoint.FOOD
    return None


def invoice_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        return INVOICE_DEFAULTS[key]
    return str(value)


class PayloadBuilder:
    """Assemble outbound envelopes from typed command inputs."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def sender(
        self,
        route: Route,
        alias_override: Optional[str] = None,
        name_override: Optional[str] = None,
        domain_override: Optional[str] = None,
    ) -> EmailIdentity:
        return EmailIdentity(
            name=name_override or self.settings.sender_name,
            alias=alias_override or self.settings.sender_alias(route),
            domain=domain_override or self.settings.domain,
        )

    def _client_variables(
        self,
        client_name: str,
        email: str,
        dog_name: Optional[str],
        extra: Optional[Mapping[str, Any]],
    ) -> dict[str, Any]:
        variables: dict[str, Any] = {"name": client_name, "email": email}
        if dog_name:
            variables["dog"] = dog_name
        variables.update(extra or {})
        return variables

    def _envelope(
        self,
        route: Route,
        endpoint: Endpoint,
        to: Sequence[str],
        variables: dict[str, Any],
        *,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        subject: Optional[str] = None,
        attachments: Sequence[Attachment] = (),
        alias_override: Optional[str] = None,
    ) -> OutboundEnvelope:
        return OutboundEnvelope(
            sender=self.sender(route, alias_override),
            recipients=RecipientSet(to=list(to), cc=list(cc), bcc=list(bcc)),
            subject=subject,
            template=TemplateSelector(category=route.value, file=endpoint.value, variables=variables),
            reply_to=self.settings.reply_to,
            attachments=list(attachments),
        )

    def mail(
        self,
        to: Sequence[str],
        *,
        category: Optional[str] = None,
        file: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        subject: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        reply_to: Optional[Sequence[str]] = None,
        attachments: Sequence[Attachment] = (),
        alias_override: Optional[str] = None,
        sender_name: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> OutboundEnvelope:
        """Free-form mail where the caller picks template, recipients and sender."""
        return OutboundEnvelope(
            sender=self.sender(Route.SEND, alias_override, sender_name, domain),
            recipients=RecipientSet(to=list(to), cc=list(cc), bcc=list(bcc)),
            subject=subject,
            template=TemplateSelector(category=category, file=file, variables=dict(variables or {})),
            headers=dict(headers or {}),
            reply_to=list(self.settings.reply_to if reply_to is None else reply_to),
            attachments=list(attachments),
        )

    def invoice(
        self,
        data: Mapping[str, Any],
        recipient: str,
        endpoint: Endpoint = Endpoint.ISSUE,
        *,
        pdf_path: Optional[Path] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        invoice_number = invoice_field(data, "invoice_id")
        template_variables: dict[str, Any] = {
            "name": invoice_field(data, "client_name"),
            "email": recipient,
            "invoice_number": invoice_number,
            "due_date": invoice_field(data, "due_date"),
            "amount": invoice_field(data, "revenue_amount"),
            "vat_amount": invoice_field(data, "vat_amount"),
            "vat_percentage": invoice_field(data, "vat_percentage"),
            "total": invoice_field(data, "amount"),
            "product_line": invoice_field(data, "product_line"),
            "terms_total": invoice_field(data, "terms_total"),
            "terms_current": invoice_field(data, "terms_current"),
            "account_value": invoice_field(data, "account_value"),
            "account_fulfilled": invoice_field(data, "account_fulfilled"),
        }
        template_variables.update(variables or {})

        attachment = load_attachment(
            pdf_path or self.settings.invoice_pdf,
            file_type=FileType.PDF,
            name=f"factuur-{invoice_number}.pdf",
        )
        bcc = [self.settings.automations_email] if self.settings.automations_email else []
        return self._envelope(
            Route.INVOICE,
            endpoint,
            [recipient],
            template_variables,
            bcc=bcc,
            attachments=[attachment],
        )

    def appointment(
        self,
        client_name: str,
        email: str,
        dog_name: str,
        scheduled: Sequence[ScheduledAppointment],
        endpoint: Endpoint = Endpoint.CONFIRMATION,
        *,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        """Appointment mail; variables and invites follow the scheduled (sorted) order."""
        template_variables = self._client_variables(client_name, email, dog_name, None)
        template_variables["appointments"] = [item.record.to_variables() for item in scheduled]
        template_variables.update(variables or {})
        return self._envelope(
            Route.APPOINTMENT,
            endpoint,
            [email],
            template_variables,
            cc=cc,
            bcc=bcc,
            attachments=[invite_attachment(item.invite) for item in scheduled],
        )

    def lead(
        self,
        client_name: str,
        email: str,
        endpoint: Endpoint = Endpoint.CONFIRMATION,
        *,
        dog_name: Optional[str] = None,
        availability: Optional[Mapping[str, Any]] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        template_variables = self._client_variables(client_name, email, dog_name, None)
        if availability:
            template_variables["availability"] = dict(availability)
        template_variables.update(variables or {})
        return self._envelope(Route.LEAD, endpoint, [email], template_variables, cc=cc, bcc=bcc)

    def quote(
        self,
        client_name: str,
        email: str,
        endpoint: Endpoint = Endpoint.ISSUE,
        *,
        dog_name: Optional[str] = None,
        pdf_path: Optional[Path] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        attachments = []
        if endpoint == Endpoint.ISSUE:
            attachments.append(self.quote_attachment(pdf_path))
        return self._envelope(
            Route.QUOTE,
            endpoint,
            [email],
            self._client_variables(client_name, email, dog_name, variables),
            cc=cc,
            bcc=bcc,
            attachments=attachments,
        )

    def quote_attachment(self, pdf_path: Optional[Path] = None) -> Attachment:
        return load_attachment(
            pdf_path or self.settings.quote_pdf,
            file_type=FileType.PDF,
            name=QUOTE_ATTACHMENT_NAME,
        )

    def service(
        self,
        client_name: str,
        email: str,
        endpoint: Endpoint = Endpoint.ONBOARDING,
        *,
        dog_name: Optional[str] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        return self._envelope(
            Route.SERVICE,
            endpoint,
            [email],
            self._client_variables(client_name, email, dog_name, variables),
            cc=cc,
            bcc=bcc,
        )

    def resolution(
        self,
        client_name: str,
        email: str,
        endpoint: Endpoint = Endpoint.REVIEW,
        *,
        dog_name: Optional[str] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        return self._envelope(
            Route.RESOLUTION,
            endpoint,
            [email],
            self._client_variables(client_name, email, dog_name, variables),
            cc=cc,
            bcc=bcc,
        )

    def affiliate(
        self,
        client_name: str,
        email: str,
        endpoint: Endpoint,
        *,
        dog_name: Optional[str] = None,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        return self._envelope(
            Route.AFFILIATE,
            endpoint,
            [email],
            self._client_variables(client_name, email, dog_name, variables),
            cc=cc,
            bcc=bcc,
        )

    def template_fetch(
        self,
        category: str,
        file: str,
        to: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        """Ask the API for a rendered template; recipients are optional here."""
        return OutboundEnvelope(
            sender=self.sender(Route.TEMPLATE),
            recipients=RecipientSet(to=list(to)),
            template=TemplateSelector(category=category, file=file, variables=dict(variables or {})),
        )

    def custom_message(
        self,
        client_name: str,
        email: str,
        message: str,
        *,
        subject: Optional[str] = None,
        with_quote: bool = False,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> OutboundEnvelope:
        """Hand-written message; the quote variant sends as the quote mailbox with the quote PDF."""
        template_variables = self._client_variables(client_name, email, None, None)
        template_variables["body"] = message
        template_variables.update(variables or {})
        attachments = [self.quote_attachment()] if with_quote else []
        return self._envelope(
            Route.CUSTOM,
            Endpoint.MESSAGE_SEND,
            [email],
            template_variables,
            cc=cc,
            bcc=bcc,
            subject=subject,
            attachments=attachments,
            alias_override=alias(Route.QUOTE) if with_quote else None,
        )
