"""Command handlers: build an envelope, resolve its URL, dispatch it once."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from .attachments import load_attachments
from .config import Settings
from .dispatch import MailerClient
from .errors import DataError
from .invoice_source import read_invoice_data, run_numbers_parser
from .models import OutboundEnvelope
from .payloads import (
    PayloadBuilder,
    affiliate_endpoint,
    appointment_endpoint,
    invoice_endpoint,
    lead_endpoint,
    quote_endpoint,
    resolution_endpoint,
    service_endpoint,
)
from .routes import Endpoint, Route, RouteResolver
from .scheduling import parse_availability, schedule

logger = logging.getLogger(__name__)


class Mailer:
    """Wire settings, builders, URL resolution and the API client together."""

    def __init__(self, settings: Settings, client: MailerClient | None = None) -> None:
        self.settings = settings
        self.builder = PayloadBuilder(settings)
        self.resolver = RouteResolver(settings.base_url)
        self.client = client or MailerClient.from_settings(settings)

    def dispatch(
        self,
        route: Route,
        endpoint: Endpoint,
        envelope: OutboundEnvelope,
        *,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> bytes:
        resolver = RouteResolver(api_url) if api_url else self.resolver
        url = resolver.resolve(route, endpoint)
        for attachment in envelope.attachments:
            if not attachment.ok:
                logger.warning(
                    "Sending '%s' without content: %s", attachment.name, attachment.failure.reason
                )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Envelope:\n%s", json.dumps(envelope.redacted(), indent=2, ensure_ascii=False))
        logger.info("Sending %s/%s mail to %s", route.value, endpoint.value, ", ".join(envelope.recipients.to))
        response = self.client.send(url, envelope.to_json(), api_key=api_key)
        logger.info("Mail API response: %s", response.decode("utf-8", errors="replace"))
        return response

    def send_mail(
        self,
        to: Sequence[str],
        *,
        endpoint: Optional[Endpoint] = None,
        attachment_paths: Sequence[str] = (),
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        **options: Any,
    ) -> bytes:
        """Free-form send; *api_url* and *api_key* override the configured API for this call."""
        envelope = self.builder.mail(to, attachments=load_attachments(attachment_paths), **options)
        return self.dispatch(
            Route.SEND,
            endpoint or self.settings.default_endpoint,
            envelope,
            api_url=api_url,
            api_key=api_key,
        )

    def send_invoice(
        self,
        invoice_id: str,
        *,
        close: bool = False,
        return_to: Optional[str] = None,
        expired: bool = False,
        simple: bool = False,
        test: bool = False,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> bytes:
        run_numbers_parser(self.settings.numbers_parser, invoice_id, close=close, return_to=return_to)
        data = read_invoice_data(self.settings.invoice_json)

        if test:
            if not self.settings.test_email:
                raise DataError("MAILER_TEST_EMAIL must be set to send a test invoice")
            recipient = self.settings.test_email
        else:
            recipient = data.get("client_email", "").strip()
            if not recipient:
                raise DataError(f"Invoice {invoice_id} has no client_email")

        endpoint = invoice_endpoint(expired=expired, simple=simple)
        envelope = self.builder.invoice(data, recipient, endpoint, variables=variables)
        return self.dispatch(Route.INVOICE, endpoint, envelope)

    def send_appointment(
        self,
        client_name: str,
        email: str,
        dog_name: str,
        appointments: str,
        *,
        reminder: bool = False,
        **options: Any,
    ) -> bytes:
        scheduled = schedule(
            appointments,
            client_name,
            dog_name,
            self.settings.tzinfo,
            duration=self.settings.appointment_duration,
        )
        endpoint = appointment_endpoint(reminder=reminder)
        envelope = self.builder.appointment(client_name, email, dog_name, scheduled, endpoint, **options)
        return self.dispatch(Route.APPOINTMENT, endpoint, envelope)

    def send_lead(
        self,
        client_name: str,
        email: str,
        *,
        follow: bool = False,
        check: bool = False,
        availability: Optional[str] = None,
        **options: Any,
    ) -> bytes:
        parsed = parse_availability(availability) if availability else None
        endpoint = lead_endpoint(follow=follow, check=check)
        envelope = self.builder.lead(client_name, email, endpoint, availability=parsed, **options)
        return self.dispatch(Route.LEAD, endpoint, envelope)

    def send_quote(self, client_name: str, email: str, *, follow: bool = False, **options: Any) -> bytes:
        endpoint = quote_endpoint(follow=follow)
        return self.dispatch(Route.QUOTE, endpoint, self.builder.quote(client_name, email, endpoint, **options))

    def send_service(
        self, client_name: str, email: str, *, follow: bool = False, demo: bool = False, **options: Any
    ) -> bytes:
        endpoint = service_endpoint(follow=follow, demo=demo)
        return self.dispatch(Route.SERVICE, endpoint, self.builder.service(client_name, email, endpoint, **options))

    def send_resolution(self, client_name: str, email: str, *, follow: bool = False, **options: Any) -> bytes:
        endpoint = resolution_endpoint(follow=follow)
        envelope = self.builder.resolution(client_name, email, endpoint, **options)
        return self.dispatch(Route.RESOLUTION, endpoint, envelope)

    def send_affiliate(
        self, client_name: str, email: str, *, food: bool = False, **options: Any
    ) -> Optional[bytes]:
        """Send affiliate mail; without a sub-mode flag nothing is sent and ``None`` is returned."""
        endpoint = affiliate_endpoint(food=food)
        if endpoint is None:
            logger.warning("No affiliate mode selected (use --food); nothing sent")
            return None
        envelope = self.builder.affiliate(client_name, email, endpoint, **options)
        return self.dispatch(Route.AFFILIATE, endpoint, envelope)

    def fetch_template(
        self,
        category: str,
        file: str,
        *,
        to: Sequence[str] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> bytes:
        envelope = self.builder.template_fetch(category, file, to=to, variables=variables)
        return self.dispatch(Route.TEMPLATE, Endpoint.FETCH, envelope)

    def send_custom(self, client_name: str, email: str, message: str, **options: Any) -> bytes:
        envelope = self.builder.custom_message(client_name, email, message, **options)
        return self.dispatch(Route.CUSTOM, Endpoint.MESSAGE_SEND, envelope)
