"""Entry point for sending transactional mail through the mail API."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mailer.commands import Mailer
from mailer.config import Settings
from mailer.errors import MailerError
from mailer.routes import Endpoint
from mailer.utils import parse_key_values, split_list

load_dotenv()


def add_client_arguments(parser: argparse.ArgumentParser, dog: bool = True) -> None:
    parser.add_argument("--client", required=True, help="Client name")
    parser.add_argument("--email", required=True, help="Client email address")
    if dog:
        parser.add_argument("--dog", help="Dog name")
    parser.add_argument("--cc", default="", help="CC addresses (comma-separated)")
    parser.add_argument("--bcc", default="", help="BCC addresses (comma-separated)")
    parser.add_argument("--variables", default="", help="Extra key=value pairs (comma-separated)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send transactional mail through the mail API.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    mail = subparsers.add_parser("mail", help="Send mail with explicit template and recipients")
    mail.add_argument("--to", required=True, help="Recipient addresses (comma-separated)")
    mail.add_argument("--cc", default="")
    mail.add_argument("--bcc", default="")
    mail.add_argument("--subject")
    mail.add_argument("--category", help="Server-side template category")
    mail.add_argument("--file", help="Template file within the category")
    mail.add_argument("--variables", default="", help="key=value pairs (comma-separated)")
    mail.add_argument("--headers", default="", help="key=value header pairs (comma-separated)")
    mail.add_argument("--attachments", default="", help="File paths (comma-separated)")
    mail.add_argument("--reply-to", help="Reply-to addresses; defaults to MAILER_REPLY_TO")
    mail.add_argument("--alias", help="Sender alias override")
    mail.add_argument("--endpoint", type=Endpoint, choices=list(Endpoint), help="Endpoint override")
    mail.add_argument("--api-url", help="API base URL; defaults to MAILER_API_BASE_URL")
    mail.add_argument("--apikey", help="API access key; defaults to MAILER_API_KEY")
    mail.add_argument("--from", dest="sender_name", help="Sender name; defaults to MAILER_FROM")
    mail.add_argument("--domain", help="Sender domain; defaults to MAILER_DOMAIN")

    invoice = subparsers.add_parser("invoice", help="Export an invoice with numbers-parser and send it")
    invoice.add_argument("--id", dest="invoice_id", required=True, help="Invoice identifier")
    invoice.add_argument("--close", action="store_true", help="Close Numbers after exporting")
    invoice.add_argument("--return-to", help="Application to return focus to after exporting")
    invoice.add_argument("--expired", action="store_true", help="Send the overdue reminder")
    invoice.add_argument("--simple", action="store_true", help="Use the simplified invoice template")
    invoice.add_argument("--test", action="store_true", help="Send to MAILER_TEST_EMAIL")
    invoice.add_argument("--variables", default="")

    appointment = subparsers.add_parser("appointment", help="Confirm appointments with calendar invites")
    add_client_arguments(appointment, dog=False)
    appointment.add_argument("--dog", required=True, help="Dog name")
    appointment.add_argument("--appointments", required=True, help="JSON array of appointments")
    appointment.add_argument("--reminder", action="store_true")

    lead = subparsers.add_parser("lead", help="Lead confirmation and follow-up")
    add_client_arguments(lead)
    lead.add_argument("--availability", help='JSON array of {"day", "start", "end"}')
    lead.add_argument("--follow", action="store_true")
    lead.add_argument("--check", action="store_true")

    quote = subparsers.add_parser("quote", help="Send or follow up on a quote")
    add_client_arguments(quote)
    quote.add_argument("--follow", action="store_true")

    service = subparsers.add_parser("service", help="Service onboarding, follow-up or demo")
    add_client_arguments(service)
    service.add_argument("--follow", action="store_true")
    service.add_argument("--demo", action="store_true")

    resolution = subparsers.add_parser("resolution", help="Ask for a review or follow up")
    add_client_arguments(resolution)
    resolution.add_argument("--follow", action="store_true")

    affiliate = subparsers.add_parser("affiliate", help="Affiliate mail")
    add_client_arguments(affiliate)
    affiliate.add_argument("--food", action="store_true")

    template = subparsers.add_parser("template", help="Fetch a rendered template")
    template.add_argument("--category", required=True)
    template.add_argument("--file", required=True)
    template.add_argument("--to", default="")
    template.add_argument("--variables", default="")

    custom = subparsers.add_parser("custom", help="Send a hand-written message")
    add_client_arguments(custom, dog=False)
    custom.add_argument("--message", required=True)
    custom.add_argument("--subject")
    custom.add_argument("--quote", action="store_true", help="Send as the quote mailbox with the quote PDF")

    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def client_options(args: argparse.Namespace) -> dict:
    return {
        "cc": split_list(args.cc),
        "bcc": split_list(args.bcc),
        "variables": parse_key_values(args.variables),
    }


def run_command(mailer: Mailer, args: argparse.Namespace) -> None:
    command = args.command
    if command == "mail":
        mailer.send_mail(
            split_list(args.to),
            endpoint=args.endpoint,
            attachment_paths=split_list(args.attachments),
            category=args.category,
            file=args.file,
            variables=parse_key_values(args.variables),
            cc=split_list(args.cc),
            bcc=split_list(args.bcc),
            subject=args.subject,
            headers=parse_key_values(args.headers),
            reply_to=split_list(args.reply_to) if args.reply_to is not None else None,
            alias_override=args.alias,
            sender_name=args.sender_name,
            domain=args.domain,
            api_url=args.api_url,
            api_key=args.apikey,
        )
    elif command == "invoice":
        mailer.send_invoice(
            args.invoice_id,
            close=args.close,
            return_to=args.return_to,
            expired=args.expired,
            simple=args.simple,
            test=args.test,
            variables=parse_key_values(args.variables),
        )
    elif command == "appointment":
        mailer.send_appointment(
            args.client, args.email, args.dog, args.appointments, reminder=args.reminder, **client_options(args)
        )
    elif command == "lead":
        mailer.send_lead(
            args.client,
            args.email,
            follow=args.follow,
            check=args.check,
            availability=args.availability,
            dog_name=args.dog,
            **client_options(args),
        )
    elif command == "quote":
        mailer.send_quote(args.client, args.email, follow=args.follow, dog_name=args.dog, **client_options(args))
    elif command == "service":
        mailer.send_service(
            args.client, args.email, follow=args.follow, demo=args.demo, dog_name=args.dog, **client_options(args)
        )
    elif command == "resolution":
        mailer.send_resolution(args.client, args.email, follow=args.follow, dog_name=args.dog, **client_options(args))
    elif command == "affiliate":
        mailer.send_affiliate(args.client, args.email, food=args.food, dog_name=args.dog, **client_options(args))
    elif command == "template":
        mailer.fetch_template(
            args.category, args.file, to=split_list(args.to), variables=parse_key_values(args.variables)
        )
    elif command == "custom":
        mailer.send_custom(
            args.client, args.email, args.message, subject=args.subject, with_quote=args.quote, **client_options(args)
        )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(settings.log_level)

    try:
        run_command(Mailer(settings), args)
    except MailerError as exc:
        logging.error("%s: %s", exc.error_code, exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
