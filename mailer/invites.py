"""ICS calendar invites for appointments."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional
from uuid import uuid4

from .models import AppointmentRecord, CalendarInvite
from .utils import b64encode_text, ensure_utc, ics_timestamp

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(hours=2)
PRODID = "-//mailer//appointments//NL"


def escape_text(value: str) -> str:
    """Escape an ICS TEXT value (backslash, semicolon, comma, newline)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def invite_filename(record: AppointmentRecord, subject_name: str) -> str:
    # Keep the filename a single path component.
    date = record.date.replace("/", "-")
    name = subject_name.replace("/", "-")
    return f"appointment-{date}-{name}.ics"


class CalendarEventGenerator:
    """Render one VEVENT per appointment for a client and their dog."""

    def __init__(
        self,
        client_name: str,
        subject_name: str,
        duration: Optional[timedelta] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self.client_name = client_name
        self.subject_name = subject_name
        self.duration = DEFAULT_DURATION if duration is None else duration
        self.clock = clock

    def render(self, record: AppointmentRecord, start: datetime) -> str:
        # Duration is elapsed time; add it in UTC.
        start = ensure_utc(start)
        end = start + self.duration
        location = "\\n".join(
            escape_text(part)
            for part in (f"{record.street} {record.number}".strip(), record.area, record.location)
            if part
        )
        summary = f"Afspraak {self.client_name} met {self.subject_name}"
        description = f"Training voor {self.subject_name} ({self.client_name}) op {record.date} om {record.time}"
        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{PRODID}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
            "BEGIN:VEVENT",
            f"UID:{uuid4()}",
            f"DTSTAMP:{ics_timestamp(self.clock())}",
            f"DTSTART:{ics_timestamp(start)}",
            f"DTEND:{ics_timestamp(end)}",
            f"SUMMARY:{escape_text(summary)}",
            f"DESCRIPTION:{escape_text(description)}",
            f"LOCATION:{location}",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
        return "\r\n".join(lines) + "\r\n"

    def generate(self, record: AppointmentRecord, start: datetime) -> CalendarInvite:
        """Build the invite for *record* starting at the aware instant *start*."""
        ics = self.render(record, start)
        filename = invite_filename(record, self.subject_name)
        logger.debug("Generated invite %s starting %s", filename, start.isoformat())
        return CalendarInvite(ics=ics, base64=b64encode_text(ics), filename=filename)
