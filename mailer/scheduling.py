"""Parse, order and render appointment lists."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Optional

from .errors import ValidationError
from .invites import CalendarEventGenerator
from .models import AppointmentRecord, CalendarInvite

logger = logging.getLogger(__name__)

APPOINTMENT_FORMAT = "%d/%m/%Y %H:%M"
ADDRESS_FIELDS = ("day", "street", "number", "area", "location")


@dataclass(frozen=True)
class ScheduledAppointment:
    record: AppointmentRecord
    start: datetime
    invite: CalendarInvite


def parse_instant(record: AppointmentRecord, tz: tzinfo) -> datetime:
    """Interpret the record's date and time as local wall-clock time in *tz*."""
    try:
        naive = datetime.strptime(f"{record.date} {record.time}", APPOINTMENT_FORMAT)
    except ValueError as exc:
        raise ValidationError(
            f"Appointment date/time '{record.date} {record.time}' does not match dd/mm/yyyy HH:mm"
        ) from exc
    return naive.replace(tzinfo=tz)


def _field(raw: dict[str, Any], key: str, index: int, required: bool = False, label: str = "Appointment") -> str:
    value = raw.get(key)
    if value is None:
        if required:
            raise ValidationError(f"{label} {index} is missing '{key}'")
        return ""
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{label} {index} field '{key}' must be a scalar")
    return str(value).strip()


def parse_appointments(raw: str | bytes | list) -> list[AppointmentRecord]:
    """Decode a JSON array of appointment objects."""
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Appointments are not valid JSON: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, list):
        raise ValidationError("Appointments must be a JSON array")

    records: list[AppointmentRecord] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValidationError(f"Appointment {index} must be a JSON object")
        records.append(
            AppointmentRecord(
                date=_field(item, "date", index, required=True),
                time=_field(item, "time", index, required=True),
                **{key: _field(item, key, index) for key in ADDRESS_FIELDS},
            )
        )
    return records


def sort_appointments(records: list[AppointmentRecord], tz: tzinfo) -> list[tuple[AppointmentRecord, datetime]]:
    """Pair each record with its start instant, earliest first.

    Every record is parsed before sorting, so one bad date rejects the whole list.
    """
    timed = [(record, parse_instant(record, tz)) for record in records]
    return sorted(timed, key=lambda pair: pair[1])


def schedule(
    raw: str | bytes | list,
    client_name: str,
    subject_name: str,
    tz: tzinfo,
    duration: Optional[timedelta] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> list[ScheduledAppointment]:
    """Parse, sort and generate one invite per appointment, in chronological order."""
    records = parse_appointments(raw)
    kwargs = {"clock": clock} if clock else {}
    generator = CalendarEventGenerator(client_name, subject_name, duration=duration, **kwargs)

    scheduled = [
        ScheduledAppointment(record=record, start=start, invite=generator.generate(record, start))
        for record, start in sort_appointments(records, tz)
    ]
    logger.info("Scheduled %s appointment(s) for %s", len(scheduled), client_name)
    return scheduled


def parse_availability(raw: str | bytes | list) -> dict[str, dict[str, str]]:
    """Decode ``[{"day", "start", "end"}, ...]`` into an ordered day -> range mapping.

    Input order is kept; the template lists days in the order given.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Availability is not valid JSON: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, list):
        raise ValidationError("Availability must be a JSON array")

    availability: dict[str, dict[str, str]] = {}
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValidationError(f"Availability entry {index} must be a JSON object")
        day = _field(item, "day", index, required=True, label="Availability entry")
        start = _field(item, "start", index, required=True, label="Availability entry")
        end = _field(item, "end", index, required=True, label="Availability entry")
        for value in (start, end):
            try:
                datetime.strptime(value, "%H:%M")
            except ValueError as exc:
                raise ValidationError(f"Availability time '{value}' for {day} is not HH:mm") from exc
        availability[day] = {"start": start, "end": end}
    return availability
