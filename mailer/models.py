"""Typed containers shared across the pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FileType(str, Enum):
    PDF = "pdf"
    JPG = "jpg"
    PNG = "png"
    TXT = "txt"
    JSON = "json"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, extension: str) -> "FileType":
        """Map a file extension (with or without leading dot) onto a known type."""
        normalized = extension.lower().lstrip(".")
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class EmailIdentity:
    """Sender identity; the API combines alias and domain into the address."""

    name: str
    alias: str
    domain: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "alias": self.alias, "domain": self.domain}


@dataclass(frozen=True)
class RecipientSet:
    to: list[str]
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateSelector:
    """Server-side template and the variables rendered into it."""

    category: Optional[str] = None
    file: Optional[str] = None
    variables: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.category:
            data["category"] = self.category
        if self.file:
            data["file"] = self.file
        data["variables"] = self.variables
        return data


@dataclass(frozen=True)
class SoftAttachmentFailure:
    """An attachment whose file could not be read; sent with an empty payload."""

    path: str
    reason: str


@dataclass(frozen=True)
class Attachment:
    path: str
    type: FileType
    value: str
    name: str
    failure: Optional[SoftAttachmentFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "value": self.value, "name": self.name}


@dataclass(frozen=True)
class AppointmentRecord:
    date: str
    time: str
    day: str = ""
    street: str = ""
    number: str = ""
    area: str = ""
    location: str = ""

    def to_variables(self) -> dict[str, str]:
        return {
            "date": self.date,
            "time": self.time,
            "day": self.day,
            "street": self.street,
            "number": self.number,
            "area": self.area,
            "location": self.location,
        }


@dataclass(frozen=True)
class CalendarInvite:
    ics: str
    base64: str
    filename: str


@dataclass(frozen=True)
class OutboundEnvelope:
    """The request document posted to the mail API."""

    sender: EmailIdentity
    recipients: RecipientSet
    template: TemplateSelector
    subject: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    reply_to: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Build the wire document; empty optional fields are left out entirely."""
        body: dict[str, Any] = {
            "from": self.sender.to_dict(),
            "to": list(self.recipients.to),
        }
        if self.recipients.cc:
            body["cc"] = list(self.recipients.cc)
        if self.recipients.bcc:
            body["bcc"] = list(self.recipients.bcc)
        if self.subject:
            body["subject"] = self.subject
        body["template"] = self.template.to_dict()
        if self.headers:
            body["headers"] = dict(self.headers)
        if self.reply_to:
            body["replyTo"] = list(self.reply_to)
        if self.attachments:
            body["attachments"] = [attachment.to_dict() for attachment in self.attachments]
        return body

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")

    def redacted(self) -> dict[str, Any]:
        """Wire document with attachment payloads elided, for logging."""
        body = self.to_dict()
        for attachment in body.get("attachments", []):
            attachment["value"] = f"<{len(attachment['value'])} base64 chars>"
        return body
