"""Turn files on disk into base64 attachment units."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from .models import Attachment, CalendarInvite, FileType, SoftAttachmentFailure
from .utils import b64encode_bytes

logger = logging.getLogger(__name__)


def load_attachment(
    path: str | Path,
    file_type: Optional[FileType] = None,
    name: Optional[str] = None,
) -> Attachment:
    """Read *path* into an attachment.

    A file that cannot be read does not raise: the attachment comes back with an
    empty payload and ``failure`` set, so the caller decides whether to abort.
    """
    source = Path(path)
    resolved_type = file_type or FileType.from_extension(source.suffix)
    resolved_name = name or source.name

    try:
        content = source.read_bytes()
    except OSError as exc:
        logger.warning("Could not read attachment %s: %s", source, exc)
        return Attachment(
            path=str(path),
            type=resolved_type,
            value="",
            name=resolved_name,
            failure=SoftAttachmentFailure(path=str(path), reason=str(exc)),
        )

    logger.debug("Loaded attachment %s (%s bytes, type=%s)", source, len(content), resolved_type.value)
    return Attachment(
        path=str(path),
        type=resolved_type,
        value=b64encode_bytes(content),
        name=resolved_name,
    )


def load_attachments(paths: Iterable[str | Path], file_type: Optional[FileType] = None) -> list[Attachment]:
    """Load several files; when *file_type* is given every attachment is forced to it."""
    return [load_attachment(path, file_type=file_type) for path in paths]


def invite_attachment(invite: CalendarInvite) -> Attachment:
    # ICS is plain text; the closed type set has no calendar member.
    return Attachment(path="", type=FileType.TXT, value=invite.base64, name=invite.filename)
