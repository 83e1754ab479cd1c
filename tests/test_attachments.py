"""Attachment loading, type inference and soft failures."""

import base64

from mailer.attachments import invite_attachment, load_attachment, load_attachments
from mailer.models import CalendarInvite, FileType


class TestLoadAttachment:
    def test_reads_and_base64_encodes_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"hello")

        attachment = load_attachment(path)

        assert attachment.ok
        assert base64.b64decode(attachment.value) == b"hello"
        assert attachment.type == FileType.TXT
        assert attachment.name == "notes.txt"

    def test_extension_is_case_insensitive(self, tmp_path):
        path = tmp_path / "invoice.PDF"
        path.write_bytes(b"%PDF")
        assert load_attachment(path).type == FileType.PDF

    def test_missing_extension_is_unknown(self, tmp_path):
        path = tmp_path / "notes"
        path.write_bytes(b"x")
        assert load_attachment(path).type == FileType.UNKNOWN

    def test_unrecognised_extension_is_unknown(self, tmp_path):
        path = tmp_path / "archive.zip"
        path.write_bytes(b"x")
        assert load_attachment(path).type == FileType.UNKNOWN

    def test_explicit_type_and_name_win(self, tmp_path):
        path = tmp_path / "export.bin"
        path.write_bytes(b"x")

        attachment = load_attachment(path, file_type=FileType.PDF, name="factuur-1.pdf")

        assert attachment.type == FileType.PDF
        assert attachment.name == "factuur-1.pdf"

    def test_unreadable_file_yields_empty_payload(self):
        attachment = load_attachment("/nonexistent/path")

        assert attachment.value == ""
        assert not attachment.ok
        assert attachment.failure.path == "/nonexistent/path"
        assert attachment.name == "path"
        assert attachment.type == FileType.UNKNOWN

    def test_wire_dict_shape(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{}")
        assert set(load_attachment(path).to_dict()) == {"type", "value", "name"}


class TestLoadAttachments:
    def test_forced_type_applies_to_every_path(self, tmp_path):
        paths = []
        for name in ("one.ics", "two.ics"):
            path = tmp_path / name
            path.write_text("BEGIN:VCALENDAR")
            paths.append(path)

        attachments = load_attachments(paths, file_type=FileType.TXT)

        assert [a.type for a in attachments] == [FileType.TXT, FileType.TXT]
        assert [a.name for a in attachments] == ["one.ics", "two.ics"]

    def test_without_forced_type_each_is_inferred(self, tmp_path):
        png = tmp_path / "photo.png"
        png.write_bytes(b"\x89PNG")
        jpg = tmp_path / "photo.JPG"
        jpg.write_bytes(b"\xff\xd8")

        attachments = load_attachments([png, jpg])

        assert [a.type for a in attachments] == [FileType.PNG, FileType.JPG]


def test_invite_attachment_carries_invite_payload():
    invite = CalendarInvite(ics="BEGIN:VCALENDAR", base64="QkVHSU4=", filename="appointment-x.ics")

    attachment = invite_attachment(invite)

    assert attachment.value == "QkVHSU4="
    assert attachment.name == "appointment-x.ics"
    assert attachment.ok
