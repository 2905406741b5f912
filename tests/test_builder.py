# =============================================================================
# Message Builder Tests
# =============================================================================

import base64
import logging

import pytest

from mailcourier.core import Address
from mailcourier.errors import (
    InvalidBufferError,
    InvalidContentError,
    InvalidProtocolError,
    InvalidRecipientError,
    InvalidSenderError,
    InvalidSubjectError,
)
from mailcourier.mime import BASE64_LINE_LENGTH, MessageBuilder, wrap_base64
from mailcourier.mime.builder import encode_subject

MESSAGE_ID = "<0f8fad5b-d9cb-469f-a165-70867728950e.mailcourier@example.com>"


def _text(rendered) -> str:
    return rendered.payload.decode("utf-8")


def _headers(rendered) -> str:
    return _text(rendered).split("\r\n\r\n", 1)[0]


class TestLayout:

    def test_text_only_message(self, sample_message, fixed_builder):
        rendered = fixed_builder.build(sample_message)

        assert _text(rendered) == (
            "Date: Mon, 15 Jan 2024 10:30:00 +0000\r\n"
            "To: rocky@example.org\r\n"
            'From: "Judith Smith" <judy@example.com>\r\n'
            f"Message-ID: {MESSAGE_ID}\r\n"
            "Subject: hello\r\n"
            "MIME-Version: 1.0\r\n"
            'Content-type: multipart/alternative; boundary="mailcourier-boundary"\r\n'
            "\r\n"
            "--mailcourier-boundary\r\n"
            "Content-Type: text/plain; charset=UTF-8; format=flowed\r\n"
            "\r\n"
            "Hello, World!\r\n"
            "\r\n"
            "--mailcourier-boundary--\r\n"
        )
        assert rendered.message_id == MESSAGE_ID
        assert rendered.sender == "judy@example.com"
        assert rendered.recipients == ["rocky@example.org"]

    def test_text_precedes_html(self, sample_message, fixed_builder):
        sample_message.html = "<h1>Hi</h1>"
        text = _text(fixed_builder.build(sample_message))

        plain_at = text.index("Content-Type: text/plain")
        html_at = text.index("Content-Type: text/html; charset=UTF-8\r\n\r\n<h1>Hi</h1>\r\n\r\n")
        assert plain_at < html_at
        assert text.endswith("--mailcourier-boundary--\r\n")

    def test_html_only(self, sample_message, fixed_builder):
        sample_message.text = ""
        sample_message.content = "<p>only html</p>"
        text = _text(fixed_builder.build(sample_message))

        assert "text/plain" not in text
        assert "<p>only html</p>" in text

    def test_cc_rendered_after_from(self, sample_message, fixed_builder):
        sample_message.cc = [Address("", "c1@example.com"), Address("C Two", "c2@example.com")]
        headers = _headers(fixed_builder.build(sample_message)).split("\r\n")

        assert headers[2] == 'From: "Judith Smith" <judy@example.com>'
        assert headers[3] == 'Cc: c1@example.com, "C Two" <c2@example.com>'

    def test_to_omitted_when_empty(self, sample_message, fixed_builder):
        sample_message.to = []
        sample_message.cc = [Address("", "c@example.com")]
        headers = _headers(fixed_builder.build(sample_message))

        assert "\r\nTo:" not in headers
        assert not headers.startswith("To:")

    def test_bcc_only_in_envelope(self, sample_message, fixed_builder):
        sample_message.cc = [Address("", "cc@example.com")]
        sample_message.bcc = [Address("Hidden", "secret@example.net")]
        rendered = fixed_builder.build(sample_message)

        assert "secret@example.net" not in _text(rendered)
        assert "Bcc" not in _text(rendered)
        assert rendered.recipients == [
            "rocky@example.org",
            "cc@example.com",
            "secret@example.net",
        ]

    def test_non_ascii_subject_is_encoded(self, sample_message, fixed_builder):
        sample_message.subject = "这是一个测试"
        headers = _headers(fixed_builder.build(sample_message))

        assert "Subject: =?utf-8?b?" in headers
        assert "这是一个测试" not in headers

    def test_utf8_body(self, sample_message, fixed_builder):
        sample_message.html = "<h1>这是一个测试</h1>"
        rendered = fixed_builder.build(sample_message)
        assert "<h1>这是一个测试</h1>".encode("utf-8") in rendered.payload


class TestDeterminism:

    def test_same_message_same_bytes(self, sample_message, fixed_builder):
        assert fixed_builder.build(sample_message).payload == fixed_builder.build(sample_message).payload

    def test_only_date_and_id_vary(self, sample_message):
        first = MessageBuilder().build(sample_message)
        second = MessageBuilder().build(sample_message)

        def strip(rendered):
            return [
                line for line in _text(rendered).split("\r\n")
                if not line.startswith(("Date:", "Message-ID:"))
            ]

        assert first.message_id != second.message_id
        assert strip(first) == strip(second)

    def test_message_id_uses_sender_domain(self, sample_message):
        rendered = MessageBuilder().build(sample_message)
        assert rendered.message_id.startswith("<")
        assert rendered.message_id.endswith(".mailcourier@example.com>")


class TestValidation:
    """Each missing piece has its own error, raised before rendering."""

    def test_no_recipients(self, sample_message, fixed_builder):
        sample_message.to = []
        with pytest.raises(InvalidRecipientError):
            fixed_builder.build(sample_message)

    def test_bcc_alone_is_enough(self, sample_message, fixed_builder):
        sample_message.to = []
        sample_message.bcc = [Address("", "b@example.com")]
        fixed_builder.build(sample_message)

    def test_no_sender(self, sample_message, fixed_builder):
        sample_message.from_ = Address("Name Only", "")
        with pytest.raises(InvalidSenderError):
            fixed_builder.build(sample_message)

    def test_no_subject(self, sample_message, fixed_builder):
        sample_message.subject = ""
        with pytest.raises(InvalidSubjectError):
            fixed_builder.build(sample_message)

    def test_no_content(self, sample_message, fixed_builder):
        sample_message.text = ""
        sample_message.html = ""
        with pytest.raises(InvalidContentError):
            fixed_builder.build(sample_message)

    def test_bad_protocol(self, sample_message, fixed_builder):
        sample_message.credentials = type(sample_message.credentials)(url="https://smtp.example.com")
        with pytest.raises(InvalidProtocolError):
            fixed_builder.build(sample_message)

    def test_recipients_checked_first(self, sample_credentials, fixed_builder):
        from mailcourier.core import Message

        with pytest.raises(InvalidRecipientError):
            fixed_builder.build(Message(credentials=sample_credentials))


class TestBase64Wrapping:

    def test_line_width(self):
        data = bytes(range(256)) * 4
        wrapped = wrap_base64(data)
        lines = wrapped.split("\r\n")

        assert wrapped.endswith("\r\n")
        assert lines[-1] == ""
        assert all(len(line) == BASE64_LINE_LENGTH for line in lines[:-2])
        assert 0 < len(lines[-2]) <= BASE64_LINE_LENGTH
        assert base64.b64decode("".join(lines)) == data

    def test_exact_multiple_of_width(self):
        # 117 bytes -> 156 base64 chars -> exactly two lines
        wrapped = wrap_base64(b"x" * 117)
        assert wrapped.count("\r\n") == 2
        assert all(len(line) == 78 for line in wrapped.split("\r\n")[:-1])

    def test_empty(self):
        assert wrap_base64(b"") == ""


class TestAttachments:

    def test_attachment_part(self, sample_message, fixed_builder, temp_dir):
        path = temp_dir / "china.png"
        data = bytes(range(256)) * 2
        path.write_bytes(data)
        sample_message.attachments.append(str(path))

        text = _text(fixed_builder.build(sample_message))

        assert 'Content-type: multipart/mixed; boundary="mailcourier-boundary"' in text
        assert 'Content-type: multipart/alternative; boundary="mailcourier-boundary-alt"' in text
        assert "--mailcourier-boundary-alt--\r\n" in text
        assert (
            "--mailcourier-boundary\r\n"
            'Content-Type: text/plain; name="china.png"\r\n'
            "Content-Transfer-Encoding: base64\r\n"
            'Content-Disposition: attachment; filename="china.png"\r\n\r\n'
        ) in text
        assert text.endswith("--mailcourier-boundary--\r\n")

        encoded = text.split('filename="china.png"\r\n\r\n', 1)[1]
        encoded = encoded.split("\r\n\r\n", 1)[0]
        lines = encoded.split("\r\n")
        assert all(len(line) <= 78 for line in lines)
        assert base64.b64decode("".join(lines)) == data

    def test_attachments_keep_order(self, sample_message, fixed_builder, temp_dir):
        for name in ("hello.txt", "hola.txt"):
            (temp_dir / name).write_text(name)
            sample_message.attachments.append(str(temp_dir / name))

        text = _text(fixed_builder.build(sample_message))
        assert text.index('filename="hello.txt"') < text.index('filename="hola.txt"')

    def test_unreadable_attachment_skipped(self, sample_message, fixed_builder, temp_dir, caplog):
        sample_message.attachments.append(str(temp_dir / "missing.pdf"))

        with caplog.at_level(logging.WARNING, logger="mailcourier.mime.builder"):
            with_missing = fixed_builder.build(sample_message)

        sample_message.attachments = []
        without = fixed_builder.build(sample_message)

        assert with_missing.payload == without.payload
        assert "missing.pdf" in caplog.text

    def test_unreadable_attachment_strict(self, sample_message, fixed_builder, temp_dir):
        sample_message.attachments.append(str(temp_dir / "missing.pdf"))
        sample_message.strict_attachments = True

        with pytest.raises(InvalidBufferError):
            fixed_builder.build(sample_message)


def test_encode_subject_ascii_untouched():
    assert encode_subject("Quarterly report") == "Quarterly report"


@pytest.mark.parametrize("path", ["", "/"])
def test_nameless_attachment_strict(sample_message, fixed_builder, path):
    sample_message.attachments.append(path)
    sample_message.strict_attachments = True

    with pytest.raises(InvalidBufferError):
        fixed_builder.build(sample_message)


@pytest.mark.parametrize("path", ["", "/"])
def test_nameless_attachment_skipped(sample_message, fixed_builder, path):
    sample_message.attachments.append(path)
    assert "Content-Disposition" not in _text(fixed_builder.build(sample_message))
