"""Unit tests for outbound message assembly.

Covers trimming, truncation, subject decoding and the title/body swap.
"""

import pytest

from domain.errors import HeaderDecodeError, UnsupportedContentTypeError
from domain.messages import EVENT_MESSAGE
from infrastructure.ingest.message_assembler import (
    assemble_message,
    decode_subject,
    raw_header,
    truncate,
)
from infrastructure.ingest.mime_parser import parse_mime_message


class TestTruncate:
    """Test hard truncation"""

    def test_longer_text_cut_to_limit(self):
        assert truncate("abcdefghij", 4) == "abcd"

    def test_text_at_limit_unchanged(self):
        assert truncate("abcd", 4) == "abcd"

    def test_shorter_text_unchanged(self):
        assert truncate("ab", 4) == "ab"

    def test_counts_characters_not_bytes(self):
        assert truncate("ääää", 2) == "ää"


class TestDecodeSubject:
    """Test RFC 2047 subject decoding"""

    def test_plain_subject(self):
        assert decode_subject("Backup finished") == "Backup finished"

    def test_q_encoded_word(self):
        assert decode_subject("=?utf-8?q?Caf=C3=A9_open?=") == "Café open"

    def test_b_encoded_word(self):
        assert decode_subject("=?UTF-8?B?R3LDvMOfZQ==?=") == "Grüße"

    def test_mixed_plain_and_encoded(self):
        assert decode_subject("Re: =?iso-8859-1?q?K=F6ln?=") == "Re: Köln"

    def test_unknown_charset_fails(self):
        with pytest.raises(HeaderDecodeError):
            decode_subject("=?x-no-such-charset?q?abc?=")

    def test_invalid_bytes_for_charset_fails(self):
        with pytest.raises(HeaderDecodeError):
            decode_subject("=?utf-8?q?=FF=FE?=")


class TestRawHeader:
    """Test raw header lookup"""

    def test_encoded_subject_is_returned_raw(self):
        msg = parse_mime_message(
            b"Subject: =?utf-8?q?Caf=C3=A9?=\r\nContent-Type: text/plain\r\n\r\nbody\r\n"
        )
        assert raw_header(msg, "subject") == "=?utf-8?q?Caf=C3=A9?="

    def test_folded_header_is_unfolded(self):
        msg = parse_mime_message(
            b"Subject: first line\r\n second line\r\nContent-Type: text/plain\r\n\r\nbody\r\n"
        )
        assert raw_header(msg, "Subject") == "first line second line"

    def test_raw_utf8_header(self):
        msg = parse_mime_message("Subject: Grüße\r\nContent-Type: text/plain\r\n\r\nbody\r\n".encode("utf-8"))
        assert raw_header(msg, "Subject") == "Grüße"

    def test_missing_header(self):
        msg = parse_mime_message(b"Content-Type: text/plain\r\n\r\nbody\r\n")
        assert raw_header(msg, "Subject") is None


class TestAssembleMessage:
    """Test complete assembly"""

    def test_title_and_body(self, plain_email):
        message = assemble_message("alerts", plain_email("World", subject="Hi"), 100)
        assert message.topic == "alerts"
        assert message.title == "Hi"
        assert message.message == "World"
        assert message.event == EVENT_MESSAGE

    def test_subject_only_is_swapped_into_message(self, plain_email):
        message = assemble_message("alerts", plain_email("", subject="Hello"), 100)
        assert message.title == ""
        assert message.message == "Hello"

    def test_whitespace_body_counts_as_empty(self, plain_email):
        message = assemble_message("alerts", plain_email("  \r\n\t ", subject="Hello"), 100)
        assert message.title == ""
        assert message.message == "Hello"

    def test_body_only(self, plain_email):
        message = assemble_message("alerts", plain_email("World"), 100)
        assert message.title == ""
        assert message.message == "World"

    def test_blank_subject_ignored(self, plain_email):
        message = assemble_message("alerts", plain_email("World", subject="   "), 100)
        assert message.title == ""
        assert message.message == "World"

    def test_body_trimmed(self, plain_email):
        message = assemble_message("alerts", plain_email("\r\n   padded body  \r\n\r\n"), 100)
        assert message.message == "padded body"

    def test_body_truncated_to_limit(self, plain_email):
        message = assemble_message("alerts", plain_email("x" * 250), 100)
        assert len(message.message) == 100

    def test_body_at_limit_unchanged(self, plain_email):
        message = assemble_message("alerts", plain_email("y" * 100), 100)
        assert message.message == "y" * 100

    def test_truncation_applies_after_trim(self, plain_email):
        message = assemble_message("alerts", plain_email("   " + "z" * 10 + "   "), 10)
        assert message.message == "z" * 10

    def test_encoded_subject_decoded(self, plain_email):
        message = assemble_message("alerts", plain_email("body", subject="=?utf-8?q?=E2=9C=85_done?="), 100)
        assert message.title == "✅ done"

    def test_bad_subject_fails(self, plain_email):
        with pytest.raises(HeaderDecodeError):
            assemble_message("alerts", plain_email("body", subject="=?x-bogus?q?a?="), 100)

    def test_extraction_error_propagates(self, plain_email):
        with pytest.raises(UnsupportedContentTypeError):
            assemble_message("alerts", plain_email("<p/>", content_type="text/html"), 100)

    def test_message_has_id_and_time(self, plain_email):
        message = assemble_message("alerts", plain_email("body"), 100)
        assert len(message.id) == 12
        assert message.id.isalnum()
        assert message.time > 0
