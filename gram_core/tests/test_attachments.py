import base64
import io
import tempfile
from pathlib import Path

import pytest

from gram_core.domain.exceptions import EncodingError
from gram_core.routing.attachments import Attachment, attachment_part, encode_attachment


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256))


def test_round_trip_from_stream():
    inline = encode_attachment(Attachment(source=io.BytesIO(PNG_BYTES), mime_type="image/png"))
    assert inline.mime_type == "image/png"
    assert base64.b64decode(inline.data) == PNG_BYTES


def test_mime_type_guessed_from_path():
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "leaf.jpg"
        path.write_bytes(PNG_BYTES)
        part = attachment_part(Attachment(source=path))
        assert part.inline_data.mime_type == "image/jpeg"
        assert base64.b64decode(part.inline_data.data) == PNG_BYTES


def test_missing_media_type_fails():
    with pytest.raises(EncodingError) as exc:
        encode_attachment(Attachment(source=PNG_BYTES))
    assert exc.value.code == "ENCODING_ERROR"


def test_non_image_rejected():
    with pytest.raises(EncodingError):
        encode_attachment(Attachment(source=b"%PDF", mime_type="application/pdf"))


def test_read_failure_is_encoding_error():
    class BrokenStream:
        def read(self):
            raise OSError("disk gone")

    with pytest.raises(EncodingError) as exc:
        encode_attachment(Attachment(source=BrokenStream(), mime_type="image/png"))
    assert "disk gone" in exc.value.extra["detail"]


def test_missing_file_is_encoding_error():
    with pytest.raises(EncodingError):
        encode_attachment(Attachment(source=Path("/nonexistent/leaf.png")))


def test_empty_payload_fails():
    with pytest.raises(EncodingError):
        encode_attachment(Attachment(source=b"", mime_type="image/png"))


@pytest.mark.parametrize("declared", ["IMAGE/PNG", " Image/Jpeg "])
def test_declared_media_type_is_case_insensitive(declared):
    inline = encode_attachment(Attachment(source=PNG_BYTES, mime_type=declared))
    assert inline.mime_type == declared.strip().lower()


def test_guessed_media_type_from_upper_case_name():
    inline = encode_attachment(Attachment(source=PNG_BYTES, filename="LEAF.PNG"))
    assert inline.mime_type == "image/png"
