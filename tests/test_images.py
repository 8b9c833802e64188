"""Unit tests for image payload decoding."""
import base64
from io import BytesIO

import pytest
from PIL import Image, UnidentifiedImageError

from aistudio_client.chat.images import decode_image_payload, decode_payload


def _jpeg_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 5), color=(10, 120, 200)).save(buffer, format="JPEG")
    return buffer.getvalue()


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_bytes_pass_through(self, png_bytes):
        """Test that raw bytes are returned unchanged."""
        assert decode_payload(png_bytes) == png_bytes

    def test_base64_text_is_decoded(self, png_bytes):
        """Test that base64 text is decoded."""
        assert decode_payload(base64.b64encode(png_bytes).decode("ascii")) == png_bytes

    def test_invalid_base64(self):
        """Test that broken base64 raises ValueError."""
        with pytest.raises(ValueError, match="base64"):
            decode_payload("abc")


class TestDecodeImagePayload:
    """Tests for decode_image_payload."""

    def test_png_dimensions_and_mime(self, png_bytes):
        """Test that the bitmap size and type are read from the bytes."""
        image = decode_image_payload(png_bytes)
        assert (image.width, image.height) == (4, 3)
        assert image.mime_type == "image/png"

    def test_detected_mime_wins_over_reported(self):
        """Test that the detected format overrides a wrong reported type."""
        image = decode_image_payload(_jpeg_bytes(), mime_type="image/png")
        assert image.mime_type == "image/jpeg"
        assert (image.width, image.height) == (8, 5)

    def test_garbage_bytes(self):
        """Test that bytes that are not an image are rejected."""
        with pytest.raises(UnidentifiedImageError):
            decode_image_payload(b"not an image at all")


class TestGeneratedImage:
    """Tests for the GeneratedImage helpers."""

    def test_to_pil(self, png_bytes):
        """Test conversion to a displayable bitmap."""
        bitmap = decode_image_payload(png_bytes).to_pil()
        assert bitmap.size == (4, 3)
        assert bitmap.getpixel((0, 0)) == (200, 30, 30)

    def test_save(self, png_bytes, tmp_path):
        """Test writing the encoded bytes to disk."""
        target = decode_image_payload(png_bytes).save(tmp_path / "car.png")
        assert target.read_bytes() == png_bytes
