"""Image payload decoding.

Hidden design decisions:
- Base64 text vs. raw bytes payloads (the SDK may hand back either)
- Bitmap validation with Pillow
- MIME type resolution when the model does not report one
"""

import base64
import binascii
from io import BytesIO

from PIL import Image

from .config import DEFAULT_IMAGE_MIME_TYPE
from .models import GeneratedImage


def decode_payload(data: bytes | str) -> bytes:
    """Turn an image payload into raw encoded image bytes.

    Args:
        data: Base64 text, or bytes that are already decoded

    Returns:
        Raw image bytes

    Raises:
        ValueError: If base64 text cannot be decoded
    """
    if isinstance(data, str):
        try:
            return base64.b64decode(data)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image payload: {e}") from e
    return bytes(data)


def decode_image_payload(data: bytes | str, mime_type: str | None = None) -> GeneratedImage:
    """Decode an image payload into a verified GeneratedImage.

    Args:
        data: Payload from the first inline-data part of the response
        mime_type: MIME type reported by the model, if any

    Returns:
        GeneratedImage with dimensions read from the bitmap

    Raises:
        ValueError: If the payload is not valid base64
        PIL.UnidentifiedImageError: If the bytes are not a known image format
    """
    raw = decode_payload(data)

    with Image.open(BytesIO(raw)) as image:
        image_format = image.format
        width, height = image.size
        image.verify()

    resolved_mime = Image.MIME.get(image_format or "") or mime_type or DEFAULT_IMAGE_MIME_TYPE
    return GeneratedImage(data=raw, mime_type=resolved_mime, width=width, height=height)
