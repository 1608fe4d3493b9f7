"""
Image helpers for answer sheet photos.
"""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from config.constants import DEFAULT_IMAGE_MIME_TYPE


def detect_image_mime_type(data: bytes, default: str = DEFAULT_IMAGE_MIME_TYPE) -> str:
    """
    Sniff the MIME type of an encoded image.

    Args:
        data: Encoded image bytes
        default: Returned when the format is unknown to Pillow

    Returns:
        MIME type such as "image/png"
    """
    try:
        with Image.open(BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        return default

    return Image.MIME.get(image_format or "", default)
