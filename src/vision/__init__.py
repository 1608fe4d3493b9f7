"""
Vision module for answer sheet images.
"""

from vision.images import detect_image_mime_type

__all__ = [
    'detect_image_mime_type',
]
