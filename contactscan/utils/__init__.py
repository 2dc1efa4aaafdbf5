"""
Utilities package for the screenshot OCR front end.

Re-exports all public functions for shorter imports.
"""

from .image import (
    load_image,
    upscale_small_image,
    estimate_noise,
    denoise_image,
    deskew_image,
    preprocess_screenshot,
)
from .bbox import (
    bbox_to_position,
    position_to_bbox,
    empty_position,
    union_bbox,
)
from .text import (
    cluster_text_rows,
    rows_to_text,
)

__all__ = [
    # Image
    'load_image',
    'upscale_small_image',
    'estimate_noise',
    'denoise_image',
    'deskew_image',
    'preprocess_screenshot',
    # Bbox
    'bbox_to_position',
    'position_to_bbox',
    'empty_position',
    'union_bbox',
    # Text
    'cluster_text_rows',
    'rows_to_text',
]
