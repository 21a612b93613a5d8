"""
Media modules.

Modules:
    acquisition - Camera/gallery picker interface
    uploader    - Media host upload with preset fallback and progress
"""

from .acquisition import SOURCE_CAMERA, SOURCE_GALLERY, MediaPicker, acquire
from .uploader import MediaUploader

__all__ = [
    'MediaPicker',
    'MediaUploader',
    'SOURCE_CAMERA',
    'SOURCE_GALLERY',
    'acquire',
]
