"""
Media Acquisition

Interface to the device camera and gallery pickers. Concrete pickers belong
to the UI layer; the wizard only depends on this contract.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import LocalMediaFile

SOURCE_CAMERA = "camera"
SOURCE_GALLERY = "gallery"


class MediaPicker(ABC):
    """
    Camera/gallery picker.

    Both methods return None when the seller cancels and raise
    MediaPermissionError when access is denied.
    """

    @abstractmethod
    def pick_from_camera(self) -> Optional[LocalMediaFile]:
        ...

    @abstractmethod
    def pick_from_gallery(self) -> Optional[LocalMediaFile]:
        ...


def acquire(picker: MediaPicker, source: str) -> Optional[LocalMediaFile]:
    """
    Acquire one image from the given source.

    Args:
        picker: Picker implementation
        source: "camera" or "gallery"

    Raises:
        ValueError: Unknown source
        MediaPermissionError: Propagated from the picker
    """
    if source == SOURCE_CAMERA:
        return picker.pick_from_camera()
    if source == SOURCE_GALLERY:
        return picker.pick_from_gallery()
    raise ValueError(f"Unsupported media source: {source}")
