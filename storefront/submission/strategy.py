"""
Submission Strategy

Decides how a validated draft reaches the backend:

- METADATA_ONLY: no pending images; the payload carries fields plus the URLs
  of images persisted earlier.
- FULL: at least one pending image; every pending image is uploaded first
  (main, then subs in slot order, one at a time) and the payload merges the
  new URLs with the untouched persisted ones.

An upload failure aborts the submission before the backend is called.
Images already uploaded in that attempt stay on the media host.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..api import StorefrontAPIClient
from ..common.errors import ValidationError
from ..media import MediaUploader
from ..models import MediaSet, MediaSlot, ProductDraft

logger = logging.getLogger(__name__)

# (slot_key, percent); slot_key is "main" or "sub_<index>"
SlotProgressCallback = Callable[[str, int], None]


class SubmissionPath(str, Enum):
    METADATA_ONLY = "metadata_only"
    FULL = "full"


def choose_path(media: MediaSet, is_editing: bool) -> SubmissionPath:
    """
    Pick the submission path.

    Raises:
        ValidationError: A new product with no image at all
    """
    if media.has_pending:
        return SubmissionPath.FULL
    if not is_editing and not media.has_main:
        raise ValidationError({"main_image": "Main product image is required"})
    return SubmissionPath.METADATA_ONLY


def slot_key(slot: MediaSlot, sub_index: Optional[int] = None) -> str:
    return slot.kind if sub_index is None else f"{slot.kind}_{sub_index}"


class SubmissionStrategySelector:
    """Runs the chosen submission path against the uploader and the backend."""

    def __init__(self, uploader: MediaUploader, api_client: StorefrontAPIClient):
        self.uploader = uploader
        self.api_client = api_client

    def submit(
        self,
        draft: ProductDraft,
        media: MediaSet,
        on_progress: Optional[SlotProgressCallback] = None,
    ) -> Dict[str, Any]:
        """
        Submit a draft.

        Args:
            draft: Validated draft (product_id set for edits)
            media: Main and sub image slots
            on_progress: Per-slot upload progress, FULL path only

        Returns:
            Persisted product record from the backend

        Raises:
            UploadError: A pending image could not be uploaded
            NetworkError, RequestTimeoutError, ServerError, AuthenticationError:
                Backend call failed
        """
        is_editing = not draft.is_new
        path = choose_path(media, is_editing)
        logger.info("Submitting %s product via %s path",
                    "existing" if is_editing else "new", path.value)

        if path is SubmissionPath.METADATA_ONLY:
            payload = self.build_payload(draft, media, {})
        else:
            uploaded = self.upload_pending(media, on_progress)
            payload = self.build_payload(draft, media, uploaded)

        return self.api_client.create_or_update(payload, draft.product_id)

    def upload_pending(
        self,
        media: MediaSet,
        on_progress: Optional[SlotProgressCallback] = None,
    ) -> Dict[str, Any]:
        """
        Upload every pending slot, sequentially.

        Returns:
            {slot_key: UploadResult}
        """
        uploaded = {}
        for key, slot in self._pending_slots(media):
            def report(percent: int, key: str = key) -> None:
                if on_progress:
                    on_progress(key, percent)

            logger.info("Uploading %s image %s", key, slot.local_file.path)
            uploaded[key] = self.uploader.upload(slot.local_file, report, slot.kind)
        return uploaded

    @staticmethod
    def _pending_slots(media: MediaSet):
        if media.main and media.main.is_pending:
            yield slot_key(media.main), media.main
        for index, slot in enumerate(media.subs):
            if slot.is_pending:
                yield slot_key(slot, index), slot

    @staticmethod
    def build_payload(
        draft: ProductDraft, media: MediaSet, uploaded: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Merge uploaded results with persisted URLs, keeping slot order."""
        main_url = None
        main_public_id = None
        if media.main:
            result = uploaded.get(slot_key(media.main))
            if result:
                main_url, main_public_id = result.url, result.public_id
            else:
                main_url = media.main.remote_url or None

        sub_images: List[Dict[str, Any]] = []
        for index, slot in enumerate(media.subs):
            result = uploaded.get(slot_key(slot, index))
            if result:
                sub_images.append({"image_url": result.url, "public_id": result.public_id})
            elif slot.remote_url:
                sub_images.append({"image_url": slot.remote_url})

        payload = draft.to_payload(main_image=main_url, sub_images=sub_images)
        if main_public_id:
            payload["main_image_public_id"] = main_public_id
        return payload
