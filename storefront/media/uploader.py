"""
Media Host Uploader

Uploads product images to the remote media host (Cloudinary unsigned
upload API), falling back through an ordered list of upload presets.
"""

import logging
import time
from typing import Callable, List, Optional

import requests
from urllib3.filepost import encode_multipart_formdata

from ..common.config_loader import MediaHostConfig
from ..common.constants import SLOT_MAIN, SLOT_SUB
from ..common.errors import (
    NetworkError,
    RequestTimeoutError,
    ServerError,
    StorefrontError,
    UploadError,
)
from ..models import LocalMediaFile, UploadResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class _ProgressReporter:
    """Forwards percentages to the caller, only ever increasing."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self._callback = callback
        self.last = -1

    def report(self, percent: int) -> None:
        if percent <= self.last:
            return
        self.last = percent
        if self._callback:
            self._callback(percent)


class _ProgressBody:
    """
    File-like request body that reports bytes as the transport reads them.

    requests sends objects with read() in blocks and takes Content-Length
    from __len__.
    """

    def __init__(self, data: bytes, on_read: Callable[[int, int], None]):
        self._data = data
        self._offset = 0
        self._on_read = on_read

    def __len__(self) -> int:
        return len(self._data)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._data) - self._offset
        chunk = self._data[self._offset:self._offset + size]
        self._offset += len(chunk)
        if chunk:
            self._on_read(self._offset, len(self._data))
        return chunk


def _error_message(response: requests.Response) -> str:
    """Pull the host's error message out of a failed upload response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return error
    return f"HTTP {response.status_code}"


class MediaUploader:
    """
    Uploads one local image per call to the media host.

    Each preset in config.upload_presets is tried in order; every attempt
    builds its own request from scratch. The first success wins, exhaustion
    raises UploadError.

    Usage:
        uploader = MediaUploader(load_media_host_config())
        result = uploader.upload(local_file, on_progress=print, slot_kind="main")
    """

    def __init__(self, config: MediaHostConfig, session: Optional[requests.Session] = None):
        """
        Initialize the uploader.

        Args:
            config: Media host settings (account, presets, folder, timeouts)
            session: Optional shared session (a new one is created otherwise)
        """
        self.config = config
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def folder_for(self, slot_kind: str) -> str:
        return f"{self.config.folder}/{slot_kind}"

    def tags_for(self, slot_kind: str) -> List[str]:
        return list(self.config.tags) + [slot_kind]

    def generate_filename(self, local_file: LocalMediaFile, slot_kind: str) -> str:
        return f"{slot_kind}_{int(time.time() * 1000)}.{local_file.extension}"

    def upload(
        self,
        local_file: LocalMediaFile,
        on_progress: Optional[ProgressCallback] = None,
        slot_kind: str = SLOT_MAIN,
    ) -> UploadResult:
        """
        Upload a local image, trying each preset until one succeeds.

        Args:
            local_file: Image to upload
            on_progress: Called with 0-100; stays at 99 or below until the
                host confirms success
            slot_kind: "main" or "sub", selects the destination folder

        Returns:
            UploadResult with the secure URL and public id

        Raises:
            UploadError: All presets failed, or the local file is unreadable
        """
        if slot_kind not in (SLOT_MAIN, SLOT_SUB):
            raise ValueError(f"Unknown slot kind: {slot_kind}")

        try:
            data = local_file.read_bytes()
        except OSError as e:
            logger.error("Cannot read %s: %s", local_file.path, e)
            raise UploadError(attempts=0, last_error=e) from e

        presets = self.config.upload_presets
        reporter = _ProgressReporter(on_progress)
        reporter.report(0)

        last_error: Optional[StorefrontError] = None
        for attempt, preset in enumerate(presets, start=1):
            try:
                result = self._attempt(data, local_file, preset, slot_kind, reporter)
            except StorefrontError as e:
                last_error = e
                logger.warning("Upload attempt %d/%d with preset %r failed: %s",
                               attempt, len(presets), preset, e)
                if attempt < len(presets):
                    time.sleep(self.config.backoff)
                continue

            reporter.report(100)
            logger.info("Uploaded %s image %s with preset %r",
                        slot_kind, result.public_id, preset)
            return result

        logger.error("All %d upload presets failed for %s", len(presets), local_file.path)
        raise UploadError(attempts=len(presets), last_error=last_error)

    def _attempt(
        self,
        data: bytes,
        local_file: LocalMediaFile,
        preset: str,
        slot_kind: str,
        reporter: _ProgressReporter,
    ) -> UploadResult:
        """Single upload with one preset. Raises on any failure."""
        fields = [
            ("file", (self.generate_filename(local_file, slot_kind), data, local_file.mime_type)),
            ("upload_preset", preset),
            ("cloud_name", self.config.cloud_name),
            ("folder", self.folder_for(slot_kind)),
            ("tags", ",".join(self.tags_for(slot_kind))),
        ]
        fields.extend(self.config.upload_params.items())
        body, content_type = encode_multipart_formdata(fields)

        def on_read(loaded: int, total: int) -> None:
            reporter.report(min(99, loaded * 100 // total))

        try:
            response = self.session.post(
                self.config.endpoint,
                data=_ProgressBody(body, on_read),
                headers={"Content-Type": content_type},
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(f"Upload timed out after {self.config.timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Upload request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ServerError(response.status_code, _error_message(response))

        try:
            result = response.json()
        except ValueError as e:
            raise ServerError(response.status_code, "Invalid JSON in upload response") from e

        url = result.get("secure_url") if isinstance(result, dict) else None
        public_id = result.get("public_id") if isinstance(result, dict) else None
        if not url or not public_id:
            raise ServerError(response.status_code, "Upload response missing secure_url or public_id")

        return UploadResult(url=url, public_id=public_id)
