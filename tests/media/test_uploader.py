"""Tests for storefront/media/uploader.py"""

import re
from unittest.mock import patch

import pytest
import requests

from storefront.common.errors import (
    NetworkError,
    RequestTimeoutError,
    ServerError,
    UploadError,
)
from storefront.media.uploader import MediaUploader
from storefront.models import LocalMediaFile


@pytest.fixture
def uploader(media_config):
    return MediaUploader(media_config)


def _drain(data, chunk=4096):
    """Read a request body the way the transport does."""
    while data.read(chunk):
        pass


def _field(body: bytes, name: str) -> str:
    match = re.search(
        rb'name="' + name.encode() + rb'"\r\n\r\n(.*?)\r\n--', body, re.S
    )
    return match.group(1).decode() if match else None


class TestUploadFallback:
    def test_first_preset_success(self, uploader, image_file, upload_response):
        with patch.object(uploader.session, "post", return_value=upload_response("p/1")) as post:
            result = uploader.upload(image_file, slot_kind="main")

        assert post.call_count == 1
        assert result.public_id == "p/1"
        assert result.url.startswith("https://")

    def test_falls_back_until_success(self, uploader, image_file, response, upload_response):
        presets_seen = []

        def fake_post(url, data=None, headers=None, timeout=None):
            body = data.read()
            presets_seen.append(_field(body, "upload_preset"))
            if len(presets_seen) < 3:
                return response(400, {"error": {"message": "Upload preset not found"}})
            return upload_response("p/third", url="https://res.cloudinary.com/demo/third.jpg")

        with patch.object(uploader.session, "post", side_effect=fake_post):
            result = uploader.upload(image_file, slot_kind="main")

        assert presets_seen == ["primary_preset", "fallback_one", "fallback_two"]
        assert result.url == "https://res.cloudinary.com/demo/third.jpg"

    def test_all_presets_fail(self, uploader, image_file, response):
        failed = response(401, {"error": {"message": "Unknown API key"}})
        with patch.object(uploader.session, "post", return_value=failed) as post:
            with pytest.raises(UploadError) as exc_info:
                uploader.upload(image_file, slot_kind="sub")

        assert post.call_count == 3
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, ServerError)
        assert "Unknown API key" in str(exc_info.value)

    def test_stops_after_success(self, uploader, image_file, response, upload_response):
        side_effect = [response(500, text="oops"), upload_response(), upload_response("never")]
        with patch.object(uploader.session, "post", side_effect=side_effect) as post:
            result = uploader.upload(image_file)

        assert post.call_count == 2
        assert result.public_id != "never"

    def test_backoff_between_attempts_only(self, uploader, image_file, response):
        uploader.config.backoff = 0.5
        with patch.object(uploader.session, "post", return_value=response(500, text="down")):
            with patch("storefront.media.uploader.time.sleep") as sleep:
                with pytest.raises(UploadError):
                    uploader.upload(image_file)

        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)

    def test_timeout_is_classified(self, uploader, image_file):
        with patch.object(uploader.session, "post", side_effect=requests.exceptions.Timeout):
            with pytest.raises(UploadError) as exc_info:
                uploader.upload(image_file)
        assert isinstance(exc_info.value.last_error, RequestTimeoutError)

    def test_connection_error_is_classified(self, uploader, image_file, upload_response):
        side_effect = [requests.exceptions.ConnectionError("reset"), upload_response()]
        with patch.object(uploader.session, "post", side_effect=side_effect):
            assert uploader.upload(image_file).public_id

        with patch.object(uploader.session, "post",
                          side_effect=requests.exceptions.ConnectionError("reset")):
            with pytest.raises(UploadError) as exc_info:
                uploader.upload(image_file)
        assert isinstance(exc_info.value.last_error, NetworkError)

    def test_response_without_url_counts_as_failure(self, uploader, image_file, response,
                                                     upload_response):
        side_effect = [response(200, {"public_id": "x"}), upload_response("ok")]
        with patch.object(uploader.session, "post", side_effect=side_effect) as post:
            result = uploader.upload(image_file)
        assert post.call_count == 2
        assert result.public_id == "ok"

    def test_unreadable_file(self, uploader, tmp_path):
        with patch.object(uploader.session, "post") as post:
            with pytest.raises(UploadError) as exc_info:
                uploader.upload(LocalMediaFile(tmp_path / "missing.jpg"))
        assert exc_info.value.attempts == 0
        post.assert_not_called()

    def test_unknown_slot_kind(self, uploader, image_file):
        with pytest.raises(ValueError):
            uploader.upload(image_file, slot_kind="banner")


class TestRequestContents:
    def test_multipart_fields(self, uploader, image_file, upload_response):
        captured = {}

        def fake_post(url, data=None, headers=None, timeout=None):
            captured.update(url=url, body=data.read(), headers=headers, timeout=timeout)
            return upload_response()

        with patch.object(uploader.session, "post", side_effect=fake_post):
            uploader.upload(image_file, slot_kind="sub")

        body = captured["body"]
        assert captured["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
        assert captured["headers"]["Content-Type"].startswith("multipart/form-data; boundary=")
        assert captured["timeout"] == 60
        assert _field(body, "cloud_name") == "demo"
        assert _field(body, "folder") == "kerala-sellers/products/sub"
        assert _field(body, "tags") == "product,sub"
        assert _field(body, "quality") == "auto:good"
        assert re.search(rb'filename="sub_\d+\.jpg"', body)

    def test_each_attempt_builds_fresh_body(self, uploader, image_file, response,
                                            upload_response):
        bodies = []

        def fake_post(url, data=None, headers=None, timeout=None):
            bodies.append(data)
            data.read(100)  # partially sent, then fails
            if len(bodies) == 1:
                raise requests.exceptions.ConnectionError("dropped")
            _drain(data)
            return upload_response()

        with patch.object(uploader.session, "post", side_effect=fake_post):
            uploader.upload(image_file)

        assert bodies[0] is not bodies[1]


class TestProgress:
    def test_progress_capped_until_confirmed(self, uploader, image_file, upload_response):
        seen = []

        def fake_post(url, data=None, headers=None, timeout=None):
            _drain(data)
            assert max(seen) <= 99
            return upload_response()

        with patch.object(uploader.session, "post", side_effect=fake_post):
            uploader.upload(image_file, on_progress=seen.append)

        assert seen[0] == 0
        assert seen[-1] == 100
        assert 99 in seen
        assert seen == sorted(seen)
        assert len(seen) == len(set(seen))

    def test_progress_never_decreases_across_fallbacks(self, uploader, image_file,
                                                       response, upload_response):
        seen = []
        calls = []

        def fake_post(url, data=None, headers=None, timeout=None):
            calls.append(1)
            _drain(data)
            if len(calls) == 1:
                return response(500, text="err")
            return upload_response()

        with patch.object(uploader.session, "post", side_effect=fake_post):
            uploader.upload(image_file, on_progress=seen.append)

        assert seen == sorted(seen)
        assert seen[-1] == 100

    def test_no_100_on_failure(self, uploader, image_file, response):
        seen = []

        def fake_post(url, data=None, headers=None, timeout=None):
            _drain(data)
            return response(500, text="err")

        with patch.object(uploader.session, "post", side_effect=fake_post):
            with pytest.raises(UploadError):
                uploader.upload(image_file, on_progress=seen.append)

        assert 100 not in seen
