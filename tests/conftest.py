"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest

from storefront.api import ACCESS_TOKEN_KEY, MemoryStore
from storefront.common.config_loader import ApiSettings, MediaHostConfig
from storefront.models import Category, CategoryAttribute, LocalMediaFile, ProductDraft


def make_response(status_code=200, json_data=None, text=""):
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {}
    response.text = text
    response.content = b"{}" if json_data is not None else text.encode()
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


def upload_ok(public_id="kerala-sellers/products/main/abc", url=None):
    return make_response(200, {
        "secure_url": url or f"https://res.cloudinary.com/demo/image/upload/{public_id}.jpg",
        "public_id": public_id,
    })


@pytest.fixture
def media_config():
    """Three presets, primary first; zero backoff keeps tests fast."""
    return MediaHostConfig(
        cloud_name="demo",
        upload_presets=["primary_preset", "fallback_one", "fallback_two"],
        folder="kerala-sellers/products",
        tags=["product"],
        upload_params={"quality": "auto:good"},
        backoff=0,
    )


@pytest.fixture
def api_settings():
    return ApiSettings(base_url="https://api.example.test", timeout=30)


@pytest.fixture
def token_store():
    return MemoryStore({ACCESS_TOKEN_KEY: "test-token"})


@pytest.fixture
def image_file(tmp_path):
    """A small local JPEG-ish file."""
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff" + b"x" * 20000)
    return LocalMediaFile(path)


@pytest.fixture
def make_image(tmp_path):
    """Factory for distinct local image files."""
    def _make(name):
        path = tmp_path / name
        path.write_bytes(b"\xff\xd8\xff" + name.encode() * 100)
        return LocalMediaFile(path)
    return _make


@pytest.fixture
def valid_draft():
    return ProductDraft(
        name="Steel Bottle",
        model_name="Milton",
        description="1 litre insulated bottle",
        price="250.00",
        mrp="300.00",
        total_stock=10,
        online_stock=4,
        category=3,
        attributes={"Material": "Steel"},
    )


@pytest.fixture
def existing_product():
    """Backend record of a product being edited."""
    return {
        "id": 42,
        "name": "Clay Pot",
        "model_name": "Handmade",
        "description": "Traditional clay pot",
        "price": 120.5,
        "mrp": 150,
        "total_stock": 8,
        "online_stock": 5,
        "sale_type": "ONLINE",
        "category": {"id": 7, "name": "Kitchen"},
        "attributes": '{"Size": "Large"}',
        "main_image_url": "https://res.cloudinary.com/demo/image/upload/pot.jpg",
        "sub_images": [
            {"image_url": "https://res.cloudinary.com/demo/image/upload/pot_side.jpg"},
        ],
    }


@pytest.fixture
def categories():
    return [
        Category(id=3, name="Bottles", attributes=[
            CategoryAttribute(name="Material", options=["Steel", "Plastic", "Glass"]),
            CategoryAttribute(name="Capacity"),
        ]),
        Category(id=7, name="Kitchen", attributes=[
            CategoryAttribute(name="Size", options=["Small", "Large"]),
        ]),
    ]


@pytest.fixture
def response():
    """Factory fixture: response(status_code, json_data=None, text="")."""
    return make_response


@pytest.fixture
def upload_response():
    """Factory fixture for a successful media host response."""
    return upload_ok
