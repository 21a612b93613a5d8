"""
Product data models.

Data classes for the in-progress product draft, its attached media, and
the records exchanged with the media host and the category service.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..common.constants import MAX_SUB_IMAGES, SLOT_MAIN, SLOT_SUB

logger = logging.getLogger(__name__)

# Field name -> human-readable message
ValidationErrorSet = Dict[str, str]


class SaleType(str, Enum):
    """Channel(s) a product is sold through."""
    BOTH = "BOTH"
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass
class LocalMediaFile:
    """A newly acquired image on the device, not yet uploaded."""
    path: Path
    mime_type: str = "image/jpeg"

    def __post_init__(self):
        self.path = Path(self.path)

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".").lower() or "jpg"

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass
class UploadResult:
    """Outcome of one successful upload to the media host."""
    url: str
    public_id: str


@dataclass
class MediaSlot:
    """
    One image position.

    Holds either a persisted remote image (edit mode, never re-uploaded)
    or a pending local file.
    """
    kind: str
    remote_url: str = ""
    local_file: Optional[LocalMediaFile] = None

    @property
    def is_pending(self) -> bool:
        return self.local_file is not None


@dataclass
class MediaSet:
    """Main image slot plus up to MAX_SUB_IMAGES sub image slots."""
    main: Optional[MediaSlot] = None
    subs: List[MediaSlot] = field(default_factory=list)

    @classmethod
    def from_existing(cls, record: Optional[Dict[str, Any]]) -> "MediaSet":
        """Build persisted slots from an existing product record."""
        media = cls()
        if not record:
            return media

        main_url = record.get("main_image_url") or ""
        if main_url:
            media.main = MediaSlot(kind=SLOT_MAIN, remote_url=main_url)

        for image in record.get("sub_images") or []:
            url = image.get("image_url") if isinstance(image, dict) else image
            if not url:
                continue
            if len(media.subs) >= MAX_SUB_IMAGES:
                logger.warning("Existing product has more than %d sub images, ignoring %s",
                               MAX_SUB_IMAGES, url)
                break
            media.subs.append(MediaSlot(kind=SLOT_SUB, remote_url=url))
        return media

    def set_main(self, local_file: LocalMediaFile) -> None:
        self.main = MediaSlot(kind=SLOT_MAIN, local_file=local_file)

    def add_sub(self, local_file: LocalMediaFile) -> bool:
        """Append a pending sub image. Returns False (unchanged) when full."""
        if len(self.subs) >= MAX_SUB_IMAGES:
            return False
        self.subs.append(MediaSlot(kind=SLOT_SUB, local_file=local_file))
        return True

    def remove_sub(self, index: int) -> bool:
        if not 0 <= index < len(self.subs):
            return False
        del self.subs[index]
        return True

    @property
    def has_main(self) -> bool:
        return self.main is not None and (self.main.is_pending or bool(self.main.remote_url))

    @property
    def has_pending(self) -> bool:
        return any(slot.is_pending for slot in self.slots())

    @property
    def has_persisted(self) -> bool:
        return any(not slot.is_pending for slot in self.slots())

    def slots(self) -> List[MediaSlot]:
        """All occupied slots, main first, subs in slot order."""
        return ([self.main] if self.main else []) + list(self.subs)


@dataclass
class CategoryAttribute:
    """Category-specific attribute definition."""
    name: str
    required: bool = False
    options: List[str] = field(default_factory=list)


@dataclass
class Category:
    """Product category as listed by the category service."""
    id: int
    name: str
    attributes: List[CategoryAttribute] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        attributes = [
            CategoryAttribute(
                name=attr["name"],
                required=bool(attr.get("required", False)),
                options=list(attr.get("options") or []),
            )
            for attr in data.get("attributes") or []
            if attr.get("name")
        ]
        return cls(id=int(data["id"]), name=data.get("name", ""), attributes=attributes)


def extract_category_id(record: Optional[Dict[str, Any]]) -> Optional[int]:
    """
    Extract a category id from an existing product record.

    Accepts an int, an object with an 'id', a 'category_id' field, or a
    numeric string.
    """
    if not record:
        return None

    category = record.get("category")
    if isinstance(category, bool):
        category = None
    if isinstance(category, int):
        return category
    if isinstance(category, dict) and category.get("id"):
        return int(category["id"])
    if record.get("category_id"):
        return int(record["category_id"])
    if isinstance(category, str) and category.strip().isdigit():
        return int(category.strip())

    logger.debug("No category found in product record %s", record.get("id"))
    return None


def extract_attributes(record: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Extract the attribute mapping (dict or JSON string) from a product record."""
    if not record:
        return {}

    attributes = record.get("attributes")
    if isinstance(attributes, dict):
        return dict(attributes)
    if isinstance(attributes, str):
        try:
            parsed = json.loads(attributes)
        except json.JSONDecodeError:
            logger.warning("Unparseable attributes on product %s", record.get("id"))
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _to_number(value: str) -> float:
    try:
        return float(Decimal(value))
    except (InvalidOperation, ValueError):
        return 0.0


@dataclass
class ProductDraft:
    """
    In-progress product record built by the wizard.

    price and mrp stay strings exactly as typed (after cleaning) until the
    payload is assembled.
    """

    product_id: Optional[int] = None  # None until persisted
    name: str = ""
    model_name: str = ""
    description: str = ""
    price: str = ""
    mrp: str = ""
    total_stock: int = 0
    online_stock: int = 0
    sale_type: SaleType = SaleType.BOTH
    category: Optional[int] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_existing(cls, record: Dict[str, Any]) -> "ProductDraft":
        """Pre-populate a draft from an existing product record (edit mode)."""
        price = record.get("price")
        mrp = record.get("mrp")
        sale_type = record.get("sale_type") or SaleType.BOTH.value
        try:
            sale_type = SaleType(sale_type)
        except ValueError:
            logger.warning("Unknown sale_type %r, defaulting to BOTH", sale_type)
            sale_type = SaleType.BOTH

        return cls(
            product_id=record.get("id"),
            name=record.get("name") or "",
            model_name=record.get("model_name") or "",
            description=record.get("description") or "",
            price="" if price is None else str(price),
            mrp="" if mrp is None else str(mrp),
            total_stock=max(int(record.get("total_stock") or 0), 0),
            online_stock=max(int(record.get("online_stock") or 0), 0),
            sale_type=sale_type,
            category=extract_category_id(record),
            attributes=extract_attributes(record),
        )

    @property
    def is_new(self) -> bool:
        return self.product_id is None

    def to_payload(
        self,
        main_image: Optional[str] = None,
        sub_images: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Build the backend payload.

        Args:
            main_image: Remote URL of the main image, if any
            sub_images: [{"image_url": ..., "public_id": ...}] in slot order;
                always sent (possibly empty) for an existing product

        Returns:
            JSON-serialisable dict; mrp falls back to price when empty
        """
        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "model_name": self.model_name,
            "description": self.description,
            "price": _to_number(self.price),
            "mrp": _to_number(self.mrp or self.price),
            "total_stock": self.total_stock,
            "online_stock": self.online_stock,
            "sale_type": self.sale_type.value,
            "category": self.category,
            "attributes": dict(self.attributes),
        }
        if main_image:
            payload["main_image_url"] = main_image
        if sub_images or not self.is_new:
            payload["sub_images"] = list(sub_images or [])
        return payload
