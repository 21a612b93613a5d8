"""
Product Wizard

Four-step state machine behind the add/edit product screen:

    1 basic info -> 2 stock -> 3 category/attributes -> 4 images -> submit

Forward moves are gated by can_advance(); back moves are free above step 1.
The wizard owns the draft, the media set, the error set and the in-progress
flags. It is the only place where submission errors are turned into
messages. A failed submission leaves the draft untouched on step 4 so the
seller can retry.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from ..common.constants import FIRST_STEP, LAST_STEP, MAX_SUB_IMAGES, SLOT_MAIN, SLOT_SUB
from ..common.errors import MediaPermissionError, StorefrontError, ValidationError, describe_error
from ..media import MediaPicker, acquire
from ..models import Category, LocalMediaFile, MediaSet, ProductDraft, SaleType, ValidationErrorSet
from ..submission import SubmissionStrategySelector
from ..validation import (
    DraftValidator,
    clean_decimal_input,
    clean_description,
    clean_model_name,
    clean_name,
    clean_stock_input,
    first_error,
    validate_attribute,
    validate_price,
)

logger = logging.getLogger(__name__)

STEP_TITLES = {
    1: "Basic Information",
    2: "Stock Management",
    3: "Category & Tags",
    4: "Product Images",
}

EDITABLE_FIELDS = frozenset({
    "name", "model_name", "description", "price", "mrp",
    "total_stock", "online_stock", "sale_type", "category", "attributes",
})
STOCK_FIELDS = frozenset({"total_stock", "online_stock"})
DECIMAL_FIELDS = frozenset({"price", "mrp"})


class Navigator(ABC):
    """Screen-level collaborator told when a submission has completed."""

    @abstractmethod
    def on_submission_complete(self, product: Dict[str, Any], is_editing: bool) -> None:
        ...


@dataclass
class SubmissionOutcome:
    """Result of one submit() call."""
    success: bool
    message: str = ""
    product: Optional[Dict[str, Any]] = None
    errors: ValidationErrorSet = field(default_factory=dict)
    error: Optional[BaseException] = None


class ProductWizard:
    """
    Add/edit product wizard.

    Usage:
        wizard = ProductWizard(selector, navigator)
        wizard.set_text("name", "Steel Bottle")
        wizard.set_price_input("price", "250")
        wizard.advance()
        ...
        outcome = wizard.submit()
    """

    def __init__(
        self,
        selector: SubmissionStrategySelector,
        navigator: Optional[Navigator] = None,
        existing_product: Optional[Dict[str, Any]] = None,
        categories: Optional[Iterable[Category]] = None,
    ):
        """
        Args:
            selector: Submission strategy runner
            navigator: Notified after a successful submission
            existing_product: Backend record to edit; None creates a new product
            categories: Category definitions for step 3 (see set_categories)
        """
        self.selector = selector
        self.navigator = navigator
        if existing_product is not None:
            self.draft = ProductDraft.from_existing(existing_product)
        else:
            self.draft = ProductDraft()
        self.media = MediaSet.from_existing(existing_product)

        self.step = FIRST_STEP
        self.errors: ValidationErrorSet = {}
        self.is_submitting = False
        self.is_uploading = False
        self.upload_progress: Dict[str, int] = {}
        self.last_message = ""
        self.completed = False

        self.categories: Dict[int, Category] = {}
        self.set_categories(categories or [])

    @property
    def is_editing(self) -> bool:
        """True when the draft belongs to a persisted product."""
        return not self.draft.is_new

    @property
    def title(self) -> str:
        if self.is_editing:
            return f"Edit: {self.draft.name or 'Product'}"
        return STEP_TITLES[self.step]

    # ── Draft updates ─────────────────────────────────────────────────────

    def apply_partial_update(self, **updates) -> None:
        """
        Apply field updates to the draft.

        Clears the errors of the touched fields (and 'stock' when a stock
        field changes) and clamps online stock to total stock.
        """
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")

        if "sale_type" in updates:
            updates["sale_type"] = SaleType(updates["sale_type"])
        if "attributes" in updates:
            updates["attributes"] = dict(updates["attributes"] or {})

        for key in STOCK_FIELDS & set(updates):
            updates[key] = clean_stock_input(updates[key])

        for key, value in updates.items():
            setattr(self.draft, key, value)

        if STOCK_FIELDS & set(updates):
            if self.draft.online_stock > self.draft.total_stock:
                logger.debug("Clamping online stock %d to total stock %d",
                             self.draft.online_stock, self.draft.total_stock)
                self.draft.online_stock = self.draft.total_stock
            self.errors.pop("stock", None)

        for key in updates:
            self.errors.pop(key, None)

    def set_text(self, field_name: str, raw: str) -> None:
        cleaners = {
            "name": clean_name,
            "model_name": clean_model_name,
            "description": clean_description,
        }
        if field_name not in cleaners:
            raise ValueError(f"Not a text field: {field_name}")
        self.apply_partial_update(**{field_name: cleaners[field_name](raw)})

    def set_price_input(self, field_name: str, raw: str) -> bool:
        """
        Keystroke entry for price/MRP.

        Returns:
            False if the keystroke was dropped (draft unchanged)
        """
        if field_name not in DECIMAL_FIELDS:
            raise ValueError(f"Not a decimal field: {field_name}")
        cleaned = clean_decimal_input(raw)
        if cleaned is None:
            return False
        self.apply_partial_update(**{field_name: cleaned})
        return True

    def set_stock_input(self, field_name: str, raw) -> None:
        if field_name not in STOCK_FIELDS:
            raise ValueError(f"Not a stock field: {field_name}")
        self.apply_partial_update(**{field_name: clean_stock_input(raw)})

    # ── Category (step 3) ─────────────────────────────────────────────────

    def set_categories(self, categories: Iterable[Category]) -> None:
        self.categories = {c.id: c for c in categories}

    def select_category(self, category_id: int) -> None:
        """
        Select a category and line up the attribute map with its definition.

        Values for attributes the category defines are kept; the rest are
        dropped when the category changes.
        """
        changed = category_id != self.draft.category
        definition = self.categories.get(category_id)

        if definition is None:
            attributes = {} if changed else dict(self.draft.attributes)
        else:
            current = self.draft.attributes
            attributes = {
                attr.name: current.get(attr.name, "") for attr in definition.attributes
            }
            if not changed:
                # Keep extra keys stored on the product being edited
                attributes = {**current, **attributes}

        self.apply_partial_update(category=category_id, attributes=attributes)

    def set_attribute(self, name: str, value: str) -> bool:
        """Set one attribute. Returns False if the value is not an allowed option."""
        definition = self.categories.get(self.draft.category)
        options = []
        if definition:
            for attr in definition.attributes:
                if attr.name == name:
                    options = attr.options
                    break

        error = validate_attribute(value, options)
        if error:
            logger.debug("Rejected attribute %s=%r: %s", name, value, error)
            return False

        attributes = dict(self.draft.attributes)
        attributes[name] = value
        self.apply_partial_update(attributes=attributes)
        return True

    # ── Media (step 4) ────────────────────────────────────────────────────

    def set_main_image(self, local_file: LocalMediaFile) -> None:
        self.media.set_main(local_file)
        self.errors.pop("main_image", None)

    def add_sub_image(self, local_file: LocalMediaFile) -> bool:
        if not self.media.add_sub(local_file):
            self.last_message = f"You can only add up to {MAX_SUB_IMAGES} additional images"
            logger.info("Sub image rejected, %d slots already used", len(self.media.subs))
            return False
        return True

    def remove_sub_image(self, index: int) -> bool:
        return self.media.remove_sub(index)

    def acquire_image(self, picker: MediaPicker, source: str, slot_kind: str = SLOT_MAIN) -> bool:
        """
        Pick an image from camera/gallery into a slot.

        Returns:
            True if a slot was filled; False on cancel, denial or a full set
        """
        if slot_kind not in (SLOT_MAIN, SLOT_SUB):
            raise ValueError(f"Unknown slot kind: {slot_kind}")

        try:
            local_file = acquire(picker, source)
        except MediaPermissionError as e:
            self.last_message = describe_error(e)
            logger.info("Media permission denied for %s", source)
            return False

        if local_file is None:
            return False
        if slot_kind == SLOT_MAIN:
            self.set_main_image(local_file)
            return True
        return self.add_sub_image(local_file)

    # ── Navigation ────────────────────────────────────────────────────────

    def can_advance(self, step: Optional[int] = None) -> bool:
        """Whether the given (default: current) step's requirements are met."""
        step = self.step if step is None else step
        d = self.draft

        if step == 1:
            return bool(d.name.strip()) and validate_price(d.price) is None
        if step == 2:
            return 0 <= d.online_stock <= d.total_stock
        if step == 3:
            return d.category is not None
        if step == 4:
            return self.media.has_main
        return False

    def advance(self) -> bool:
        if self.step >= LAST_STEP or not self.can_advance():
            return False
        self.step += 1
        return True

    def back(self) -> bool:
        if self.step <= FIRST_STEP:
            return False
        self.step -= 1
        return True

    # ── Submission ────────────────────────────────────────────────────────

    def _on_upload_progress(self, key: str, percent: int) -> None:
        self.upload_progress[key] = percent

    def submit(self) -> SubmissionOutcome:
        """
        Validate and submit the draft.

        Never raises for validation, upload, network or server failures;
        those come back as an unsuccessful outcome with a message.
        """
        if self.is_submitting:
            return SubmissionOutcome(False, message="Submission already in progress")
        if self.completed:
            return SubmissionOutcome(False, message="Product already submitted")
        if self.step != LAST_STEP:
            return SubmissionOutcome(False, message="Complete all steps before submitting")

        self.errors = DraftValidator(self.draft, self.media, is_new=not self.is_editing).validate()
        if self.errors:
            self.last_message = first_error(self.errors)
            logger.info("Submission blocked: %s", self.last_message)
            return SubmissionOutcome(False, message=self.last_message, errors=dict(self.errors))

        self.is_submitting = True
        self.is_uploading = True
        self.upload_progress = {}
        try:
            product = self.selector.submit(
                self.draft, self.media, on_progress=self._on_upload_progress
            )
        except StorefrontError as e:
            if isinstance(e, ValidationError):
                self.errors.update(e.errors)
            return self._failed(e, describe_error(e))
        except Exception as e:
            logger.exception("Unexpected submission failure")
            return self._failed(e, f"Failed to {'update' if self.is_editing else 'save'} product")
        finally:
            self.is_submitting = False
            self.is_uploading = False
            self.upload_progress = {}

        self.completed = True
        self.last_message = f"Product {'updated' if self.is_editing else 'created'} successfully!"
        logger.info("Product %s %s", (product or {}).get("id"),
                    "updated" if self.is_editing else "created")
        if self.navigator:
            self.navigator.on_submission_complete(product, self.is_editing)
        return SubmissionOutcome(True, message=self.last_message, product=product)

    def _failed(self, error: BaseException, message: str) -> SubmissionOutcome:
        self.last_message = message
        logger.error("Submission failed: %s", error)
        return SubmissionOutcome(False, message=message, errors=dict(self.errors), error=error)
