"""
Pre-submission Validator

Checks the whole draft, including relationships between fields, once
before submission.
"""

from typing import Optional

from ..models import MediaSet, ProductDraft, ValidationErrorSet
from .fields import validate_mrp, validate_name, validate_price, validate_stock


class DraftValidator:
    """Validates a draft and its media in a single pass."""

    def __init__(self, draft: ProductDraft, media: MediaSet, is_new: bool):
        self.draft = draft
        self.media = media
        self.is_new = is_new

    def validate(self) -> ValidationErrorSet:
        """
        Run all checks.

        Builds a fresh error set on every call and never touches the draft.

        Returns:
            {field: message}; empty when the draft may be submitted
        """
        errors: ValidationErrorSet = {}
        d = self.draft

        name_error = validate_name(d.name)
        if name_error:
            errors["name"] = name_error

        price_error = validate_price(d.price)
        if price_error:
            errors["price"] = price_error

        # mrp vs price only once price itself is valid
        if not price_error:
            mrp_error = validate_mrp(d.mrp, d.price)
            if mrp_error:
                errors["mrp"] = mrp_error

        errors.update(validate_stock(d.total_stock, d.online_stock))

        if d.category is None:
            errors["category"] = "Please select a category"

        # Edits may keep whatever images the product already has
        if self.is_new and not self.media.has_main:
            errors["main_image"] = "Main product image is required"

        return errors

    def is_valid(self) -> bool:
        return not self.validate()


def first_error(errors: ValidationErrorSet) -> Optional[str]:
    """Message surfaced to the seller when submission is blocked."""
    return next(iter(errors.values()), None)
