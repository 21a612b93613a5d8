"""
Data models for product submission.

This module contains data classes with no network or UI logic.
"""

from .product import (
    Category,
    CategoryAttribute,
    LocalMediaFile,
    MediaSet,
    MediaSlot,
    ProductDraft,
    SaleType,
    UploadResult,
    ValidationErrorSet,
    extract_attributes,
    extract_category_id,
)

__all__ = [
    'Category',
    'CategoryAttribute',
    'LocalMediaFile',
    'MediaSet',
    'MediaSlot',
    'ProductDraft',
    'SaleType',
    'UploadResult',
    'ValidationErrorSet',
    'extract_attributes',
    'extract_category_id',
]
