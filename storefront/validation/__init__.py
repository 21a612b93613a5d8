"""
Validation modules.

Modules:
    fields     - Per-field cleaning and checks applied on every edit
    invariants - Whole-draft check run once before submission
"""

from .fields import (
    clean_decimal_input,
    clean_description,
    clean_model_name,
    clean_name,
    clean_stock_input,
    validate_attribute,
    validate_mrp,
    validate_name,
    validate_price,
    validate_stock,
)
from .invariants import DraftValidator, first_error

__all__ = [
    'DraftValidator',
    'first_error',
    'clean_decimal_input',
    'clean_description',
    'clean_model_name',
    'clean_name',
    'clean_stock_input',
    'validate_attribute',
    'validate_mrp',
    'validate_name',
    'validate_price',
    'validate_stock',
]
