"""
Shared constants for the submission pipeline.

Field limits and media slot rules live here so validators, models and the
wizard agree on a single value.
"""

# Field length limits
NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
MODEL_NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 500

# Decimal inputs (price, MRP) keep at most this many fractional digits
PRICE_DECIMAL_PLACES = 2

# Media slots
SLOT_MAIN = "main"
SLOT_SUB = "sub"
MAX_SUB_IMAGES = 4

# Wizard steps
FIRST_STEP = 1
LAST_STEP = 4
