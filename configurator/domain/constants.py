"""Domain business rules and constants."""

from typing import Final

# Business Rules - Core domain constraints
MAX_NAME_LENGTH: Final = 255
MAX_FEATURE_NAME_LENGTH: Final = 100
MAX_IMAGE_REF_LENGTH: Final = 255
CENTS_PER_UNIT: Final = 100
