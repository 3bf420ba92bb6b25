"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 500
MAX_GUARD_NAME_LENGTH = 100
MAX_CATEGORY_LENGTH = 100
MAX_PRINCIPAL_ID_LENGTH = 255

# Pagination
MAX_PAGE_SIZE = 100

# Role duplication
COPY_SUFFIX = "Copy"

# Permission cache
CACHE_NAMESPACE = "resolved"
