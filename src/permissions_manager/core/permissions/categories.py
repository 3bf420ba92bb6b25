"""Permission categories.

Categories are a closed, data-driven table of key -> {label, color}
loaded from settings. The core stores and validates keys only; labels
and colors are passed through to the presentation layer untouched.
"""

from functools import lru_cache

from permissions_manager.config import CategoryDefinition, get_settings
from permissions_manager.core.errors import ValidationFailedError


class CategoryRegistry:
    """Lookup table of the configured permission categories."""

    def __init__(self, definitions: dict[str, CategoryDefinition]) -> None:
        self._definitions = dict(definitions)

    def keys(self) -> list[str]:
        return list(self._definitions)

    def get(self, key: str) -> CategoryDefinition | None:
        return self._definitions.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def validate(self, key: str | None) -> str | None:
        """Check a category key.

        Args:
            key: Category key, or None for an uncategorised permission

        Returns:
            The key, with empty strings normalised to None

        Raises:
            ValidationFailedError: If the key is not configured
        """
        if not key:
            return None
        if key not in self._definitions:
            raise ValidationFailedError(
                field="category",
                rule="in",
                message=f"The category '{key}' is not a valid category.",
            )
        return key

    def as_options(self) -> list[dict[str, str]]:
        """Return the categories as value/label/color options."""
        return [
            {"value": key, "label": definition.label, "color": definition.color}
            for key, definition in self._definitions.items()
        ]


@lru_cache
def get_category_registry() -> CategoryRegistry:
    """Get the registry loaded from application settings."""
    return CategoryRegistry(get_settings().categories)
