"""Base class for validation-request definitions.

Subclass ``FormRequest`` in the application's request directories and return
rule sets from ``rules()``::

    class StoreUserRequest(FormRequest):
        def rules(self) -> dict[str, str | list]:
            return {
                "name": "required|string|max:255",
                "email": ["required", "email"],
            }

The request extractor instantiates subclasses with no arguments and reads
``rules()``, ``messages()`` and ``attributes()``.
"""

from typing import Any


class FormRequest:
    """Describes the expected input of one operation."""

    def rules(self) -> dict[str, Any]:
        return {}

    def messages(self) -> dict[str, str]:
        """Custom error messages keyed by ``field.rule``."""
        return {}

    def attributes(self) -> dict[str, str]:
        """Human-readable labels keyed by field name."""
        return {}
