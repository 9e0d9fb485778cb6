from __future__ import annotations


class StyleInputError(ValueError):
    """Raised when caller-supplied input is rejected before any mutation."""
