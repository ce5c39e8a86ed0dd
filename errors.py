"""Error taxonomy for category tree editing and persistence.

Every error carries a human readable message, an error code and optional
details so the presentation layer can report a specific reason.
"""

from typing import Any, Dict, Optional


class CategoryError(Exception):
    """Base exception for all category errors."""

    error_code = "CATEGORY_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for display or serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(CategoryError):
    """Raised when a field value is empty or otherwise invalid."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(message, details)
        self.field = field
        if field:
            self.details["field"] = field


class NotFoundError(CategoryError):
    """Raised when a node reference or row does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, message: str, node_ref: Optional[int] = None):
        super().__init__(message)
        self.node_ref = node_ref
        if node_ref is not None:
            self.details["node_ref"] = node_ref


class CycleError(CategoryError):
    """Raised when a move would make a node its own descendant."""

    error_code = "CYCLE"


class IntegrityError(CategoryError):
    """Raised when flattened or stored rows violate the forest invariants."""

    error_code = "INTEGRITY"


class ConflictError(CategoryError):
    """Raised when another writer changed rows a save depends on."""

    error_code = "CONFLICT"

    def __init__(self, message: str, category_id: Optional[int] = None):
        super().__init__(message)
        self.category_id = category_id
        if category_id is not None:
            self.details["category_id"] = category_id
