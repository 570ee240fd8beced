# capacity_engine/core/errors.py

from typing import Any, Optional

# -----------------------------
# Base Errors
# -----------------------------

class CapacityError(Exception):
    """Base class for all capacity engine errors."""
    pass


# -----------------------------
# Validation Errors
# -----------------------------

class CapacityValidationError(CapacityError):
    """Invalid input or violated precondition."""
    pass


# -----------------------------
# Panel / Data Source Errors
# -----------------------------

class PanelError(CapacityError):
    """Remote panel request failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or (str(status_code) if status_code else "PANEL_ERROR")
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        return self.message


class PanelNotFoundError(PanelError):
    """Requested node or server does not exist on the panel."""
    pass


class PanelConfigurationError(PanelError):
    """Panel URL or API key missing."""
    pass
