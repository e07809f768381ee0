"""Builder exceptions."""

from typing import Optional


class ValidationError(ValueError):
    """
    Bad or missing required input.

    Raised at the offending setter, or at build() when a mandatory
    setter was skipped. Callers map it to a 4xx response.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
