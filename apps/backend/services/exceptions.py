"""
Exception hierarchy for style matching.

Data-store failures propagate to the caller as DataFetchError; optional
signals (history boost, style DNA) never raise past the scorer.
"""

from typing import Optional, Dict, Any


class StyleMatchingError(Exception):
    """Base exception for all style matching errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


class DataFetchError(StyleMatchingError):
    """Company, catalog or history lookup failed"""
    pass


class InvalidStyleQuery(StyleMatchingError):
    """Request parameters are out of range"""
    pass
