"""
Domain errors raised by the tipping services.

Each error carries the HTTP status the API renders it with, so routers never
translate them by hand; see ``tipping_error_handler`` in ``app.main``.
"""
from typing import Any, Dict, Optional


class TippingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "error": type(self).__name__}


class NotFound(TippingError):
    """Unknown match, user or prediction."""
    status_code = 404


class InvalidPrediction(TippingError):
    """A goal value is negative, too large or not an integer."""
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class InvalidResult(InvalidPrediction):
    """A final score reported by the result feed is malformed."""


class MatchLocked(TippingError):
    """Predictions close at kickoff or once the match has started."""
    status_code = 409


class DuplicatePrediction(TippingError):
    status_code = 409


class InvalidState(TippingError):
    """Match status transition requested out of order."""
    status_code = 409


class IncompleteMatch(TippingError):
    """Scoring requested for a match without a final result."""
    status_code = 409
