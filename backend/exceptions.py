# exceptions.py
"""
Error types raised by the price estimation flow.

Only the request errors ever reach an API caller. The remote-path errors are
raised inside the estimator and absorbed there: the caller gets the heuristic
estimate instead.
"""
from typing import List, Optional


class EstimationRequestError(ValueError):
    """Base class for user-correctable problems with a property description."""
    kind = "InvalidRequest"

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


class MissingRequiredField(EstimationRequestError):
    kind = "MissingRequiredField"

    def __init__(self, fields: List[str]):
        super().__init__(f"Missing required field(s): {', '.join(fields)}", fields)


class InvalidPropertyDescription(EstimationRequestError):
    kind = "InvalidPropertyDescription"


class RemoteServiceError(Exception):
    """The model service could not be reached or answered with an error."""


class MalformedModelResponse(Exception):
    """The model answered, but not with a usable price estimate."""
