"""
Service layer exceptions. Messages are shown to the user as-is.
"""


class ValidationError(ValueError):
    """A payload cannot be stored as sent (answered with HTTP 400)."""
    pass


class DuplicateRecordError(Exception):
    """A client-supplied id is already taken (answered with HTTP 409)."""
    pass
