"""Application errors and their HTTP status codes."""


class WholesaleError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(WholesaleError):
    """Malformed request; ``errors`` maps field name to message."""
    def __init__(self, errors, message="Invalid order request"):
        super().__init__(message, 400, {'errors': dict(errors)})
        self.errors = dict(errors)


class ForbiddenError(WholesaleError):
    """Raised when the caller is not allowed to perform the action."""
    def __init__(self, message="Forbidden"):
        super().__init__(message, 403)


class NotFoundError(WholesaleError):
    """Raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class PersistenceError(WholesaleError):
    """The atomic write failed and was rolled back; safe to retry."""
    def __init__(self, message="Could not save the order. Please try again."):
        super().__init__(message, 500)
