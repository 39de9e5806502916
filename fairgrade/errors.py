"""
Error taxonomy for the tracking functions.
Every error carries the HTTP status it is reported with; the app renders
them as ``{"error": message}``.
"""


class FairGradeError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self):
        body = {"error": self.message}
        body.update(self.extra)
        return body


class ValidationError(FairGradeError):
    status_code = 400
    default_message = "Invalid request body"


class Unauthorized(FairGradeError):
    status_code = 401
    default_message = "Invalid token"


class OutOfScope(FairGradeError):
    status_code = 403
    default_message = "URL not in project tracking scope"


class NotFound(FairGradeError):
    status_code = 404
    default_message = "Not found"


class ServiceError(FairGradeError):
    status_code = 500


class StoreError(Exception):
    """A read or write against the data store failed."""
