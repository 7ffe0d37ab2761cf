"""
Error types raised by the tipping services.

Routes let these propagate; the handler registered in create_app() renders
them as ``{"error": message}`` with the matching status code.
"""


class TippingError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        data = {"error": self.message}
        if self.payload:
            data.update(self.payload)
        return data


class ValidationError(TippingError):
    """Malformed or missing fields"""

    status_code = 400


class AuthenticationError(TippingError):
    status_code = 401


class AuthorizationError(TippingError):
    """Authenticated, but not allowed to do this"""

    status_code = 403


class FixtureLockedError(AuthorizationError):
    """Pick writes after kickoff or after a result is recorded"""


class NotFoundError(TippingError):
    status_code = 404


class ConflictError(TippingError):
    """Conditional write lost against a newer version of the row"""

    status_code = 409


def form_error_message(form):
    """Flatten WTForms errors into one message string"""
    messages = []
    for field_name, errors in form.errors.items():
        for error in errors:
            messages.append(f"{field_name}: {error}")
    return "; ".join(messages) or "Invalid request"
