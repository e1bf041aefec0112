class HospitalError(Exception):
    """Base for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, error: str | None = None):
        self.message = message
        self.error = error
        super().__init__(message)


class ValidationError(HospitalError):
    status_code = 400


class AuthenticationError(HospitalError):
    status_code = 401


class AuthorizationError(HospitalError):
    status_code = 403


class NotFoundError(HospitalError):
    status_code = 404


class ConflictError(HospitalError):
    status_code = 409


class TransientInfraError(HospitalError):
    """Store or broadcast unavailable. Never retried by the server."""

    status_code = 500
