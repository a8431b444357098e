# portal/core/errors.py

"""
Error taxonomy for the portal endpoints.

Every PortalError is rendered by portal.main as ``{"error": message}``
with its status code. BackendError is internal: services translate it
into one of the PortalError subclasses before it reaches a client.
"""


class PortalError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ------------------------------------------------------------
# 400
# ------------------------------------------------------------
class ValidationError(PortalError):
    status_code = 400
    message = "Invalid request"


class UnsupportedPortalError(ValidationError):
    message = "Unsupported portal"


class MissingCredentialsError(ValidationError):
    message = "Please provide Roll/Register Number and DOB (YYYY-MM-DD)"


# ------------------------------------------------------------
# 401 / 403
# ------------------------------------------------------------
class AuthenticationError(PortalError):
    status_code = 401
    message = "Invalid Roll/Register Number or Date of Birth"


class InvalidLoginCredentialsError(AuthenticationError):
    message = "Invalid login credentials"


class AuthorizationError(PortalError):
    status_code = 403
    message = "Portal Not Activated"


# ------------------------------------------------------------
# 5xx
# ------------------------------------------------------------
class ProvisioningError(PortalError):
    status_code = 500
    message = "Account setup failed"


class LookupFailedError(PortalError):
    status_code = 500
    message = "Login failed"


class ServiceUnavailableError(PortalError):
    status_code = 503
    message = "Session verification unavailable"


class UnknownError(PortalError):
    status_code = 500
    message = "Unknown error"


class BackendError(Exception):
    """A Supabase / PostgREST / HTTP call failed."""

    def __init__(self, operation: str, detail: object = None):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
