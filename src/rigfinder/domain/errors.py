"""Domain errors surfaced at the API boundary.

Each error carries the machine-readable ``code`` and HTTP ``status_code``
that the exception handler in ``app.main`` renders into the
``{"error": {"message", "code"}}`` envelope.
"""


class RigfinderError(Exception):
    """Base class for errors with a stable API error code."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(RigfinderError):
    code = "NOT_FOUND"
    status_code = 404


class VendorNotFoundError(NotFoundError):
    code = "VENDOR_NOT_FOUND"

    def __init__(self, vendor_id: str | None = None):
        self.vendor_id = vendor_id
        super().__init__("Vendor not found")


class EquipmentNotFoundError(NotFoundError):
    code = "EQUIPMENT_NOT_FOUND"

    def __init__(self, equipment_id: str | None = None):
        self.equipment_id = equipment_id
        super().__init__("Equipment not found")


class InvalidRequestError(RigfinderError):
    code = "INVALID_REQUEST"
    status_code = 400


class RateLimitedError(RigfinderError):
    """Raised when a client exceeds the contact-event logging quota."""

    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message)


class UnauthorizedError(RigfinderError):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(RigfinderError):
    code = "FORBIDDEN"
    status_code = 403
