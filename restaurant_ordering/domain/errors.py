"""Domain error taxonomy raised by the application services.

The API layer maps each kind to an HTTP status; services never retry
and never substitute defaults.
"""

class ServiceError(Exception):
    """Base class for failures surfaced to the caller unchanged"""
    kind = "service_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404

class ConstraintViolation(ServiceError):
    kind = "constraint_violation"
    status_code = 409

class Unavailable(ServiceError):
    kind = "unavailable"
    status_code = 409

class EmptyCart(ServiceError):
    kind = "empty_cart"
    status_code = 400

class InvalidState(ServiceError):
    kind = "invalid_state"
    status_code = 409

class AlreadyPaid(ServiceError):
    kind = "already_paid"
    status_code = 409
