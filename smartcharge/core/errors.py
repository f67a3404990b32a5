class SmartChargeError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SmartChargeError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class InvalidTransitionError(ValidationError):
    code = "INVALID_TRANSITION"
    default_message = "Reservation status cannot be changed"


class NotFoundError(SmartChargeError):
    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class StoreError(SmartChargeError):
    code = "STORE_ERROR"
    default_message = "Operation failed"
