"""Service layer errors.

Each error carries the HTTP status the API answers with, so routes can let
them propagate and the app-level error handler renders ``{"error": message}``.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(ServiceError):
    """Raised for a malformed identifier or malformed input."""

    status_code = 400


class NotFoundError(ServiceError):
    """Raised when a requested task or category does not exist."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class ConflictError(ServiceError):
    """Raised on duplicate category names or deleting a category still in use."""

    status_code = 409
