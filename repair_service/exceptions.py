from fastapi import status


class RepairServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None, details=None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(RepairServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid booking data"


class NotFoundError(RepairServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Booking not found"


class ConflictError(RepairServiceError):
    # A tracking-id collision is reported as a server fault, not a client error
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database insertion failed"


class StoreError(RepairServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database operation failed"


class DispatchError(RepairServiceError):
    """Raised by the mail transport. Never reaches an API caller."""
    message = "Notification delivery failed"
