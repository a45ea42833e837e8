class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class InvalidInputError(AppError):
    """Raised when caller input is rejected before any mutation happens."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class BlockInvariantError(AppError):
    """Raised when block calculation produces a block that can never be stored."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)

class PersistenceError(AppError):
    """Raised when a write against the store fails. Always retryable."""
    def __init__(self, operation: str, message: str | None = None, details: dict = None):
        self.operation = operation
        payload = {"operation": operation, "retryable": True}
        payload.update(details or {})
        super().__init__(message or f"Failed to {operation}", status_code=503, details=payload)

class CopyForwardError(PersistenceError):
    """Raised when copying a schedule fails; the target date may be left cleared."""
    def __init__(self, target_date: str, message: str, *, cleared: bool):
        self.target_date = target_date
        self.cleared = cleared
        super().__init__(
            "copy schedule",
            message,
            details={"target_date": target_date, "cleared": cleared},
        )

class MalformedRecordError(AppError):
    """Raised when a stored row fails validation on read."""
    def __init__(self, table: str, record_id: str | int | None, message: str):
        super().__init__(
            f"Malformed {table} row {record_id}: {message}",
            status_code=500,
            details={"table": table, "record_id": record_id},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
