class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class StoreUnavailableError(AppError):
    """Raised when the backing store cannot be reached; the caller may retry."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details={"retryable": True, **(details or {})})
