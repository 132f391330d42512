class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler is configured with an invalid phase or ordering."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class PersistenceError(AppError):
    """Raised when a generated batch timetable cannot be written.

    Batches written before the failure stay committed.
    """
    def __init__(self, semester: str, batch: str, reason: str):
        super().__init__(
            f"Failed to store timetable for semester {semester} batch {batch}",
            status_code=500,
            details={"semester": semester, "batch": batch, "reason": reason},
        )
