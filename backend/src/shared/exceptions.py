class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str = "Resource", id: str = ""):
        super().__init__(f"{resource} not found: {id}" if id else f"{resource} not found")


class ConflictError(AppError):
    """Raised when a resource already exists."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message)


class InvalidIndexError(AppError):
    """Raised when a seek or step targets an edit index outside the log."""

    def __init__(self, index: int, total: int):
        self.index = index
        self.total = total
        super().__init__(f"Invalid edit index: {index} (log has {total} edits)")


class InvalidSpeedError(AppError):
    """Raised when a playback speed is not strictly positive."""

    def __init__(self, speed: float):
        self.speed = speed
        super().__init__(f"Playback speed must be greater than 0, got {speed}")


class PlaybackInProgressError(AppError):
    """Raised when an operation would interleave with a running play loop."""

    def __init__(self, message: str = "A playback loop is already running"):
        super().__init__(message)


class TrackingError(AppError):
    """Raised when version tracking is started twice on one recorder."""

    def __init__(self, message: str = "Version tracking is already active"):
        super().__init__(message)
