"""Repository-level domain errors."""


class RepositoryError(Exception):
    """Base repository exception."""

    error_code = "repository_error"


class RepositoryTimeoutError(RepositoryError):
    """Raised when a repository call does not complete within its time budget."""

    error_code = "repository_timeout"

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(f"circuit {operation} timed out after {timeout_seconds:g}s")
        self.operation = operation
        self.timeout_seconds = timeout_seconds
