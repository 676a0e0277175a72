"""Domain errors and failure typing."""


class SyncError(Exception):
    """Base class for fatal sync failures."""

    error_code = "SYNC_ERROR"


class ConfigError(SyncError):
    """Raised for invalid configuration files."""

    error_code = "CONFIG_ERROR"


class MissingConfigError(ConfigError):
    """Raised when required run configuration is absent."""

    error_code = "MISSING_CONFIG"


class CredentialsError(SyncError):
    error_code = "CREDENTIALS_ERROR"


class ApiError(SyncError):
    """Raised when a call to the data source fails."""

    error_code = "API_ERROR"


class RetryableApiError(ApiError):
    pass


class RateLimitError(ApiError):
    error_code = "RATE_LIMIT"


class NoDataError(SyncError):
    error_code = "NO_DATA"


class InsufficientDataError(SyncError):
    error_code = "INSUFFICIENT_DATA"


class MissingColumnError(SyncError):
    """Raised when a required semantic field has no matching header."""

    error_code = "MISSING_COLUMN"

    def __init__(self, table: str, fields: list[str]) -> None:
        self.table = table
        self.fields = list(fields)
        super().__init__(f"Missing required column in {table} table: {', '.join(self.fields)}")


class ValidationError(SyncError):
    """Raised when the structure check finds missing required columns."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, report=None) -> None:
        self.report = report
        super().__init__(message)


class LoadError(SyncError):
    error_code = "LOAD_ERROR"


class SaveError(SyncError):
    error_code = "SAVE_ERROR"
