"""
Exception hierarchy for micro_kit.

Every error carries an error code, an HTTP status code and optional context
so the transport layer can turn it into a standardized JSON response.
"""

from typing import Any


class MicroKitException(Exception):
    """Base exception for all micro_kit errors."""

    # Default values can be overridden by subclasses
    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        field: str | None = None,
        context: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.status_code = status_code or self.__class__.status_code
        self.field = field
        self.context = context or {}
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.context:
            result["context"] = self.context
        return result

    def __repr__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}('{self.message}', code='{self.error_code}')"


# Configuration exceptions
class ConfigError(MicroKitException):
    """Raised when a configuration file cannot be loaded or is incomplete."""

    error_code = "CONFIG_ERROR"
    status_code = 500

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        kwargs.setdefault("recoverable", False)
        super().__init__(f"ConfigError: {message}", **kwargs)
        if config_key:
            self.context["config_key"] = config_key


class ConfigIOError(ConfigError):
    """Raised when the config file cannot be found or read."""

    error_code = "CONFIG_IO_ERROR"

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__(f"{path}: {reason}", **kwargs)
        self.context["path"] = path


class BadYamlError(ConfigError):
    """Raised when the config file is not valid YAML."""

    error_code = "BAD_YAML"

    def __init__(self, reason: str, **kwargs):
        super().__init__(reason, **kwargs)


class MissingComponentError(ConfigError):
    """Raised when a required config component is absent."""

    error_code = "MISSING_COMPONENT"

    def __init__(self, component: str, **kwargs):
        super().__init__(f"Missing {component}", config_key=component, **kwargs)
        self.component = component


# Registry exceptions
class MetricRegistrationError(MicroKitException):
    """Raised when a metric cannot be attached to a metrics registry."""

    error_code = "METRIC_REGISTRATION_ERROR"
    status_code = 409

    def __init__(self, name: str, message: str | None = None, **kwargs):
        if not message:
            message = f"Unable to attach metric reporter {name}: name already registered"
        super().__init__(message, field="name", **kwargs)
        self.context["metric_name"] = name


class HealthCheckError(MicroKitException):
    """Raised by a health check that cannot determine its status."""

    error_code = "HEALTH_CHECK_ERROR"
    status_code = 503

    def __init__(self, check_name: str, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.context["check_name"] = check_name


class HealthCheckTimeoutError(HealthCheckError):
    """Raised when a health check exceeds its time budget."""

    error_code = "HEALTH_CHECK_TIMEOUT"

    def __init__(self, check_name: str, timeout: float, **kwargs):
        super().__init__(
            check_name, f"Health check {check_name} timed out after {timeout}s", **kwargs
        )
        self.context["timeout"] = timeout


class SerializationError(MicroKitException):
    """Raised when a report cannot be rendered to its wire format."""

    error_code = "SERIALIZATION_ERROR"
    status_code = 500

    def __init__(self, message: str, original_error: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if original_error:
            self.context["original_error"] = original_error


# Error code constants
ERROR_CODES = {
    "CONFIG_ERROR": "Configuration error",
    "CONFIG_IO_ERROR": "Configuration file unreadable",
    "BAD_YAML": "Configuration file is not valid YAML",
    "MISSING_COMPONENT": "Missing required configuration component",
    "METRIC_REGISTRATION_ERROR": "Metric registration failed",
    "HEALTH_CHECK_ERROR": "Health check failed",
    "HEALTH_CHECK_TIMEOUT": "Health check timed out",
    "SERIALIZATION_ERROR": "Report serialization failed",
    "INTERNAL_ERROR": "Internal server error",
}


def get_error_message(code: str) -> str:
    """Get human-readable message for error code."""
    return ERROR_CODES.get(code, "Unknown error")
