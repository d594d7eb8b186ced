class SupplierForecastError(Exception):
    """Base exception for Supplier Forecast service errors."""

    http_status = 500

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or "An error occurred in the Supplier Forecast service"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        """String representation of the error."""
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'success': False,
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(SupplierForecastError):
    """Exception raised for configuration errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Configuration error"
        super().__init__(message, code, details)


class DatabaseError(SupplierForecastError):
    """Exception raised for database-related errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Database error"
        super().__init__(message, code, details)


class ValidationError(SupplierForecastError):
    """Exception raised for invalid request payloads."""

    http_status = 400

    def __init__(self, message=None, code=None, details=None):
        message = message or "Validation error"
        super().__init__(message, code, details)


class AuthenticationError(SupplierForecastError):
    """Exception raised when the portal token is missing or invalid."""

    http_status = 401

    def __init__(self, message=None, code=None, details=None):
        message = message or "Unauthorized"
        super().__init__(message, code, details)


class AuthorizationError(SupplierForecastError):
    """Exception raised when an authenticated supplier may not proceed."""

    http_status = 403

    def __init__(self, message=None, code=None, details=None):
        message = message or "Access denied"
        super().__init__(message, code, details)


class NotFoundError(SupplierForecastError):
    """Exception raised when a requested resource is not found."""

    http_status = 404

    def __init__(self, message=None, code=None, details=None):
        message = message or "Resource not found"
        super().__init__(message, code, details)


class ForecastError(SupplierForecastError):
    """Exception raised when the production forecast cannot be computed."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Forecasting error"
        super().__init__(message, code, details)
