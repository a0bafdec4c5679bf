"""Custom exception hierarchy."""

from typing import Iterable, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class UnsupportedFormatError(ValidationError):
    """Raised when an upload is neither plain text nor a .docx document."""
    pass


class InvalidRecipientsError(ValidationError):
    """Raised when a recipient batch contains malformed addresses."""

    def __init__(self, invalid_addresses: Iterable[str]):
        self.invalid_addresses = list(invalid_addresses)
        super().__init__(f"Invalid email addresses: {', '.join(self.invalid_addresses)}")


class DocumentNotFoundError(AppError):
    """Raised when a document is not found."""
    pass


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class GenerationFailed(APIClientError):
    """Raised when the text generation provider fails."""
    pass


class QuotaExceeded(GenerationFailed):
    """Raised when the provider signals a rate or usage limit."""
    pass


class ContentRejected(GenerationFailed):
    """Raised when the provider blocks the prompt or the answer on policy grounds."""
    pass


class EmailDeliveryError(APIClientError):
    """Raised when the mail relay refuses or fails a delivery."""
    pass


class EmailQuotaExceeded(EmailDeliveryError):
    """Raised when the mail relay signals a sending limit."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass
