"""
Custom error classes with structured logging.

Cache operations never raise these to callers: storage failures, absence
and type mismatches are reported through return values. They are raised
by configuration, argument validation and code generation, and used
internally by the disk codec.
"""

from typing import Optional, Dict, Any
from cachekit.common.logging import get_logger

logger = get_logger(__name__)


class CacheKitError(Exception):
    """
    Base error class for all cachekit errors.

    Automatically logs itself with structured data when raised.
    """

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        logger.error(self.message, data=log_data, exc_info=self.cause is not None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "cause": str(self.cause) if self.cause else None,
        }


# Cache errors
class CacheError(CacheKitError):
    """Error accessing cache storage."""
    pass


class SerializationError(CacheError):
    """Record could not be encoded or decoded."""

    def _log_error(self):
        # Undecodable files are an expected outcome on the read path
        logger.debug(self.message, data={"error_type": self.__class__.__name__, **self.data})


# Configuration errors
class ConfigurationError(CacheKitError):
    """Error in configuration."""
    pass


# Validation errors
class ValidationError(CacheKitError):
    """Error validating input data."""
    pass


# Utility errors
class VerificationCodeError(CacheKitError):
    """Verification code could not be generated."""
    pass
