"""Operation result dataclass.

Uniform result type returned by recipient resolution, provider error
classification and provider configuration validation.
"""

from typing import Optional, Any
from dataclasses import dataclass

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Uniform result returned from operations.

    Attributes:
        status: OperationStatus -- high-level outcome
        message: str -- human-friendly message for logs and failure results
        data: Optional[Any] -- optional payload (resolved address, errors list)
        error_code: Optional[str] -- optional machine error code
        retry_after: Optional[int] -- seconds until retry when rate-limited
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        """True if status is SUCCESS."""
        return self.status == OperationStatus.SUCCESS

    @property
    def is_retryable(self) -> bool:
        """True if the failure may succeed on a later attempt."""
        return self.status == OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        """Create a SUCCESS OperationResult with optional data."""
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        """Create an error OperationResult.

        Args:
            status: OperationStatus indicating error type
            message: Human-friendly error message
            error_code: Optional machine error code
            retry_after: Optional seconds until retry (for rate limiting)
            data: Optional payload to include with the error

        Returns:
            OperationResult with specified error status
        """
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            data=data,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Create a transient (retryable) error result.

        Use for provider timeouts, 5xx responses and throttling.
        """
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        """Create a permanent (non-retryable) error result.

        Use for invalid addresses, rejected payloads and incomplete
        provider configuration.
        """
        return cls.error(
            OperationStatus.PERMANENT_ERROR, message, error_code, data=data
        )

    @classmethod
    def not_found(
        cls, message: str, error_code: Optional[str] = "NOT_FOUND"
    ) -> "OperationResult":
        """Create a NOT_FOUND result (unknown user, missing contact detail)."""
        return cls.error(OperationStatus.NOT_FOUND, message, error_code)
