"""Error classifiers for provider exceptions.

Converts httpx transport and status errors raised by the email and SMS
provider adapters into OperationResult objects, so every provider reports
failures the same way.

Usage:
    from infrastructure.operations import classify_http_error

    try:
        response = await client.post(url, json=body)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        result = classify_http_error(exc, provider="resend")
"""

from typing import Optional

import httpx

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def _extract_error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of a provider error message from a response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return response.reason_phrase


def classify_http_error(exc: Exception, provider: str = "provider") -> OperationResult:
    """Classify an httpx error into an OperationResult.

    Status Code Mapping:
    - 429: Rate limiting -> TRANSIENT_ERROR with retry_after
    - 401/403: Credentials rejected -> UNAUTHORIZED
    - 404: Not found -> NOT_FOUND
    - 5xx: Server error -> TRANSIENT_ERROR
    - Other 4xx: Rejected request -> PERMANENT_ERROR
    - Transport errors (timeouts, connection) -> TRANSIENT_ERROR

    Args:
        exc: Exception raised while calling the provider API
        provider: Provider name used in the message

    Returns:
        OperationResult describing the failure
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        status_code = response.status_code
        detail = _extract_error_detail(response)
        message = f"{provider} API error ({status_code}): {detail}"

        if status_code == 429:
            retry_after: Optional[int] = None
            header = response.headers.get("Retry-After")
            if header and header.isdigit():
                retry_after = int(header)
            return OperationResult.transient_error(
                message, error_code="RATE_LIMITED", retry_after=retry_after
            )
        if status_code in (401, 403):
            return OperationResult.error(
                OperationStatus.UNAUTHORIZED, message, error_code="UNAUTHORIZED"
            )
        if status_code == 404:
            return OperationResult.error(
                OperationStatus.NOT_FOUND, message, error_code="NOT_FOUND"
            )
        if status_code >= 500:
            return OperationResult.transient_error(message, error_code="SERVER_ERROR")
        return OperationResult.permanent_error(message, error_code="REQUEST_REJECTED")

    if isinstance(exc, httpx.TimeoutException):
        return OperationResult.transient_error(
            f"{provider} request timed out: {exc}", error_code="TIMEOUT"
        )

    if isinstance(exc, httpx.TransportError):
        return OperationResult.transient_error(
            f"{provider} connection error: {type(exc).__name__}: {exc}",
            error_code="CONNECTION_ERROR",
        )

    return OperationResult.permanent_error(
        f"{provider} unexpected error: {type(exc).__name__}: {exc}",
        error_code="UNKNOWN_ERROR",
    )
