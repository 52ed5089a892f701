"""Operation result types and status enums.

Standardized result types used by recipient resolution, provider error
classification and provider configuration checks.
"""

from infrastructure.operations.classifiers import classify_http_error
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_error",
]
