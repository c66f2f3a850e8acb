"""Error normalization and classification.

Re-exports all public symbols.
"""

from adminkit.core.errors.exceptions import (
    AdminKitError,
    ApiError,
    CapabilityUnavailableError,
    ConcurrentExecutionError,
)
from adminkit.core.errors.models import (
    Classification,
    NormalizedError,
    Severity,
)
from adminkit.core.errors.normalizer import ErrorNormalizer, normalize
from adminkit.core.errors.classifier import ErrorClassifier

__all__ = [
    "AdminKitError",
    "ApiError",
    "CapabilityUnavailableError",
    "ConcurrentExecutionError",
    "Classification",
    "NormalizedError",
    "Severity",
    "ErrorNormalizer",
    "normalize",
    "ErrorClassifier",
]
