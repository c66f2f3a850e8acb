"""AdminKit: async-data orchestration and error reporting for admin dashboards."""

__version__ = "0.1.0"

from adminkit.bootstrap import configure
from adminkit.core.errors import (
    ApiError,
    ErrorClassifier,
    ErrorNormalizer,
    NormalizedError,
    Severity,
)
from adminkit.operations import (
    AsyncOperation,
    ErrorOptions,
    FormSubmission,
    PaginatedAsyncOperation,
    PaginationCursor,
)
from adminkit.reporting import (
    ErrorReporter,
    get_reporter,
    install_global_hooks,
    set_reporter,
    with_reporting,
)

__all__ = [
    "ApiError",
    "AsyncOperation",
    "ErrorClassifier",
    "ErrorNormalizer",
    "ErrorOptions",
    "ErrorReporter",
    "FormSubmission",
    "NormalizedError",
    "PaginatedAsyncOperation",
    "PaginationCursor",
    "Severity",
    "__version__",
    "configure",
    "get_reporter",
    "install_global_hooks",
    "set_reporter",
    "with_reporting",
]
