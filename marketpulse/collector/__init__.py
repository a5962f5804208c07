"""DataForSEO collection: HTTP client and snapshot adapter."""

from .client import DataForSEOClient, DataForSEOError, RetryConfig, task_results
from .provider import DataForSEOProvider

__all__ = [
    "DataForSEOClient",
    "DataForSEOError",
    "RetryConfig",
    "task_results",
    "DataForSEOProvider",
]
