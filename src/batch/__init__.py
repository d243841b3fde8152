"""Batch processing of many emails under rate-limit constraints.

Public API:
    - BatchProcessor: Grouped, throttled analysis + scoring
    - BatchResult / BatchStatistics / BatchError: Results of a run
"""

from .models import BatchError, BatchResult, BatchStatistics
from .processor import BatchProcessor, chunked

__all__ = [
    "BatchProcessor",
    "BatchResult",
    "BatchStatistics",
    "BatchError",
    "chunked",
]
