"""Smart filtering of single emails against caller-defined criteria.

Public API:
    - SmartFilter: One oracle call per email, safe default on failure
    - FilterCriteria / FilterResult: Input and output records
"""

from .models import FilterCriteria, FilterResult
from .smart_filter import SmartFilter

__all__ = [
    "SmartFilter",
    "FilterCriteria",
    "FilterResult",
]
