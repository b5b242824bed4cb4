"""
nimure Data Models

Shared dataclasses and data structures to avoid circular dependencies.

Philosophy:
- Zero dependencies on other nimure modules
- Self-contained data definitions
- Shared types used across multiple modules
"""

from .resource_models import AD_LOCATION, Resource
from .result_models import FetchResult

__all__ = ["AD_LOCATION", "FetchResult", "Resource"]
