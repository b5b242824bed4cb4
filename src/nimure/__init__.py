"""nimure - Azure resource explorer and cost analysis core

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Azure CLI as the only transport (no credentials in code)
- Partial failures degrade, never abort

nimure lists Azure resources and directory objects through the Azure CLI,
caches them with a TTL, and aggregates Cost Management data into per-service
and per-day summaries with trend detection.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
