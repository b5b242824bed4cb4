"""
Resource Data Models

The uniform entity shape shared by cloud resources and directory objects.

Philosophy:
- Single responsibility: Resource data structure only
- Zero dependencies: No imports from other nimure modules
- Immutable after construction
"""

from dataclasses import dataclass, field
from typing import Any

# Location and resource group reported for directory objects
AD_LOCATION = "Azure AD"


@dataclass(frozen=True)
class Resource:
    """An Azure resource or directory object.

    Attributes:
        id: Native Azure resource ID, or "azure-ad://<category>/<id>"
        name: Display name
        type: "Microsoft.<Provider>/<kind>" or "Microsoft.AzureAD/<category>"
        location: Azure region, or "Azure AD"
        resource_group: Resource group name, "Azure AD" or "Unknown"
        tags: Resource tags (empty for directory objects)
        properties: Category-specific fields (app_id, user_principal_name, ...)
    """

    id: str
    name: str
    type: str
    location: str
    resource_group: str
    tags: dict[str, str] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def is_directory_object(self) -> bool:
        """True for app registrations, users, groups and role assignments."""
        return self.id.startswith("azure-ad://")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display or serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "resource_group": self.resource_group,
            "tags": dict(self.tags),
            "properties": dict(self.properties),
        }
