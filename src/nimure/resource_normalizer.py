"""Normalize Azure CLI listing JSON into Resource objects.

Every listing the Azure CLI returns (resources, app registrations, users,
groups, role assignments) has its own shape. This module maps each one onto
the uniform Resource model, with documented fallback chains for the name
field and a deterministic sort order per collection.

Sort policy (stable, case-sensitive, no locale folding):
- Cloud resources: (resource_group, name)
- App registrations, users, groups: name
- Role assignments: (role name, principal name)

Public API:
    parse_listing: Decode a listing, treating blank output as empty
    normalize_resources: Cloud resources from `az resource list`
    normalize_app_registrations: `az ad app list`
    normalize_users: `az ad user list`
    normalize_groups: `az ad group list`
    normalize_role_assignments: `az role assignment list`
    extract_resource_group: Resource group segment of a resource ID
"""

import json
import logging
import re
from typing import Any

from nimure.errors import ParseError
from nimure.models import AD_LOCATION, Resource

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

AD_TYPE_PREFIX = "Microsoft.AzureAD"

_RESOURCE_GROUP_PATTERN = re.compile(r"/resourceGroups/([^/]+)")
_SUBSCRIPTION_PATTERN = re.compile(r"/subscriptions/([^/]+)")
_RESOURCE_ID_PATTERN = re.compile(
    r"^/subscriptions/[^/]+/resourceGroups/[^/]+/providers/[^/]+/[^/]+/[^/]+"
)


def extract_resource_group(resource_id: str | None) -> str:
    """Extract the resource group name from an Azure resource ID.

    Example:
        >>> extract_resource_group(
        ...     "/subscriptions/x/resourceGroups/myRG/providers/Microsoft.Compute/virtualMachines/vm1"
        ... )
        'myRG'
        >>> extract_resource_group("/subscriptions/x")
        'Unknown'
    """
    if not resource_id:
        return UNKNOWN
    match = _RESOURCE_GROUP_PATTERN.search(resource_id)
    return match.group(1) if match else UNKNOWN


def extract_subscription_id(resource_id: str | None) -> str | None:
    """Extract the subscription ID from an Azure resource ID."""
    if not resource_id:
        return None
    match = _SUBSCRIPTION_PATTERN.search(resource_id)
    return match.group(1) if match else None


def is_valid_resource_id(resource_id: str | None) -> bool:
    """Check that a string looks like a full ARM resource ID."""
    return bool(resource_id) and _RESOURCE_ID_PATTERN.match(resource_id) is not None


def short_type(resource_type: str) -> str:
    """Last segment of a resource type, e.g. "virtualMachines"."""
    parts = resource_type.split("/")
    return parts[-1] if len(parts) >= 2 else resource_type


def resource_from_id(resource_id: str) -> Resource:
    """Build a minimal Resource from an ARM resource ID alone.

    Used when a resource is named on the command line rather than picked from
    a listing; name, type and resource group come from the ID segments.

    Example:
        >>> resource_from_id(
        ...     "/subscriptions/x/resourceGroups/myRG/providers/Microsoft.Web/sites/app1"
        ... ).type
        'Microsoft.Web/sites'
    """
    segments = [segment for segment in resource_id.split("/") if segment]
    resource_type = UNKNOWN
    if "providers" in segments:
        provider = segments[segments.index("providers") + 1 :]
        if len(provider) >= 3:
            resource_type = "/".join([provider[0], *provider[1:-1:2]])

    return Resource(
        id=resource_id,
        name=segments[-1] if segments else UNKNOWN,
        type=resource_type,
        location=UNKNOWN,
        resource_group=extract_resource_group(resource_id),
    )


def parse_listing(raw: str | None) -> list[dict[str, Any]]:
    """Decode a JSON array printed by the Azure CLI.

    Blank output and "[]" are an empty listing, not an error.

    Raises:
        ParseError: Output is not valid JSON, not a JSON array, or an entry
            of the array is not an object
    """
    text = (raw or "").strip()
    if not text or text == "[]":
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed listing JSON: {e.msg} at position {e.pos}") from e

    if not isinstance(data, list):
        raise ParseError(f"Expected a JSON array, got {type(data).__name__}")

    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(
                f"Expected JSON objects in listing, got {type(item).__name__} at index {index}"
            )

    return data


def _first(*candidates: Any, default: str = UNKNOWN) -> Any:
    """First candidate that is not None or empty."""
    for candidate in candidates:
        if candidate not in (None, ""):
            return candidate
    return default


def _ad_id(category: str, object_id: Any) -> str:
    return f"azure-ad://{category}/{object_id}"


def _ad_resource(category: str, kind: str, object_id: Any, name: str, properties: dict) -> Resource:
    return Resource(
        id=_ad_id(category, object_id),
        name=name,
        type=f"{AD_TYPE_PREFIX}/{kind}",
        location=AD_LOCATION,
        resource_group=AD_LOCATION,
        tags={},
        properties=properties,
    )


def _by_name(resources: list[Resource]) -> list[Resource]:
    return sorted(resources, key=lambda r: r.name)


def normalize_resources(raw: list[dict[str, Any]]) -> list[Resource]:
    """Normalize `az resource list` output.

    Args:
        raw: Decoded resource listing

    Returns:
        Resources sorted by (resource_group, name)
    """
    processed = []

    for item in raw:
        resource_id = item.get("id") or ""
        properties = {}
        if item.get("kind") is not None:
            properties["kind"] = item["kind"]
        if item.get("sku") is not None:
            properties["sku"] = item["sku"]

        processed.append(
            Resource(
                id=resource_id,
                name=_first(item.get("name")),
                type=_first(item.get("type")),
                location=_first(item.get("location")),
                resource_group=extract_resource_group(resource_id),
                tags=dict(item.get("tags") or {}),
                properties=properties,
            )
        )

    return sorted(processed, key=lambda r: (r.resource_group, r.name))


def normalize_app_registrations(raw: list[dict[str, Any]]) -> list[Resource]:
    """Normalize `az ad app list` output.

    Name fallback: displayName, appId, "Unknown".
    """
    processed = []

    for app in raw:
        processed.append(
            _ad_resource(
                "app-registrations",
                "appRegistrations",
                app.get("id"),
                _first(app.get("displayName"), app.get("appId")),
                {
                    "app_id": app.get("appId"),
                    "object_id": app.get("id"),
                    "display_name": app.get("displayName"),
                    "sign_in_audience": app.get("signInAudience"),
                    "homepage": (app.get("web") or {}).get("homePageUrl") or app.get("homepage"),
                    "reply_urls": app.get("replyUrls") or [],
                    "required_resource_accesses": app.get("requiredResourceAccess") or [],
                    "created_date_time": app.get("createdDateTime"),
                },
            )
        )

    return _by_name(processed)


def normalize_users(raw: list[dict[str, Any]]) -> list[Resource]:
    """Normalize `az ad user list` output.

    Name fallback: displayName, userPrincipalName, "Unknown".
    """
    processed = []

    for user in raw:
        processed.append(
            _ad_resource(
                "users",
                "users",
                user.get("id"),
                _first(user.get("displayName"), user.get("userPrincipalName")),
                {
                    "object_id": user.get("id"),
                    "user_principal_name": user.get("userPrincipalName"),
                    "display_name": user.get("displayName"),
                    "mail": user.get("mail"),
                    "account_enabled": user.get("accountEnabled"),
                    "job_title": user.get("jobTitle"),
                    "department": user.get("department"),
                    "company_name": user.get("companyName"),
                    "created_date_time": user.get("createdDateTime"),
                },
            )
        )

    return _by_name(processed)


def normalize_groups(raw: list[dict[str, Any]]) -> list[Resource]:
    """Normalize `az ad group list` output.

    Name fallback: displayName, mailNickname, "Unknown".
    """
    processed = []

    for group in raw:
        processed.append(
            _ad_resource(
                "groups",
                "groups",
                group.get("id"),
                _first(group.get("displayName"), group.get("mailNickname")),
                {
                    "object_id": group.get("id"),
                    "display_name": group.get("displayName"),
                    "mail": group.get("mail"),
                    "mail_enabled": group.get("mailEnabled"),
                    "mail_nickname": group.get("mailNickname"),
                    "security_enabled": group.get("securityEnabled"),
                    "description": group.get("description"),
                    "created_date_time": group.get("createdDateTime"),
                    "membership_types": group.get("groupTypes") or [],
                },
            )
        )

    return _by_name(processed)


def normalize_role_assignments(raw: list[dict[str, Any]]) -> list[Resource]:
    """Normalize `az role assignment list` output.

    Recent CLI versions flatten the assignment fields to the top level; older
    ones nest them under "properties". Both are accepted, top level first.

    Name fallback: roleDefinitionName, "Unknown Role".
    """
    processed = []

    for assignment in raw:
        nested = assignment.get("properties") or {}

        def field(key: str, default: str = UNKNOWN) -> Any:
            return _first(assignment.get(key), nested.get(key), default=default)

        processed.append(
            _ad_resource(
                "role-assignments",
                "roleAssignments",
                assignment.get("id"),
                field("roleDefinitionName", default="Unknown Role"),
                {
                    "assignment_id": assignment.get("id"),
                    "scope": field("scope"),
                    "role_definition_id": field("roleDefinitionId"),
                    "role_definition_name": field("roleDefinitionName"),
                    "principal_id": field("principalId"),
                    "principal_type": field("principalType"),
                    "principal_name": field("principalName"),
                    "created_on": field("createdOn"),
                    "description": field("description", default="Azure role assignment"),
                },
            )
        )

    return sorted(processed, key=lambda r: (r.name, r.properties["principal_name"] or ""))


__all__ = [
    "UNKNOWN",
    "extract_resource_group",
    "extract_subscription_id",
    "is_valid_resource_id",
    "normalize_app_registrations",
    "normalize_groups",
    "normalize_resources",
    "normalize_role_assignments",
    "normalize_users",
    "parse_listing",
    "resource_from_id",
    "short_type",
]
