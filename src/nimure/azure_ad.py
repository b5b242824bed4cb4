"""Azure AD (directory object) queries through the Azure CLI.

Fetches app registrations, users, groups and role assignments, each cached
under its own scope and rate limited through the shared RateLimiter.

Public API (the "studs"):
    AzureADClient: Directory object listings and details
    AD_CATEGORIES: Category names in display order
"""

import logging
from typing import Any

from nimure.azure_client import AzureCLIClient
from nimure.cache import CacheScope
from nimure.errors import DirectoryPermissionError, NimureError
from nimure.models import FetchResult, Resource
from nimure.resource_normalizer import (
    normalize_app_registrations,
    normalize_groups,
    normalize_role_assignments,
    normalize_users,
)

logger = logging.getLogger(__name__)

AD_CATEGORIES = ("app_registrations", "users", "groups", "role_assignments")


class AzureADClient(AzureCLIClient):
    """Query directory objects.

    Example:
        >>> client = AzureADClient(executor, cache, limiter)
        >>> probe = await client.check_permissions()
        >>> if probe.ok:
        ...     users = await client.get_users()
    """

    async def check_permissions(self) -> FetchResult[bool]:
        """Verify basic directory access by reading the tenant ID.

        Finer-grained permission problems surface when a category is fetched.
        """
        result = await self.executor.execute(
            ["account", "show", "--query", "tenantId", "--output", "tsv"]
        )
        if result.ok:
            return FetchResult.success(True)

        error = DirectoryPermissionError(
            f"Failed to verify Azure account: {result.stderr.strip()}"
        )
        logger.debug(str(error))
        return FetchResult.failure(str(error))

    async def get_app_registrations(self) -> FetchResult[list[Resource]]:
        """App registrations sorted by name."""
        return await self._cached_listing(
            CacheScope.APP_REGISTRATIONS,
            ["ad", "app", "list", "--output", "json"],
            "Failed to get app registrations",
            normalize_app_registrations,
        )

    async def get_users(self) -> FetchResult[list[Resource]]:
        """Users sorted by name."""
        return await self._cached_listing(
            CacheScope.USERS,
            ["ad", "user", "list", "--output", "json"],
            "Failed to get users",
            normalize_users,
        )

    async def get_groups(self) -> FetchResult[list[Resource]]:
        """Groups sorted by name."""
        return await self._cached_listing(
            CacheScope.GROUPS,
            ["ad", "group", "list", "--output", "json"],
            "Failed to get groups",
            normalize_groups,
        )

    async def get_role_assignments(self) -> FetchResult[list[Resource]]:
        """Role assignments sorted by role name, then principal name."""
        return await self._cached_listing(
            CacheScope.ROLE_ASSIGNMENTS,
            ["role", "assignment", "list", "--output", "json"],
            "Failed to get role assignments",
            normalize_role_assignments,
        )

    def fetchers(self) -> dict[str, Any]:
        """Category name to fetch coroutine function, in AD_CATEGORIES order."""
        return {
            "app_registrations": self.get_app_registrations,
            "users": self.get_users,
            "groups": self.get_groups,
            "role_assignments": self.get_role_assignments,
        }

    async def get_app_registration_details(self, app: Resource) -> FetchResult[dict[str, Any]]:
        """Full JSON of one app registration."""
        return await self._as_result(
            self._run_object(
                ["ad", "app", "show", "--id", str(app.properties.get("app_id")), "--output", "json"],
                "Failed to get app registration details",
                rate_limited=False,
            )
        )

    async def get_user_details(self, user: Resource) -> FetchResult[dict[str, Any]]:
        """Full JSON of one user."""
        return await self._as_result(
            self._run_object(
                ["ad", "user", "show", "--id", str(user.properties.get("object_id")), "--output", "json"],
                "Failed to get user details",
                rate_limited=False,
            )
        )

    async def get_group_members(self, group: Resource) -> FetchResult[list[dict[str, Any]]]:
        """Raw member objects of one group (empty list when it has none)."""
        args = [
            "ad",
            "group",
            "member",
            "list",
            "--group",
            str(group.properties.get("object_id")),
            "--output",
            "json",
        ]
        try:
            members = await self._run_listing(args, "Failed to get group members", rate_limited=False)
        except NimureError as e:
            return FetchResult.failure(str(e))
        return FetchResult.success(members)


__all__ = ["AD_CATEGORIES", "AzureADClient"]
