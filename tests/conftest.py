"""
Shared test fixtures for nimure tests.

This module provides common fixtures used across all test types:
- A fake Azure CLI that routes argument lists to canned results
- A manually advanced clock for TTL and rate limiting tests
- Sample Azure CLI payloads
"""

import json
from typing import Any

import pytest

from nimure.azure_cli_executor import AzureCLIExecutor, CommandResult

# ============================================================================
# FAKES
# ============================================================================


class FakeClock:
    """Callable clock returning epoch seconds that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAzureCLI:
    """Stand-in for AzureCLIExecutor.execute.

    Routes are matched in registration order by argument prefix; unmatched
    commands fail with exit code 1.
    """

    def __init__(self):
        self.routes: list[tuple[list[str], Any]] = []
        self.calls: list[list[str]] = []

    def on(self, *prefix: str, stdout: Any = "", stderr: str = "", exit_code: int = 0):
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)
        self.routes.append((list(prefix), CommandResult(stdout, stderr, exit_code)))
        return self

    def fail(self, *prefix: str, stderr: str = "ERROR: failed", exit_code: int = 1):
        return self.on(*prefix, stderr=stderr, exit_code=exit_code)

    def calls_to(self, *prefix: str) -> list[list[str]]:
        return [call for call in self.calls if call[: len(prefix)] == list(prefix)]

    async def __call__(self, args: list[str], timeout_ms: int | None = None) -> CommandResult:
        self.calls.append(list(args))
        for prefix, result in self.routes:
            if args[: len(prefix)] == prefix:
                return result
        return CommandResult("", f"unexpected command: {' '.join(args)}", 1)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def fake_cli():
    """Fake Azure CLI with no routes registered."""
    return FakeAzureCLI()


@pytest.fixture
def executor(fake_cli):
    """Real AzureCLIExecutor whose subprocess layer is the fake CLI."""
    executor = AzureCLIExecutor()
    executor.execute = fake_cli  # type: ignore[method-assign]
    return executor


# ============================================================================
# SAMPLE PAYLOADS
# ============================================================================


def arm_id(resource_group: str, provider: str, name: str) -> str:
    return f"/subscriptions/sub-123/resourceGroups/{resource_group}/providers/{provider}/{name}"


@pytest.fixture
def sample_resources() -> list[dict[str, Any]]:
    """Five resources across two resource groups, deliberately unsorted."""
    return [
        {
            "id": arm_id("rg-web", "Microsoft.Web/sites", "frontend"),
            "name": "frontend",
            "type": "Microsoft.Web/sites",
            "location": "westeurope",
            "kind": "app",
        },
        {
            "id": arm_id("rg-data", "Microsoft.Storage/storageAccounts", "datalake"),
            "name": "datalake",
            "type": "Microsoft.Storage/storageAccounts",
            "location": "westeurope",
            "sku": {"name": "Standard_LRS"},
            "tags": {"env": "prod"},
        },
        {
            "id": arm_id("rg-web", "Microsoft.Web/serverFarms", "plan"),
            "name": "plan",
            "type": "Microsoft.Web/serverFarms",
            "location": "westeurope",
        },
        {
            "id": arm_id("rg-data", "Microsoft.Sql/servers", "sqlsrv"),
            "name": "sqlsrv",
            "type": "Microsoft.Sql/servers",
            "location": "northeurope",
        },
        {
            "id": arm_id("rg-web", "Microsoft.Insights/components", "appinsights"),
            "name": "appinsights",
            "type": "Microsoft.Insights/components",
            "location": "westeurope",
            "tags": None,
        },
    ]


@pytest.fixture
def subscription_info() -> dict[str, Any]:
    """`az account show` output."""
    return {
        "id": "sub-123",
        "name": "Contoso Production",
        "tenantId": "tenant-456",
        "user": {"name": "ops@contoso.co.uk", "type": "user"},
    }


@pytest.fixture
def cost_response() -> dict[str, Any]:
    """Cost Management response with three rows and no currency column."""
    return {
        "properties": {
            "columns": [
                {"name": "PreTaxCost", "type": "Number"},
                {"name": "UsageDate", "type": "Number"},
                {"name": "ServiceName", "type": "String"},
            ],
            "rows": [
                [12.5, "2024-01-01", "VM"],
                [7.5, "2024-01-01", "Storage"],
                [5.0, "2024-01-02", "VM"],
            ],
            "nextLink": None,
        }
    }
