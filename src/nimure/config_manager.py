"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores Azure scoping, cache TTL, rate limiting and cost display preferences.

Security:
- Config file permissions: 0600 (owner read/write only)
- Path validation
- Atomic writes through a temporary file
"""

import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from nimure.errors import ConfigError

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for interpreters that ship tomllib
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000
MIN_TIMEOUT_MS = 1000


@dataclass
class AzureSettings:
    """Azure CLI scoping options."""

    subscription_id: str | None = None  # None uses the CLI's current subscription
    resource_groups: list[str] = field(default_factory=list)  # empty lists all groups
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass
class CacheSettings:
    """In-process cache options."""

    ttl_seconds: int = 300
    auto_cleanup: bool = True


@dataclass
class RateLimitSettings:
    """Client-side rate limiting for Azure CLI calls."""

    enabled: bool = True
    min_interval_ms: int = 1000
    max_requests_per_minute: int = 20


@dataclass
class CostSettings:
    """Cost analysis and chart options."""

    enabled: bool = True
    default_period_days: int = 30
    show_daily_chart: bool = True
    show_service_breakdown: bool = True


@dataclass
class AzureADSettings:
    """Directory object (app registrations, users, groups, roles) options."""

    enabled: bool = True


@dataclass
class NimureConfig:
    """nimure configuration data."""

    azure: AzureSettings = field(default_factory=AzureSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    rate_limiting: RateLimitSettings = field(default_factory=RateLimitSettings)
    costs: CostSettings = field(default_factory=CostSettings)
    azure_ad: AzureADSettings = field(default_factory=AzureADSettings)
    debug: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        # TOML has no null
        data["azure"] = {k: v for k, v in data["azure"].items() if v is not None}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NimureConfig":
        """Create from dictionary, ignoring unknown keys."""

        def section(section_cls: type, name: str) -> Any:
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigError(f"Config section [{name}] must be a table")
            known = section_cls.__dataclass_fields__
            return section_cls(**{k: v for k, v in values.items() if k in known})

        config = cls(
            azure=section(AzureSettings, "azure"),
            cache=section(CacheSettings, "cache"),
            rate_limiting=section(RateLimitSettings, "rate_limiting"),
            costs=section(CostSettings, "costs"),
            azure_ad=section(AzureADSettings, "azure_ad"),
            debug=bool(data.get("debug", False)),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Replace invalid values with defaults, warning about each one."""
        if not isinstance(self.azure.timeout_ms, int) or self.azure.timeout_ms < MIN_TIMEOUT_MS:
            logger.warning(f"Invalid Azure timeout. Using {DEFAULT_TIMEOUT_MS}ms")
            self.azure.timeout_ms = DEFAULT_TIMEOUT_MS

        if not isinstance(self.cache.ttl_seconds, int) or self.cache.ttl_seconds <= 0:
            logger.warning("Invalid cache TTL. Using 300s")
            self.cache.ttl_seconds = 300

        if not isinstance(self.rate_limiting.min_interval_ms, int) or self.rate_limiting.min_interval_ms < 0:
            logger.warning("Invalid rate limiting interval. Using 1000ms")
            self.rate_limiting.min_interval_ms = 1000

        if (
            not isinstance(self.rate_limiting.max_requests_per_minute, int)
            or self.rate_limiting.max_requests_per_minute <= 0
        ):
            logger.warning("Invalid rate limiting max requests. Using 20/minute")
            self.rate_limiting.max_requests_per_minute = 20

        if not isinstance(self.costs.default_period_days, int) or self.costs.default_period_days <= 0:
            logger.warning("Invalid default cost period. Using 30 days")
            self.costs.default_period_days = 30

    def apply_environment(self) -> "NimureConfig":
        """Apply environment variable overrides in place.

        Environment variables (all optional):
            NIMURE_SUBSCRIPTION_ID: Subscription to query
            NIMURE_CACHE_TTL: Cache TTL in seconds
            NIMURE_RATE_LIMITING: Enable rate limiting (true/false)
            NIMURE_DEBUG: Enable debug logging (true/false)

        Returns:
            self, for chaining
        """
        if subscription_id := os.getenv("NIMURE_SUBSCRIPTION_ID"):
            self.azure.subscription_id = subscription_id

        if ttl := os.getenv("NIMURE_CACHE_TTL"):
            try:
                self.cache.ttl_seconds = int(ttl)
            except ValueError as e:
                raise ConfigError(f"NIMURE_CACHE_TTL must be an integer, got {ttl!r}") from e

        if rate_limiting := os.getenv("NIMURE_RATE_LIMITING"):
            self.rate_limiting.enabled = rate_limiting.lower() == "true"

        if debug := os.getenv("NIMURE_DEBUG"):
            self.debug = debug.lower() == "true"

        self.validate()
        return self


class ConfigManager:
    """Manage nimure configuration file.

    Configuration is stored at ~/.nimure/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".nimure"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def _validate_config_path(cls, path: Path) -> Path:
        """Validate configuration file path for security.

        Args:
            path: Path to validate

        Returns:
            Resolved path

        Raises:
            ConfigError: If path is outside allowed directories
        """
        resolved_path = path.resolve()

        allowed_dirs = [
            cls.DEFAULT_CONFIG_DIR.resolve(),
            Path.cwd().resolve(),
            Path(tempfile.gettempdir()).resolve(),
        ]

        for allowed_dir in allowed_dirs:
            try:
                resolved_path.relative_to(allowed_dir)
                return resolved_path
            except ValueError:
                continue

        raise ConfigError(
            f"Config path outside allowed directories: {resolved_path}\n"
            f"Allowed directories:\n"
            f"  - {cls.DEFAULT_CONFIG_DIR}\n"
            f"  - {Path.cwd()}"
        )

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If path is invalid or outside allowed directories
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            return cls._validate_config_path(path)

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> NimureConfig:
        """Load configuration from file.

        Missing files are not an error: defaults are returned.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            NimureConfig object

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return NimureConfig()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)  # type: ignore[attr-defined]
        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return NimureConfig.from_dict(data)

    @classmethod
    def save_config(cls, config: NimureConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Existing comments and formatting are preserved.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If saving fails
        """
        config_path = cls.get_config_path(custom_path)
        temp_path = config_path.with_suffix(".tmp")

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()

            # top-level scalars must precede tables
            items = sorted(config.to_dict().items(), key=lambda item: isinstance(item[1], dict))
            for key, value in items:
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e


__all__ = [
    "AzureADSettings",
    "AzureSettings",
    "CacheSettings",
    "ConfigManager",
    "CostSettings",
    "NimureConfig",
    "RateLimitSettings",
]
