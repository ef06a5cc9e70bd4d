"""Accessor configuration loaded from environment variables.

All configuration values have sensible defaults except the region,
which has none and must be supplied.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range.  This catches bad configuration at startup
    instead of on the first remote call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ros_state.core.constants import (
    DEFAULT_ENDPOINT,
    IGNORED_TAG_PREFIXES,
    ROS_API_VERSION,
)
from ros_state.core.exceptions import ValidationError


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class RosConfig:
    """Immutable accessor configuration.

    Loaded once and shared read-only by every ``RosService`` call.

    Attributes:
        region_id: Region every request is scoped to (``RegionId``).
        endpoint: ROS endpoint host, without scheme.
        api_version: RPC API version.
        access_key_id: Credential id used to sign requests.
        access_key_secret: Credential secret used to sign requests.
        http_timeout_s: Per-request HTTP timeout in seconds.
        use_https: Whether to call the endpoint over TLS.
        ignored_tag_prefixes: Tag key prefixes that are never removed.
    """

    region_id: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    api_version: str = ROS_API_VERSION
    access_key_id: str = ""
    access_key_secret: str = ""
    http_timeout_s: float = 30.0
    use_https: bool = True
    ignored_tag_prefixes: tuple[str, ...] = IGNORED_TAG_PREFIXES

    @property
    def base_url(self) -> str:
        """Return the endpoint URL including scheme."""
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.endpoint}/"

    @classmethod
    def from_env(cls) -> RosConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required value is empty.
            ValueError: If ``ROS_HTTP_TIMEOUT_S`` cannot be parsed.
        """
        prefixes = os.getenv("ROS_IGNORED_TAG_PREFIXES")
        config = cls(
            region_id=os.getenv("ALIBABA_CLOUD_REGION_ID") or os.getenv("ALICLOUD_REGION", ""),
            endpoint=os.getenv("ROS_ENDPOINT", DEFAULT_ENDPOINT),
            api_version=os.getenv("ROS_API_VERSION", ROS_API_VERSION),
            access_key_id=os.getenv("ALIBABA_CLOUD_ACCESS_KEY_ID", ""),
            access_key_secret=os.getenv("ALIBABA_CLOUD_ACCESS_KEY_SECRET", ""),
            http_timeout_s=float(os.getenv("ROS_HTTP_TIMEOUT_S", "30")),
            use_https=os.getenv("ROS_USE_HTTPS", "true").strip().lower() not in {"0", "false", "no"},
            ignored_tag_prefixes=(
                tuple(p.strip() for p in prefixes.split(",") if p.strip())
                if prefixes is not None
                else IGNORED_TAG_PREFIXES
            ),
        )
        _validate(config)
        return config


def _validate(config: RosConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.region_id:
        raise ConfigValidationError(
            "ALIBABA_CLOUD_REGION_ID",
            config.region_id,
            "must not be empty",
        )

    if not config.endpoint:
        raise ConfigValidationError("ROS_ENDPOINT", config.endpoint, "must not be empty")

    if "://" in config.endpoint:
        raise ConfigValidationError(
            "ROS_ENDPOINT",
            config.endpoint,
            "must be a host name without scheme",
        )

    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "ROS_HTTP_TIMEOUT_S",
            config.http_timeout_s,
            "must be > 0 (seconds)",
        )
