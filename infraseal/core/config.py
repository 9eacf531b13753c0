"""InfraSeal runtime configuration and settings."""
import os
from dataclasses import dataclass
from typing import Optional

from infraseal.core.errors import ConfigurationError
from infraseal.core.state import MAX_STATE_DEPTH


@dataclass
class InfraSealConfig:
    """Runtime configuration for InfraSeal runs.

    Attributes:
        max_depth: Deepest state nesting accepted before input is rejected (default: 64)
        policy_file: Optional YAML policy with rules and thresholds
        log_file: Optional log file path
    """

    max_depth: int = MAX_STATE_DEPTH
    policy_file: Optional[str] = None
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "InfraSealConfig":
        """Create config from environment variables.

        Environment variables:
            INFRASEAL_MAX_DEPTH: Maximum state nesting depth
            INFRASEAL_POLICY: Path to a policy file
            INFRASEAL_LOG_FILE: Path to a log file

        Returns:
            InfraSealConfig instance with values from environment or defaults

        Raises:
            ConfigurationError: INFRASEAL_MAX_DEPTH is not an integer
        """
        raw_depth = os.getenv("INFRASEAL_MAX_DEPTH")
        try:
            max_depth = int(raw_depth) if raw_depth else cls.max_depth
        except ValueError as e:
            raise ConfigurationError(
                f"INFRASEAL_MAX_DEPTH must be an integer, got {raw_depth!r}"
            ) from e

        return cls(
            max_depth=max_depth,
            policy_file=os.getenv("INFRASEAL_POLICY") or None,
            log_file=os.getenv("INFRASEAL_LOG_FILE") or None,
        )


# Global config instance
_config: Optional[InfraSealConfig] = None


def get_config() -> InfraSealConfig:
    """Get global InfraSeal configuration.

    Returns:
        InfraSealConfig instance (loaded from environment on first call)
    """
    global _config
    if _config is None:
        _config = InfraSealConfig.from_env()
    return _config


def set_config(config: Optional[InfraSealConfig]) -> None:
    """Set the global InfraSeal configuration.

    Args:
        config: InfraSealConfig instance to use globally, or None to reload from environment
    """
    global _config
    _config = config
