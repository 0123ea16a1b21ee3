#!/usr/bin/env python3

"""
Configuration management for the assembly patcher.

Centralized run configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import yaml

from .exceptions import ConfigurationError

OVERLAP_POLICIES = ('earliest', 'longest')


@dataclass
class PatcherConfig:
    """Centralized configuration for a patching run."""

    # Tie-break for accepted blocks overlapping in query space
    overlap_policy: str = 'earliest'

    # Performance settings
    memory_limit_mb: int = 4096
    batch_size: int = 1000  # contigs between memory checks
    enable_memory_monitoring: bool = True

    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'PatcherConfig':
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PatcherConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PatcherConfig':
        """Load configuration from environment variables."""
        config = cls()

        env_mappings = {
            'PATCHER_OVERLAP_POLICY': ('overlap_policy', str),
            'PATCHER_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'PATCHER_BATCH_SIZE': ('batch_size', int),
            'PATCHER_DEBUG_MODE': ('debug_mode', lambda x: x.lower() in ('true', '1', 'yes')),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.overlap_policy not in OVERLAP_POLICIES:
            raise ConfigurationError(
                f"overlap_policy must be one of {', '.join(OVERLAP_POLICIES)}"
            )

        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PatcherConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PatcherConfig: Loaded configuration
    """
    config = PatcherConfig()

    if use_env:
        env_config = PatcherConfig.from_env()
        # Merge non-default values from environment
        for field_name in PatcherConfig.__dataclass_fields__.keys():
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    if config_path:
        file_config = PatcherConfig.from_file(config_path)
        for field_name in PatcherConfig.__dataclass_fields__.keys():
            setattr(config, field_name, getattr(file_config, field_name))

    return config
