"""
Configuration loader
"""
import os
import yaml
from pathlib import Path
from typing import Optional

from treasure_hunt.models import HuntConfig


DEFAULT_CONFIG_PATH = "config/hunt.yaml"


def load_config(config_path: Optional[str] = None) -> HuntConfig:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file (defaults to $HUNT_CONFIG, then config/hunt.yaml)

    Returns:
        HuntConfig object
    """
    path = Path(config_path or os.environ.get("HUNT_CONFIG", DEFAULT_CONFIG_PATH))

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    config = HuntConfig(**data)

    unknown = set(config.groups.offsets) - set(config.groups.names)
    if unknown:
        raise ValueError(f"Offsets configured for unknown groups: {sorted(unknown)}")
    if config.groups.required and not config.groups.names:
        raise ValueError("groups.required is set but no group names are configured")
    if config.groups.unique_per_group and not config.groups.required:
        raise ValueError("groups.unique_per_group needs groups.required, a team is identified by name and group")

    return config
