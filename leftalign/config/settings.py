#!/usr/bin/env python3
"""
Left-alignment configuration module

Holds the tunable parameters of batch normalization and loads them from
dictionaries or JSON files
"""

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, Union


@dataclass
class LeftAlignConfig:
    """
    Left-alignment configuration data class

    Attributes:
        max_iterations: Changing passes allowed before an alignment is reported
            as not converged
        uppercase: Fold read and reference to upper case before comparing bases
            (soft-masked references)
        skip_unchanged_records: Leave alignments that did not change out of exported tables
    """
    max_iterations: int = 20
    uppercase: bool = True
    skip_unchanged_records: bool = False

    def __post_init__(self):
        """Validate configuration parameters"""
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            raise ValueError(f"max_iterations must be an integer, got {self.max_iterations!r}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {self.max_iterations}")

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'LeftAlignConfig':
        """Load configuration from dictionary"""
        known = {f.name for f in fields(cls)}
        unknown = set(config_data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}. Supported keys: {sorted(known)}")
        return cls(**config_data)

    @classmethod
    def from_json(cls, config_file: Union[str, Path]) -> 'LeftAlignConfig':
        """Load configuration from JSON file"""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file does not exist: {config_file}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)

        return cls.from_dict(config_data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        """Return configuration summary"""
        lines = ["=== Left-alignment Configuration ==="]
        for key, value in self.to_dict().items():
            lines.append(f"{key}: {value}")
        return "\n".join(lines)


DEFAULT_CONFIG_FILE = Path(__file__).parent / "data" / "default.json"

# Loaded on first access
_DEFAULT_CONFIG: Optional[LeftAlignConfig] = None


def get_default_config() -> LeftAlignConfig:
    """Get the packaged default configuration (lazy loading)"""
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None:
        try:
            _DEFAULT_CONFIG = LeftAlignConfig.from_json(DEFAULT_CONFIG_FILE)
        except FileNotFoundError:
            _DEFAULT_CONFIG = LeftAlignConfig()
    # Callers may tweak their copy
    return LeftAlignConfig(**_DEFAULT_CONFIG.to_dict())


def load_config(config: Union[None, str, Path, Dict[str, Any], LeftAlignConfig] = None) -> LeftAlignConfig:
    """
    Resolve a configuration argument

    Args:
        config: None for defaults, a LeftAlignConfig, a dictionary, or a JSON file path

    Returns:
        LeftAlignConfig: Resolved configuration
    """
    if config is None:
        return get_default_config()
    if isinstance(config, LeftAlignConfig):
        return config
    if isinstance(config, dict):
        return LeftAlignConfig.from_dict(config)
    return LeftAlignConfig.from_json(config)
