"""
Configuration module - left-alignment parameters and their loading
"""

from .settings import LeftAlignConfig, get_default_config, load_config

__all__ = [
    'LeftAlignConfig',
    'get_default_config',
    'load_config'
]
