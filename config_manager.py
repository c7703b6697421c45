"""
Centralized configuration manager to avoid multiple Config instances.
"""
from typing import Optional

from core.config import Config

# Global config instance - loaded once
_config_instance = None
_config_path = "config.toml"


def get_config(config_file_path: Optional[str] = None) -> Config:
    """Get the global config instance, creating it only once."""
    global _config_instance, _config_path
    if config_file_path is not None and config_file_path != _config_path:
        _config_path = config_file_path
        _config_instance = None
    if _config_instance is None:
        _config_instance = Config(config_file_path=_config_path)
    return _config_instance


def refresh_config():
    """Force a refresh of the global config instance."""
    global _config_instance
    _config_instance = None
    return get_config()
