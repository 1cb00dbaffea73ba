"""
Configuration management.

Import from this package rather than the individual submodules.
"""

from __future__ import annotations

from ._storage import CONFIG_FILE
from .config import ClientConfig, get_client_config, reset_config, save_client_config

__all__ = [
    "CONFIG_FILE",
    "ClientConfig",
    "get_client_config",
    "reset_config",
    "save_client_config",
]
