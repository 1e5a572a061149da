"""
Configuration loading and environment variable resolution.
"""

from vaultsync.config.loader import SyncConfig, load_config
from vaultsync.config.resolver import resolve_config

__all__ = ["SyncConfig", "load_config", "resolve_config"]
