"""Configuration management for release-link."""

from __future__ import annotations

from release_link.config.loader import load_config
from release_link.config.models import GitConfig, ReleaseLinkConfig, ScanConfig

__all__ = [
    "GitConfig",
    "ReleaseLinkConfig",
    "ScanConfig",
    "load_config",
]
