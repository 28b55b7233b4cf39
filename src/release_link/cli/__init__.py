"""Command line interface for release-link."""

from __future__ import annotations

from release_link.cli.app import app

__all__ = ["app"]
