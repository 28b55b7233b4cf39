"""release-link: link commits to issues and pull requests for a release."""

from __future__ import annotations

__version__ = "0.1.0"
