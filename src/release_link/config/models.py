"""Configuration models for release-link.

Configuration lives in ``[tool.release-link]`` of ``pyproject.toml``:

    [tool.release-link]
    base_sha = "4f2c1e9"

    [tool.release-link.scan]
    include_paths = ["apps/web/**", "packages/**"]

    [tool.release-link.git]
    remote = "origin"
    deepen_steps = [200, 500]
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitConfig(BaseModel):
    """How commits are fetched when the base commit is missing locally."""

    model_config = ConfigDict(extra="forbid")

    remote: str = "origin"
    deepen_steps: list[int] = Field(default_factory=lambda: [200, 500])
    unshallow: bool = True

    @field_validator("deepen_steps")
    @classmethod
    def _positive_steps(cls, value: list[int]) -> list[int]:
        if any(step <= 0 for step in value):
            raise ValueError("deepen_steps must be positive integers")
        return value


class ScanConfig(BaseModel):
    """Which commits are scanned."""

    model_config = ConfigDict(extra="forbid")

    include_paths: list[str] = Field(default_factory=list)

    @field_validator("include_paths")
    @classmethod
    def _strip_blank(cls, value: list[str]) -> list[str]:
        return [path.strip() for path in value if path.strip()]


class ReleaseLinkConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    base_sha: str | None = None
    git: GitConfig = Field(default_factory=GitConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)

    def effective_include_paths(self, cli_paths: list[str] | None) -> list[str] | None:
        """Paths given on the command line take precedence over configured ones."""
        if cli_paths:
            return cli_paths
        return self.scan.include_paths or None
