"""CI environment detection.

The environment is passed in explicitly so callers (and tests) decide where
it comes from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class CIEnvironment:
    """A recognized CI provider."""

    name: str


def detect_ci_environment(environ: Mapping[str, str]) -> CIEnvironment | None:
    """Detect the CI provider from environment variables.

    Args:
        environ: Environment mapping, usually ``os.environ``

    Returns:
        The detected provider, or None outside a recognized CI
    """
    if environ.get("GITHUB_ACTIONS") == "true":
        return CIEnvironment("github-actions")
    if environ.get("GITLAB_CI") == "true":
        return CIEnvironment("gitlab-ci")
    if environ.get("CIRCLECI") == "true":
        return CIEnvironment("circleci")
    if environ.get("BUILD_TAG", "").startswith("jenkins-"):
        return CIEnvironment("jenkins")
    if environ.get("TRAVIS") == "true":
        return CIEnvironment("travis-ci")
    if environ.get("TF_BUILD") == "True":
        return CIEnvironment("azure-pipelines")
    if environ.get("BUILDKITE") == "true":
        return CIEnvironment("buildkite")
    if environ.get("TEAMCITY_VERSION"):
        return CIEnvironment("teamcity")
    if environ.get("CI") == "true":
        return CIEnvironment("ci")
    return None
