"""
GitHub API Layer.

This package handles all communication with the upstream project's release
listing and raw file hosting.
"""

from .client import GitHubReleasesClient

__all__ = ["GitHubReleasesClient"]
