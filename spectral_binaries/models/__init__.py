"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application: upstream releases and their
assets, configuration and run statistics.
"""

from .config import PackagerConfig
from .release import Asset, Release
from .stats import RunStats

__all__ = ["Asset", "PackagerConfig", "Release", "RunStats"]
