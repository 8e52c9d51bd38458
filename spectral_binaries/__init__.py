"""
spectral-binaries: repackages upstream GitHub release binaries as npm packages.
"""

__version__ = "0.3.0"
