"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from typing import List, Optional


class SpectralBinariesError(Exception):
    """Base exception for all application-specific errors."""


class TransportError(SpectralBinariesError):
    """Raised when a request fails at the connection level (refused, reset, timed out)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"request to {url} failed: {reason}")


class UnexpectedStatusError(SpectralBinariesError):
    """Raised for a response that is neither a success nor a followable redirect."""

    def __init__(self, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(f"{status} for {url}")


class RedirectLimitExceededError(SpectralBinariesError):
    """Raised when a download keeps redirecting past the configured hop limit."""

    def __init__(self, status: int, url: str, hops: int):
        self.status = status
        self.url = url
        self.hops = hops
        super().__init__(
            f"{status} for {url}, but exceeded maximum redirect count ({hops} hops)"
        )


class SizeMismatchError(SpectralBinariesError):
    """Raised when the received byte count differs from the asset's declared size."""

    def __init__(self, expected: int, actual: Optional[int], url: str):
        self.expected = expected
        self.actual = actual
        self.url = url
        super().__init__(f"expecting {expected} bytes for {url}, got {actual}")


class ListingFetchError(SpectralBinariesError):
    """Raised when a release listing page answers with an unusable status."""

    def __init__(self, page: int, status: int):
        self.page = page
        self.status = status
        super().__init__(
            f"release page {page} had a response status {status}, "
            "cannot find remaining versions"
        )


class MissingArgumentsError(SpectralBinariesError):
    """Raised when no version identifiers were supplied to a multi-version build."""


class ConfigurationError(SpectralBinariesError):
    """Raised for issues related to configuration loading or validation."""


class MaterializationError(SpectralBinariesError):
    """
    Raised when one or more units of work for a release (manifest, readme or
    an asset download) failed. Every underlying failure is kept in `failures`.
    """

    def __init__(self, tag: str, failures: List[BaseException]):
        self.tag = tag
        self.failures = failures
        details = "; ".join(f"{type(e).__name__}: {e}" for e in failures)
        super().__init__(
            f"{len(failures)} task(s) failed for release {tag}: {details}"
        )


class UnresolvedVersionsError(SpectralBinariesError):
    """Raised in strict mode when requested versions were not found upstream."""

    def __init__(self, versions: List[str]):
        self.versions = versions
        super().__init__(f"no release found for: {', '.join(versions)}")
