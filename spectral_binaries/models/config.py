"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

NPM_NAME_PATTERN = re.compile(r"^(?:@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")


class PackagerConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Upstream project
    owner: str = "stoplightio"
    repo: str = "spectral"
    api_base_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"
    github_token: str = Field(default="", repr=False)

    # Generated package
    package_name: str = "spectral-binaries"
    display_name: str = "Spectral"
    repository_url: str = "https://github.com/PixnBits/spectral-binaries"
    output_dir: str = "dist"

    # Download Settings
    max_concurrent_downloads: int = 1
    max_redirects: int = 5
    connect_timeout: float = 15.0
    read_timeout: float = 90.0

    # Behaviour
    strict: bool = False

    @field_validator("owner", "repo", "display_name", "output_dir")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Value cannot be empty.")
        return v

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        """Ensures the generated manifest carries a publishable npm name."""
        if not NPM_NAME_PATTERN.match(v) or len(v) > 214:
            raise ValueError(f"'{v}' is not a valid npm package name.")
        return v

    @field_validator("api_base_url", "raw_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must be http(s), got: {v}")
        return v.rstrip("/")

    @field_validator("max_concurrent_downloads")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Ensures a reasonable number of simultaneous downloads."""
        if v < 1 or v > 16:
            raise ValueError("Concurrent downloads must be between 1 and 16.")
        return v

    @field_validator("max_redirects")
    @classmethod
    def validate_redirects(cls, v: int) -> int:
        if v < 0 or v > 20:
            raise ValueError("Max redirects must be between 0 and 20.")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
