"""
Pydantic models for the upstream GitHub release listing.

Field aliases match the GitHub REST API payloads, so a listing entry can be
validated directly with `Release.model_validate(entry)`.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

LATEST = "latest"


class Asset(BaseModel):
    """A single downloadable binary attached to a release."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    download_url: str = Field(alias="browser_download_url")
    size: int = Field(ge=0)


class Release(BaseModel):
    """A published, tagged upstream release and its assets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tag: str = Field(alias="tag_name")
    name: str = ""
    body: str = ""
    html_url: str
    assets: tuple[Asset, ...] = ()

    @field_validator("name", "body", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        """GitHub sends `null` for releases without a title or notes."""
        return v or ""

    @property
    def display_name(self) -> str:
        """The release title, falling back to its tag."""
        return self.name or self.tag
