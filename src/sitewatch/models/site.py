from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Site(BaseModel):
    """Single monitored page from sites.json."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    url: str  # Plaintext, or base64 ciphertext when ``encrypted`` is set
    encrypted: bool = False
    selector: str | None = None
    exclude_selectors: tuple[str, ...] = ()
    description: str = ""

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not re.match(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$", v):
            raise ValueError(f"Invalid site ID: {v!r}")
        return v

    @field_validator("exclude_selectors", mode="before")
    @classmethod
    def null_excludes_mean_none(cls, v: object) -> object:
        return () if v is None else v

    @field_validator("selector")
    @classmethod
    def blank_selector_means_whole_page(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class SitesFile(BaseModel):
    """Top-level shape of sites.json."""

    sites: list[Site]

    @model_validator(mode="after")
    def ids_are_unique(self) -> SitesFile:
        seen: set[str] = set()
        for site in self.sites:
            if site.id in seen:
                raise ValueError(f"Duplicate site ID: {site.id!r}")
            seen.add(site.id)
        return self
