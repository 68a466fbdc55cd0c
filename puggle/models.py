from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional, Union

import pydantic

COMPUTED_METADATA_FIELDS = ("unix_created_at", "unix_updated_at", "file_name")
DEFAULT_PREVIEW_PORT = 3000


class StrictModel(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid")


class DirEntry(StrictModel):
    """Every ``*.md`` file directly inside ``source_dir``."""

    source_dir: Path
    template_path: Path


class FileEntry(StrictModel):
    """A single Markdown file."""

    markdown_path: Path
    template_path: Path


Entry = Union[DirEntry, FileEntry]


class PageWithEntries(StrictModel):
    name: str
    description: Optional[str] = None
    rss: bool = False
    rss_name: Optional[str] = None
    template_path: Path
    entries: list[Entry]


class StandalonePage(StrictModel):
    name: str
    template_path: Path


Page = Union[PageWithEntries, StandalonePage]


class PreviewConfig(StrictModel):
    port: int = DEFAULT_PREVIEW_PORT


class Config(StrictModel):
    """Top-level ``puggle.yaml`` schema."""

    pages: list[Page]
    templates_dir: Path
    dest_dir: Path
    base_url: pydantic.HttpUrl
    preview: PreviewConfig = pydantic.Field(default_factory=PreviewConfig)

    @property
    def site_url(self) -> str:
        return str(self.base_url)


def unix_timestamp(value: Optional[dt.datetime]) -> Optional[int]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return int(value.timestamp())


class Metadata(pydantic.BaseModel):
    """Front matter of an entry.

    ``unix_created_at``, ``unix_updated_at`` and ``file_name`` are computed and
    never read from the front matter. ``file_name`` is filled in by the entry
    renderer with the stem of the source file.
    """

    title: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    unix_created_at: Optional[int] = None
    unix_updated_at: Optional[int] = None
    tags: list[str]
    file_name: str = ""
    cover: Optional[str] = None
    summary: Optional[str] = None
    aliases: Optional[list[str]] = None
    author_email: Optional[str] = None
    custom: Optional[dict[str, str]] = None

    @pydantic.model_validator(mode="before")
    @classmethod
    def drop_computed_fields(cls, data: object) -> object:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if key not in COMPUTED_METADATA_FIELDS}
        return data

    @pydantic.model_validator(mode="after")
    def fill_unix_timestamps(self) -> Metadata:
        self.unix_created_at = unix_timestamp(self.created_at)
        self.unix_updated_at = unix_timestamp(self.updated_at)
        return self
