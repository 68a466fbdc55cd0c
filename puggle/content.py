from __future__ import annotations

from pathlib import Path
from typing import Optional

import pydantic
import yaml

from .errors import EncodingError, FileNameError, MetadataDeserializeError
from .models import Metadata

FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = ("---", "...")
MARKDOWN_SUFFIX = ".md"


def slugify(text: str) -> str:
    """Anchor id for a heading: spaces become dashes, then lowercase and trim."""
    return text.replace(" ", "-").lower().strip()


def split_front_matter(lines: list[str]) -> tuple[Optional[str], list[str]]:
    """Split a leading YAML block off ``lines``.

    The block must open on the first line with ``---`` and close with ``---``
    or ``...``. Returns ``(None, lines)`` when there is no such block.
    """
    if not lines:
        return None, lines
    first = lines[0].lstrip("\ufeff")
    if first.rstrip() != FRONT_MATTER_OPEN:
        return None, lines

    end = None
    for i in range(1, len(lines)):
        if lines[i].rstrip() in FRONT_MATTER_CLOSE:
            end = i
            break
    if end is None:
        return None, lines

    return "\n".join(lines[1:end]), lines[end + 1 :]


def parse_metadata(text: str, path: Path) -> Metadata:
    """Deserialize captured front matter into :class:`Metadata`.

    ``file_name`` is left empty; the caller owns it.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MetadataDeserializeError(path, str(exc)) from exc
    try:
        return Metadata.model_validate(data)
    except pydantic.ValidationError as exc:
        raise MetadataDeserializeError(path, str(exc)) from exc


def file_stem(path: Path) -> str:
    stem = path.stem
    if not stem:
        raise FileNameError(path)
    return stem


def list_markdown_files(source_dir: Path) -> list[Path]:
    # Directory order as returned by the filesystem, not sorted.
    return [path for path in source_dir.iterdir() if path.is_file() and path.suffix == MARKDOWN_SUFFIX]


def read_markdown(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(path, str(exc)) from exc
