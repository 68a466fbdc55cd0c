from __future__ import annotations

import html
import logging
from pathlib import Path, PurePosixPath

from .content import file_stem, read_markdown
from .errors import AliasError, MetadataMissingError, ParentError
from .models import Config, Metadata
from .rewriter import parse
from .templates import TemplateHandle

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"

REDIRECT_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>{0}</title>
    <link rel="canonical" href="/{1}"/>
    <meta http-equiv="content-type" content="text/html; charset=utf-8"/>
    <meta http-equiv="refresh" content="0; url=/{1}"/>
  </head>
  <body>
    If you aren't redirected, you can manually click this link:
    <a href="/{1}">/{1}</a>.
  </body>
</html>"""


def write_text(path: Path, text: str) -> None:
    parent = path.parent
    if parent == path:
        raise ParentError(path)
    if not parent.exists():
        parent.mkdir(parents=True)
    path.write_text(text, encoding="utf-8")


def redirect_html(title: str, canonical_path: str) -> str:
    return REDIRECT_TEMPLATE.format(html.escape(title), canonical_path)


def alias_dir(page_dir: Path, alias: str, stem: str, source: Path) -> Path:
    alias_path = PurePosixPath(alias)
    if alias_path.is_absolute() or ".." in alias_path.parts:
        raise AliasError(source, alias, "aliases must be relative to the page directory")
    if not alias_path.parts:
        raise AliasError(source, alias, "alias is empty")
    if alias_path.parts == (stem,):
        raise AliasError(source, alias, "alias would overwrite the entry itself")
    return page_dir.joinpath(*alias_path.parts)


def write_aliases(config: Config, page_name: str, stem: str, metadata: Metadata, source: Path) -> None:
    if not metadata.aliases:
        return
    page_dir = config.dest_dir / page_name
    stub = redirect_html(metadata.title, f"{page_name}/{stem}")
    for alias in metadata.aliases:
        target = alias_dir(page_dir, alias, stem, source) / INDEX_FILE
        write_text(target, stub)
        logger.debug("Wrote alias %s -> %s/%s", target, page_name, stem)


def render_entry(
    markdown_path: Path,
    page_name: str,
    template_path: Path,
    config: Config,
    templates: TemplateHandle,
) -> tuple[Metadata, str]:
    """Render one Markdown file to ``<dest_dir>/<page>/<stem>/index.html``.

    Returns the entry's metadata and its HTML partial (the converted Markdown
    before it is wrapped in ``template_path``).
    """
    stem = file_stem(markdown_path)
    text = read_markdown(markdown_path)
    parsed = parse(text, config.site_url, f"{page_name}/{stem}", markdown_path)

    if parsed.metadata is None:
        raise MetadataMissingError(markdown_path)
    metadata = parsed.metadata
    metadata.file_name = stem

    page_html = templates.render_wrapped(parsed.html, template_path, {"metadata": metadata})
    write_text(config.dest_dir / page_name / stem / INDEX_FILE, page_html)
    write_aliases(config, page_name, stem, metadata, markdown_path)

    logger.info("Rendered %s -> %s/%s", markdown_path, page_name, stem)
    return metadata, parsed.html
