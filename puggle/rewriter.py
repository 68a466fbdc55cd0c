from __future__ import annotations

import html
import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import markdown
from markdown.extensions import Extension
from markdown.extensions.toc import render_inner_html, strip_tags
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from pymdownx.superfences import (
    SuperFencesBlockPreprocessor,
    SuperFencesCodeExtension,
    SuperFencesRawBlockPreprocessor,
)

from .content import parse_metadata, slugify, split_front_matter
from .models import Metadata
from .utils import join_url

FOLD_START = "### FOLD_START"
FOLD_END = "### FOLD_END"
FOLD_OPEN = '<details><summary class="foldable">'
DIFF_ADDED_SPAN = '<span style="background: green; color: white;">'
DIFF_REMOVED_SPAN = '<span style="background: red; color: white;">'
PLAIN_SPAN = "<span>"
LINE_END = "</span>\n"
EMPTY_LINE = PLAIN_SPAN + LINE_END
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Characters left as-is in a URL fragment; everything else is percent-encoded.
FRAGMENT_SAFE = "!$&'()*+,-./:;=?@_~"

# Priorities superfences registers its preprocessors with.
RAW_FENCE_PRIORITY = 31.05
FENCE_PRIORITY = 25

MARKDOWN_EXTENSIONS = [
    "footnotes",
    "tables",
    "smarty",
    "wikilinks",
    "pymdownx.tilde",
    "pymdownx.caret",
    "pymdownx.tasklist",
    "pymdownx.arithmatex",
]
EXTENSION_CONFIGS = {"pymdownx.arithmatex": {"generic": True}}


def render_code_block(code: str, lang: Optional[str]) -> str:
    """Render the body of a fenced block as ``<pre><code>`` with one span per line.

    ``### FOLD_START`` / ``### FOLD_END`` marker lines wrap the lines between
    them in a ``<details>`` element whose summary is the first folded line.
    In ``diff`` blocks, added and removed lines get coloured spans.
    """
    parts = ["<pre><code>"]
    folded = False
    folded_summary = False

    for line in code.split("\n"):
        if line.startswith(FOLD_START):
            parts.append(FOLD_OPEN)
            folded = True
            folded_summary = True
            continue
        if line.startswith(FOLD_END):
            parts.append("</details>")
            folded = False
            continue
        if folded and folded_summary:
            if line.startswith(" "):
                line = line[1:]
            parts.append(html.escape(line, quote=False))
            parts.append("</summary>")
            folded_summary = False
            continue

        if lang == "diff" and line.startswith("+"):
            parts.append(DIFF_ADDED_SPAN)
        elif lang == "diff" and line.startswith("-"):
            parts.append(DIFF_REMOVED_SPAN)
        else:
            parts.append(PLAIN_SPAN)
        parts.append(html.escape(line, quote=False))
        parts.append(LINE_END)

    block = "".join(parts)
    while block.endswith(EMPTY_LINE):
        block = block[: -len(EMPTY_LINE)]
    return block + "</code></pre>"


def format_code_fence(src, language, class_name, options, md, **kwargs):
    return render_code_block(src, language or None)


def accept_code_fence(language, inputs, options, attrs, md):
    # Info-string options and attributes are ignored, never rejected.
    return True


class LongClosingFenceMixin:
    """Let a closing fence be longer than the fence that opened the block."""

    _fence_end = None

    @property
    def fence_end(self):
        return self._fence_end

    @fence_end.setter
    def fence_end(self, pattern):
        if pattern is not None and self.fence:
            marker = re.escape(self.fence[0])
            pattern = re.compile(rf"{re.escape(self.fence)}{marker}*[ \t]*$")
        self._fence_end = pattern


class CodeFencePreprocessor(LongClosingFenceMixin, SuperFencesBlockPreprocessor):
    pass


class RawCodeFencePreprocessor(LongClosingFenceMixin, SuperFencesRawBlockPreprocessor):
    pass


class CodeFenceExtension(SuperFencesCodeExtension):
    """superfences with every fence, whatever its language, rendered by :func:`render_code_block`."""

    def __init__(self, **kwargs):
        kwargs.setdefault(
            "custom_fences",
            [
                {
                    "name": "*",
                    "class": "puggle-code",
                    "format": format_code_fence,
                    "validator": accept_code_fence,
                }
            ],
        )
        kwargs.setdefault("preserve_tabs", True)
        kwargs.setdefault("relaxed_headers", True)
        super().__init__(**kwargs)

    def patch_fenced_rule(self):
        super().patch_fenced_rule()
        replacements = [
            ("fenced_code_block", CodeFencePreprocessor, FENCE_PRIORITY),
            ("fenced_raw_block", RawCodeFencePreprocessor, RAW_FENCE_PRIORITY),
        ]
        for name, cls, priority in replacements:
            if name not in self.md.preprocessors:
                continue
            fenced = cls(self.md)
            fenced.config = self.md.preprocessors[name].config
            fenced.extension = self
            self.md.preprocessors.register(fenced, name, priority)


class FrontMatterPreprocessor(Preprocessor):
    def run(self, lines):
        front_matter, body = split_front_matter(lines)
        if front_matter is not None:
            self.md.front_matter = front_matter
        return body


class HeadingTreeprocessor(Treeprocessor):
    def __init__(self, md, base_url: str, page_path: str):
        super().__init__(md)
        self.base_url = base_url
        self.page_path = page_path

    def run(self, root):
        headings = [el for el in root.iter() if el.tag in HEADING_TAGS]
        for el in headings:
            self.rewrite(el)

    def rewrite(self, el: etree.Element) -> None:
        # Inline code and emphasis collapse to their plain text.
        text = html.unescape(strip_tags(render_inner_html(el, self.md)))
        tail = el.tail
        el.clear()
        el.tail = tail

        if el.tag == "h1":
            el.text = text
            return

        slug = slugify(text)
        el.set("id", slug)
        anchor = etree.SubElement(el, "a")
        fragment = quote(slug, safe=FRAGMENT_SAFE)
        anchor.set("href", f"{join_url(self.base_url, self.page_path)}#{fragment}")
        anchor.text = text


class PuggleExtension(Extension):
    def __init__(self, base_url: str, page_path: str, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url
        self.page_path = page_path
        self.md = None

    def extendMarkdown(self, md):
        md.registerExtension(self)
        self.md = md
        md.front_matter = None
        md.preprocessors.register(FrontMatterPreprocessor(md), "front_matter", 27)
        md.treeprocessors.register(
            HeadingTreeprocessor(md, self.base_url, self.page_path),
            "puggle_headings",
            5,
        )

    def reset(self):
        if self.md is not None:
            self.md.front_matter = None


@dataclass
class ParsedDocument:
    metadata: Optional[Metadata]
    html: str


def make_markdown(base_url: str, page_path: str) -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[
            PuggleExtension(base_url=base_url, page_path=page_path),
            CodeFenceExtension(),
            *MARKDOWN_EXTENSIONS,
        ],
        extension_configs=EXTENSION_CONFIGS,
    )


def parse(text: str, base_url: str, page_path: str, source: Path) -> ParsedDocument:
    """Convert one Markdown document into an HTML partial plus its metadata.

    ``page_path`` is ``"<page name>/<entry stem>"`` and is joined onto
    ``base_url`` to build heading self-links. ``source`` only appears in
    error messages.
    """
    md = make_markdown(base_url, page_path)
    html_partial = md.convert(text)
    metadata = None
    if md.front_matter is not None:
        metadata = parse_metadata(md.front_matter, source)
    return ParsedDocument(metadata=metadata, html=html_partial)
