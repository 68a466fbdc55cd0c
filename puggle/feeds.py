from __future__ import annotations

import html
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models import Metadata
from .render import write_text
from .templates import TemplateHandle
from .utils import join_url, rfc822_date

RSS_NAMESPACES = (
    'xmlns:atom="http://www.w3.org/2005/Atom" '
    'xmlns:content="http://purl.org/rss/1.0/modules/content/"'
)
FEED_LANGUAGE = "en"


@dataclass
class RssItem:
    title: str
    link: str
    guid: str
    content: str
    description: Optional[str] = None
    author: Optional[str] = None
    pub_date: Optional[str] = None
    guid_is_permalink: bool = False


@dataclass
class RssFeed:
    title: str
    description: str = ""
    items: list[RssItem] = field(default_factory=list)


def cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def build_rss_item(
    templates: TemplateHandle, base_url: str, metadata: Metadata, html_partial: str
) -> RssItem:
    # Links join the bare file stem onto base_url, not "<page>/<stem>".
    page_url = join_url(base_url, metadata.file_name)
    content = templates.render_partial(html_partial, {"metadata": metadata})
    pub_date = rfc822_date(metadata.created_at) if metadata.created_at else None
    return RssItem(
        title=metadata.title,
        link=page_url,
        guid=page_url,
        content=content,
        description=metadata.summary,
        author=metadata.author_email,
        pub_date=pub_date,
    )


def render_item(item: RssItem) -> str:
    lines = [
        "<item>",
        f"<title>{html.escape(item.title)}</title>",
        f"<link>{html.escape(item.link)}</link>",
    ]
    if item.description is not None:
        lines.append(f"<description>{html.escape(item.description)}</description>")
    if item.author is not None:
        lines.append(f"<author>{html.escape(item.author)}</author>")
    permalink = "true" if item.guid_is_permalink else "false"
    lines.append(f'<guid isPermaLink="{permalink}">{html.escape(item.guid)}</guid>')
    if item.pub_date is not None:
        lines.append(f"<pubDate>{item.pub_date}</pubDate>")
    lines.append(f"<content:encoded>{cdata(item.content)}</content:encoded>")
    lines.append("</item>")
    return "\n".join(lines)


def render_rss(feed: RssFeed, base_url: str) -> str:
    """Serialize ``feed`` as an RSS 2.0 channel with an Atom self link to ``base_url``."""
    link = html.escape(base_url)
    parts = [
        '<?xml version="1.0" encoding="utf-8"?>',
        f'<rss version="2.0" {RSS_NAMESPACES}>',
        "<channel>",
        f"<title>{html.escape(feed.title)}</title>",
        f"<link>{link}</link>",
        f"<description>{html.escape(feed.description)}</description>",
        f"<language>{FEED_LANGUAGE}</language>",
        f'<atom:link href="{link}" rel="self"/>',
    ]
    parts.extend(render_item(item) for item in feed.items)
    parts.extend(["</channel>", "</rss>"])
    return "\n".join(parts)


def write_rss(dest_dir: Path, page_name: str, feed: RssFeed, base_url: str) -> Path:
    target = dest_dir / f"{page_name}.rss"
    write_text(target, render_rss(feed, base_url))
    return target
