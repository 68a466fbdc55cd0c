from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .content import list_markdown_files
from .feeds import RssFeed, build_rss_item, write_rss
from .models import Config, DirEntry, Entry, Metadata, PageWithEntries, StandalonePage
from .render import INDEX_FILE, render_entry, write_text
from .templates import TemplateHandle

logger = logging.getLogger(__name__)

ListingIndex = dict[str, list[Metadata]]


def entry_files(entry: Entry) -> list[Path]:
    if isinstance(entry, DirEntry):
        return list_markdown_files(entry.source_dir)
    return [entry.markdown_path]


def build_entries(
    page: PageWithEntries,
    config: Config,
    templates: TemplateHandle,
    listing: ListingIndex,
    feeds: dict[str, RssFeed],
) -> None:
    """Render every entry of ``page``, recording metadata and feed items as it goes."""
    metadata_list: list[Metadata] = []
    listing.setdefault(page.name, [])

    for entry in page.entries:
        rss_items = []
        for markdown_path in entry_files(entry):
            metadata, html_partial = render_entry(
                markdown_path, page.name, entry.template_path, config, templates
            )
            if page.rss:
                rss_items.append(build_rss_item(templates, config.site_url, metadata, html_partial))
            metadata_list.append(metadata)

        listing[page.name] = list(metadata_list)

        if page.rss:
            feed = feeds.get(page.name)
            if feed is None:
                feed = RssFeed(title=page.rss_name or page.name, description=page.description or "")
                feeds[page.name] = feed
            feed.items.extend(rss_items)


def build_listing(
    page: Union[PageWithEntries, StandalonePage],
    config: Config,
    templates: TemplateHandle,
    listing: ListingIndex,
) -> Path:
    html_doc = templates.render_named(page.template_path, {"pages": listing})
    target = config.dest_dir / page.name / INDEX_FILE
    write_text(target, html_doc)
    logger.info("Rendered page %s", page.name)
    return target


def build_feeds(config: Config, feeds: dict[str, RssFeed]) -> None:
    for page_name, feed in feeds.items():
        target = write_rss(config.dest_dir, page_name, feed, config.site_url)
        logger.info("Wrote feed %s (%d items)", target, len(feed.items))


def build_site(config: Config) -> ListingIndex:
    """Run a full build and return the listing index the pages were rendered with.

    Entry-bearing pages are processed first so that every listing or
    standalone template sees the metadata of every entry. The first error
    aborts the build; files already written stay in place.
    """
    templates = TemplateHandle(config.templates_dir, base_url=config.site_url)
    listing: ListingIndex = {}
    feeds: dict[str, RssFeed] = {}

    for page in config.pages:
        if isinstance(page, PageWithEntries):
            build_entries(page, config, templates, listing, feeds)

    for page in config.pages:
        build_listing(page, config, templates, listing)

    build_feeds(config, feeds)
    return listing
