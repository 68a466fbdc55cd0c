from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .config import CONFIG_NAMES
from .errors import PuggleError

logger = logging.getLogger(__name__)

WATCHED_NAMES = CONFIG_NAMES
WATCHED_SUFFIXES = (".md",)
HANDLED_EVENTS = ("created", "modified", "deleted", "moved")


def should_rebuild(path) -> bool:
    if not path:
        return False
    path = Path(os.fsdecode(path))
    return path.name in WATCHED_NAMES or path.suffix in WATCHED_SUFFIXES


class RebuildHandler(FileSystemEventHandler):
    def __init__(self, callback: Callable[[], object]):
        super().__init__()
        self._callback = callback

    def _regenerate(self, path) -> None:
        logger.info("Change detected in: %s", os.fsdecode(path))
        start = time.perf_counter()
        try:
            self._callback()
        except (PuggleError, OSError) as exc:
            logger.error("Rebuild failed: %s", exc)
            return
        logger.info("Regenerated in %.3fs", time.perf_counter() - start)

    def on_any_event(self, event):
        if event.event_type not in HANDLED_EVENTS:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        changed = [path for path in paths if should_rebuild(path)]
        if changed:
            self._regenerate(changed[-1])
        else:
            logger.debug("Skipping: %s", os.fsdecode(event.src_path))


def watch(root: Path, callback: Callable[[], object]) -> Observer:
    """Start a recursive observer on ``root`` that calls ``callback`` on relevant changes."""
    observer = Observer()
    observer.schedule(RebuildHandler(callback), str(root), recursive=True)
    observer.start()
    logger.info("Watching %s for changes", root)
    return observer
