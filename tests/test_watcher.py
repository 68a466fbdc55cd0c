"""Unit tests for the rebuild watcher."""

import logging
import pathlib
from typing import Callable

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from puggle.errors import MetadataMissingError
from puggle.pages import build_site
from puggle.watcher import RebuildHandler, should_rebuild


class Recorder:
    def __init__(self, error: Exception = None):
        self.calls = 0
        self.error = error

    def __call__(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


class TestShouldRebuild:
    """Tests for should_rebuild."""

    @pytest.mark.parametrize('path', ['posts/hello.md', 'puggle.yaml', './site/puggle.yaml', 'puggle.yml', b'posts/x.md'])
    def test_watched(self, path) -> None:
        assert should_rebuild(path)

    @pytest.mark.parametrize('path', ['', 'templates/post.html', 'public/blog.rss', 'notes.md.swp', 'puggle.toml'])
    def test_ignored(self, path) -> None:
        assert not should_rebuild(path)


class TestRebuildHandler:
    """Tests for RebuildHandler."""

    @pytest.mark.parametrize(
        'event',
        [
            FileModifiedEvent('posts/hello.md'),
            FileCreatedEvent('posts/new.md'),
            FileDeletedEvent('posts/old.md'),
            FileModifiedEvent('puggle.yaml'),
        ],
    )
    def test_rebuilds_on_relevant_change(self, event) -> None:
        recorder = Recorder()
        RebuildHandler(recorder).dispatch(event)
        assert recorder.calls == 1

    def test_move_checks_destination(self) -> None:
        recorder = Recorder()
        RebuildHandler(recorder).dispatch(FileMovedEvent('posts/.hello.md.tmp', 'posts/hello.md'))
        assert recorder.calls == 1

    @pytest.mark.parametrize(
        'event',
        [
            FileModifiedEvent('templates/post.html'),
            DirModifiedEvent('posts'),
            FileClosedEvent('posts/hello.md'),
        ],
    )
    def test_ignores_other_events(self, event) -> None:
        recorder = Recorder()
        RebuildHandler(recorder).dispatch(event)
        assert recorder.calls == 0

    def test_failed_rebuild_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        recorder = Recorder(MetadataMissingError('posts/bad.md'))
        with caplog.at_level(logging.ERROR, logger='puggle.watcher'):
            RebuildHandler(recorder).dispatch(FileModifiedEvent('posts/bad.md'))
        assert recorder.calls == 1
        assert 'Rebuild failed' in caplog.text
        assert 'posts/bad.md' in caplog.text

    def test_undecodable_entry_is_logged(
        self, site: pathlib.Path, make_config: Callable, caplog: pytest.LogCaptureFixture
    ) -> None:
        post = site / 'posts' / 'latin1.md'
        post.write_bytes(b'---\ntitle: \xff\ntags: []\n---\n')
        entry = {'markdown_path': str(post), 'template_path': 'post.html'}
        config = make_config([{'name': 'blog', 'template_path': 'blog.html', 'entries': [entry]}])
        handler = RebuildHandler(lambda: build_site(config))

        with caplog.at_level(logging.ERROR, logger='puggle.watcher'):
            handler.dispatch(FileModifiedEvent(str(post)))

        assert 'Rebuild failed' in caplog.text
        assert 'latin1.md' in caplog.text
