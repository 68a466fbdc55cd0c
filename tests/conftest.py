"""Shared fixtures: a throwaway site with templates and a posts directory."""

import pathlib
from typing import Callable

import pytest

from puggle.models import Config

BASE_URL = 'https://example.com/'

POST_TEMPLATE = '<article>{% block content %}{% endblock %}</article>\n'
BLOG_TEMPLATE = '<ul>{% for entry in pages.blog %}<li>{{ entry.title }}</li>{% endfor %}</ul>\n'
HOME_TEMPLATE = (
    '{% for name, entries in pages.items() %}'
    '<section id="{{ name }}">{% for entry in entries %}<p>{{ entry.file_name }}</p>{% endfor %}</section>'
    '{% endfor %}\n'
)


@pytest.fixture
def site(tmp_path: pathlib.Path) -> pathlib.Path:
    """Returns a site root holding templates/ and posts/."""
    templates = tmp_path / 'templates'
    templates.mkdir()
    (templates / 'post.html').write_text(POST_TEMPLATE)
    (templates / 'blog.html').write_text(BLOG_TEMPLATE)
    (templates / 'home.html').write_text(HOME_TEMPLATE)
    (tmp_path / 'posts').mkdir()
    return tmp_path


@pytest.fixture
def write_post() -> Callable[..., pathlib.Path]:
    """Returns a helper writing a Markdown file with YAML front matter."""

    def _write(path: pathlib.Path, front_matter: str, body: str = '') -> pathlib.Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f'---\n{front_matter.strip()}\n---\n{body}', encoding='utf-8')
        return path

    return _write


@pytest.fixture
def make_config(site: pathlib.Path) -> Callable[..., Config]:
    """Returns a helper building a Config rooted at the site fixture."""

    def _make(pages: list, base_url: str = BASE_URL) -> Config:
        return Config.model_validate(
            {
                'pages': pages,
                'templates_dir': str(site / 'templates'),
                'dest_dir': str(site / 'public'),
                'base_url': base_url,
            }
        )

    return _make
