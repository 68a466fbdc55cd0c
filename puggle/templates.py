from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import jinja2

from .errors import TemplateEnvironmentError, TemplateRenderError
from .filters import add_to_environment, published_on

logger = logging.getLogger(__name__)

WRAPPER_TEMPLATE = '{{% extends "{path}" %}}\n{{% block content %}}\n{body}\n{{% endblock %}}'

# Exceptions a filter or a template expression may raise while rendering.
RENDER_ERRORS = (jinja2.TemplateError, TypeError, ValueError, LookupError)


def template_name(path: Union[Path, str]) -> str:
    return Path(path).as_posix()


class TemplateHandle:
    """Jinja2 environment shared by every render of one build.

    Templates are looked up under ``templates_dir``. Besides the date-time
    filters, the environment carries the ``published_on`` filter and, when
    given, a ``base_url`` global.
    """

    def __init__(self, templates_dir: Path, base_url: Optional[str] = None):
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(templates_dir)),
            autoescape=jinja2.select_autoescape(["html", "htm", "xml"], default_for_string=True),
        )
        add_to_environment(self.env)
        self.env.filters["published_on"] = published_on
        if base_url is not None:
            self.env.globals["base_url"] = base_url

    def compile(self, source: str) -> jinja2.Template:
        try:
            return self.env.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateEnvironmentError(str(exc)) from exc

    def load(self, path: Union[Path, str]) -> jinja2.Template:
        try:
            return self.env.get_template(template_name(path))
        except (jinja2.TemplateNotFound, jinja2.TemplateSyntaxError, UnicodeDecodeError) as exc:
            raise TemplateEnvironmentError(describe(exc)) from exc

    def render(self, template: jinja2.Template, context: dict) -> str:
        try:
            return template.render(context)
        except (jinja2.TemplateNotFound, jinja2.TemplateSyntaxError) as exc:
            # Parents named by {% extends %} are only loaded at render time.
            raise TemplateEnvironmentError(describe(exc)) from exc
        except RENDER_ERRORS as exc:
            raise TemplateRenderError(describe(exc)) from exc

    def render_named(self, path: Union[Path, str], context: dict) -> str:
        logger.debug("Rendering template %s", template_name(path))
        return self.render(self.load(path), context)

    def render_partial(self, body: str, context: dict) -> str:
        return self.render(self.compile(body), context)

    def render_wrapped(self, body: str, wrapper_path: Union[Path, str], context: dict) -> str:
        """Render ``body`` as the ``content`` block of the template at ``wrapper_path``."""
        source = WRAPPER_TEMPLATE.format(path=template_name(wrapper_path), body=body)
        return self.render(self.compile(source), context)


def describe(exc: Exception) -> str:
    if isinstance(exc, jinja2.TemplateNotFound):
        return f"template not found: {exc.name}"
    return str(exc) or type(exc).__name__
