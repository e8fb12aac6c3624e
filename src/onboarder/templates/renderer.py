"""Jinja2 template loading.

All templates ship inside the package under ``onboarder/templates``:
- ``repository_context.xml.j2``: the repository context payload
- ``prompts/*.md.j2``: per-document generation prompts
- ``docs/*.md``: per-document structure the model must follow
- ``git_report.md.j2``: human-readable git analysis report
"""

import logging
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateNotFound

from onboarder.renderers.filters import escape_xml, format_datetime, iso_utc, md_cell
from onboarder.utils.logging import redact_credentials

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Return the shared template environment.

    Autoescaping is off: the payload embeds pre-rendered XML sections, and
    free text is escaped explicitly with the ``xml`` filter.
    """
    env = Environment(
        loader=PackageLoader("onboarder", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["xml"] = escape_xml
    env.filters["iso_utc"] = iso_utc
    env.filters["format_datetime"] = format_datetime
    env.filters["md_cell"] = md_cell
    env.filters["redact"] = redact_credentials
    return env


def render_template(template_name: str, **context: Any) -> str:
    """Render a packaged template.

    Raises:
        ValueError: If the template is missing or fails to render
    """
    env = get_environment()
    try:
        template = env.get_template(template_name)
    except TemplateNotFound as e:
        logger.error("Template not found: %s", template_name)
        raise ValueError(f"Template not found: {template_name}") from e

    try:
        return template.render(**context)
    except Exception as e:
        logger.error("Template rendering failed for %s: %s", template_name, e)
        raise ValueError(f"Template rendering failed for {template_name}: {e}") from e


def load_text(template_name: str) -> str:
    """Return a packaged template's raw source without rendering it."""
    env = get_environment()
    try:
        source, _, _ = env.loader.get_source(env, template_name)  # type: ignore[union-attr]
    except TemplateNotFound as e:
        raise ValueError(f"Template not found: {template_name}") from e
    return source
