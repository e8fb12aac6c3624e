"""Packaged Jinja2 templates and the shared template environment."""

from onboarder.templates.renderer import get_environment, load_text, render_template

__all__ = ["get_environment", "load_text", "render_template"]
