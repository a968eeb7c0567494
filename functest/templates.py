"""
Template Resolver

Renders ``{{ name }}`` placeholders in titles and string assertions with
jinja2. Missing names raise ``jinja2.UndefinedError`` instead of rendering
as empty text.
"""

from typing import Any, Mapping

from jinja2 import Environment, StrictUndefined

_env = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=True)


def render(template: str, data: Mapping[str, Any]) -> str:
    """Render ``template`` with values from ``data``."""
    if "{" not in template:
        return template
    return _env.from_string(template).render(dict(data))


def render_value(value: Any, data: Mapping[str, Any]) -> Any:
    """Render strings; return any other value unchanged."""
    if isinstance(value, str):
        return render(value, data)
    return value
