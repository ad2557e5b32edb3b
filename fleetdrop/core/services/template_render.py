"""
Template rendering for the legacy ``render`` transfer path.

jinja2 with StrictUndefined: a variable the template uses but the
context does not define is a RenderFailure, never an empty string.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from fleetdrop.core.errors import RenderFailure

logger = logging.getLogger(__name__)

_ENV = Environment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def resolve_locals(locals_: Mapping[str, Any]) -> dict[str, Any]:
    """Evaluate callable locals; plain values pass through unchanged.

    Callables are invoked with no arguments, at resolution time, once each.
    """
    resolved: dict[str, Any] = {}
    for key, value in locals_.items():
        if callable(value):
            try:
                resolved[key] = value()
            except Exception as e:
                raise RenderFailure(f"Resolving template local '{key}' failed: {e}") from e
        else:
            resolved[key] = value
    return resolved


def build_context(
    scope: Mapping[str, Any] | None,
    locals_: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Merge the caller scope with resolved locals (locals win)."""
    context = dict(scope or {})
    if locals_:
        context.update(resolve_locals(locals_))
    return context


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """Render template text against ``context``.

    Raises:
        RenderFailure: On syntax errors, undefined variables, or any
            error raised while evaluating the template.
    """
    try:
        return _ENV.from_string(template).render(dict(context))
    except TemplateError as e:
        raise RenderFailure(f"Template rendering failed: {e}") from e
    except Exception as e:
        # errors raised while evaluating template expressions
        raise RenderFailure(f"Template rendering failed: {type(e).__name__}: {e}") from e
