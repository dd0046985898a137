"""
Template engine configuration for outgoing mail.
"""
from functools import lru_cache
from jinja2 import Environment, PackageLoader, select_autoescape


@lru_cache
def get_jinja_env() -> Environment:
    """
    Create the Jinja2 environment over the packaged templates.

    HTML templates are autoescaped; plain-text templates are not.

    Returns:
        Jinja2 Environment
    """
    return Environment(
        loader=PackageLoader("artisans", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(name: str, **context) -> str:
    """
    Render a packaged template with the given context.

    Args:
        name: Template path relative to the templates directory
        context: Variables to use in the template

    Returns:
        Rendered string
    """
    return get_jinja_env().get_template(name).render(**context)
