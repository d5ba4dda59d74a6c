"""Rendering helpers for the home page."""

from __future__ import annotations

from .home import HomePage
from .templating import get_environment


def build_page_html(page: HomePage) -> str:
    """Render the feed list and modal for ``page`` using the Jinja2 template."""
    env = get_environment()
    template = env.get_template("home.html.j2")
    return template.render(
        feeds=page.feeds or [],
        status=page.status.value,
        error=page.error,
        selected=page.selected_entry,
    )
