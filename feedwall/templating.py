"""Jinja2 environment for feedwall templates."""

from __future__ import annotations

import bleach
from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from .dates import formatted_full_date, time_ago
from .images import resolve_image
from .models import FeedEntry

_ENV: Environment | None = None

ENTRY_TAGS = [
    "a",
    "b",
    "blockquote",
    "br",
    "em",
    "figcaption",
    "figure",
    "h1",
    "h2",
    "h3",
    "h4",
    "i",
    "img",
    "li",
    "ol",
    "p",
    "strong",
    "ul",
]
ENTRY_ATTRS = {
    "a": ["href", "title", "target"],
    "img": ["src", "alt", "title", "width", "height"],
}


def _entry_html(value: str | None) -> Markup:
    """Render entry HTML content after sanitisation."""
    if not value:
        return Markup("")
    return Markup(bleach.clean(value, tags=ENTRY_TAGS, attributes=ENTRY_ATTRS, strip=True))


def _background_image(entry: FeedEntry) -> str:
    """CSS background declaration for an entry, or an empty string."""
    url = resolve_image(entry)
    if not url:
        return ""
    return f"background: url({url}) center center"


def _build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("feedwall", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters.update(
        timeago=time_ago,
        formatted_full_date=formatted_full_date,
        background_image=_background_image,
        entry_html=_entry_html,
    )
    return env


def get_environment() -> Environment:
    """Return the shared environment for the page templates."""
    global _ENV
    if _ENV is None:
        _ENV = _build_environment()
    return _ENV
