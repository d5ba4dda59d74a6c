"""Background image lookup for feed entries."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup

from .models import FeedEntry

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("jpg", "png", "gif", "jpeg")


def _media_group_url(entry: FeedEntry) -> Optional[str]:
    if not entry.media_groups:
        return None
    contents = entry.media_groups[0].contents
    if not contents:
        return None
    return contents[0].url or None


def first_image_src(html: str) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` in an HTML fragment."""
    if not html:
        return None
    img = BeautifulSoup(html, "html.parser").find("img")
    if img is None:
        return None
    src = (img.get("src") or "").strip()
    return src or None


def has_allowed_extension(url: str) -> bool:
    return url.split(".")[-1] in ALLOWED_EXTENSIONS


def resolve_image(entry: FeedEntry) -> Optional[str]:
    """Pick an image URL for ``entry`` or None.

    Feeds supply image metadata inconsistently: prefer the first media
    group, else the first image in the content. URLs without an image
    extension are rejected so tracking pixels and ads are not shown.
    """
    url = _media_group_url(entry) or first_image_src(entry.content)
    if not url:
        return None
    if not has_allowed_extension(url):
        logger.debug("Ignoring image with unsupported extension: %s", url)
        return None
    return url
