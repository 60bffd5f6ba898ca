"""Derive canonical post URLs from the filename date/slug and categories.

Patterns use Jekyll's placeholders (``:year``, ``:month``, ``:title`` ...)
or one of its built-in style names. Resolution is a pure function of
(date, slug, categories, pattern).
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import PurePath

from .errors import DuplicatePermalink

PERMALINK_STYLES = {
    "pretty": "/:categories/:year/:month/:day/:title/",
    "date": "/:categories/:year/:month/:day/:title.html",
    "ordinal": "/:categories/:year/:y_day/:title.html",
    "none": "/:categories/:title.html",
}
PLACEHOLDER_PATTERN = re.compile(r":([a-z_]+)")
PLACEHOLDERS = {
    "year",
    "short_year",
    "month",
    "i_month",
    "day",
    "i_day",
    "y_day",
    "title",
    "slug",
    "categories",
}
POST_EXTENSIONS = {".md", ".markdown"}
FILENAME_PATTERN = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<slug>.+)$")


def expand_pattern(pattern: str) -> str:
    """Return the placeholder pattern for a style name, validating placeholders."""
    template = PERMALINK_STYLES.get(pattern, pattern)
    unknown = sorted({name for name in PLACEHOLDER_PATTERN.findall(template)} - PLACEHOLDERS)
    if unknown:
        raise ValueError(f"unknown placeholder(s) in {pattern!r}: {', '.join(':' + u for u in unknown)}")
    return template


def split_filename(name: str) -> tuple[date | None, str]:
    """Return (date, slug) for a ``YYYY-MM-DD-slug.md`` filename.

    Names without a valid date prefix give ``(None, stem)``.
    """
    path = PurePath(name)
    stem = path.stem if path.suffix.lower() in POST_EXTENSIONS else path.name
    match = FILENAME_PATTERN.match(stem)
    if not match:
        return None, stem
    try:
        post_date = date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
    except ValueError:
        return None, stem
    return post_date, match.group("slug")


def slugify_category(value: str) -> str:
    value = value.strip().lower()
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"[^\w\-]+", "", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def category_path(categories: Iterable[str]) -> str:
    parts: list[str] = []
    for category in categories:
        slug = slugify_category(str(category))
        if slug and slug not in parts:
            parts.append(slug)
    return "/".join(parts)


def resolve_permalink(
    post_date: date,
    slug: str,
    categories: Sequence[str] = (),
    pattern: str = "pretty",
) -> str:
    template = expand_pattern(pattern)
    values = {
        "year": f"{post_date.year:04d}",
        "short_year": f"{post_date.year % 100:02d}",
        "month": f"{post_date.month:02d}",
        "i_month": str(post_date.month),
        "day": f"{post_date.day:02d}",
        "i_day": str(post_date.day),
        "y_day": f"{post_date.timetuple().tm_yday:03d}",
        "title": slug,
        "slug": slug,
        "categories": category_path(categories),
    }
    path = PLACEHOLDER_PATTERN.sub(lambda mt: values[mt.group(1)], template)
    # Empty placeholders (no categories) must not leave "//" behind.
    path = re.sub(r"/{2,}", "/", f"/{path}")
    return path


def find_duplicate_permalinks(posts: Iterable) -> list[DuplicatePermalink]:
    """Report every permalink or slug shared by more than one post."""
    by_permalink: dict[str, list[str]] = defaultdict(list)
    by_slug: dict[str, list[str]] = defaultdict(list)
    for post in posts:
        by_permalink[post.permalink].append(post.source)
        by_slug[post.slug].append(post.source)

    errors: list[DuplicatePermalink] = []
    reported: set[frozenset[str]] = set()
    for permalink, sources in sorted(by_permalink.items()):
        if len(sources) > 1:
            errors.append(DuplicatePermalink(permalink, sources))
            reported.add(frozenset(sources))
    for slug, sources in sorted(by_slug.items()):
        if len(sources) > 1 and frozenset(sources) not in reported:
            errors.append(DuplicatePermalink(slug, sources, kind="slug"))
    return errors
