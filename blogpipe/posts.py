"""Validate front matter and assemble immutable post records.

Only the fields in ``RECOGNIZED_FIELDS`` are accepted. Every problem in a
document is collected and raised together as one ``InvalidPost``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Any

from .config_utils import SiteConfig
from .errors import InvalidPost
from .front_matter import normalize_sequence
from .permalinks import resolve_permalink, split_filename
from .redirects import normalize_legacy_path

RECOGNIZED_FIELDS = ("layout", "title", "date", "categories", "tags", "redirect_from", "published")
REQUIRED_FIELDS = ("layout", "title", "date")
SLUG_PATTERN = re.compile(r"^\w[\w.-]*$")
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


@dataclass(frozen=True)
class Post:
    source: str
    slug: str
    date: datetime
    title: str
    layout: str
    permalink: str
    body: str
    categories: tuple[str, ...] = ()
    tags: frozenset[str] = field(default_factory=frozenset)
    redirect_from: frozenset[str] = field(default_factory=frozenset)
    published: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "source": self.source,
            "permalink": self.permalink,
            "layout": self.layout,
            "title": self.title,
            "date": self.date.isoformat(),
            "categories": list(self.categories),
            "tags": sorted(self.tags),
            "redirect_from": sorted(self.redirect_from),
            "published": self.published,
            "body": self.body,
        }


def parse_date(value: Any, default_tz: tzinfo) -> datetime:
    """Return an aware datetime for a YAML date/datetime or a date string."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                raise ValueError(f"unrecognized date {text!r}") from None
    else:
        raise ValueError(f"expected a date, got {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value).strip()
    return None


def _string_list(name: str, value: Any, problems: list[str]) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        if any(isinstance(item, (dict, list)) for item in value):
            problems.append(f"{name}: list items must be plain strings")
            return []
    elif _scalar_text(value) is None:
        problems.append(f"{name}: expected a string or a list, got {type(value).__name__}")
        return []
    return normalize_sequence(value)


def _unique(items: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def assemble_post(source: str, metadata: dict[str, Any], body: str, config: SiteConfig) -> Post:
    problems: list[str] = []

    for key in metadata:
        if key not in RECOGNIZED_FIELDS:
            problems.append(f"{key}: unknown field")

    for key in REQUIRED_FIELDS:
        if metadata.get(key) is None or _scalar_text(metadata.get(key)) == "":
            problems.append(f"{key}: missing")

    layout = _scalar_text(metadata.get("layout"))
    if metadata.get("layout") is not None:
        if layout is None:
            problems.append("layout: expected a string")
        elif layout and layout not in config.layouts:
            problems.append(f"layout: unknown layout {layout!r} (known: {', '.join(config.layouts)})")

    title = _scalar_text(metadata.get("title"))
    if metadata.get("title") is not None and title is None:
        problems.append("title: expected a string")

    post_date = None
    if metadata.get("date") is not None and _scalar_text(metadata.get("date")) != "":
        try:
            post_date = parse_date(metadata["date"], config.utc_offset)
        except ValueError as exc:
            problems.append(f"date: {exc}")

    categories = _string_list("categories", metadata.get("categories"), problems)
    tags = _string_list("tags", metadata.get("tags"), problems)

    redirect_from: set[str] = set()
    for path in _string_list("redirect_from", metadata.get("redirect_from"), problems):
        try:
            redirect_from.add(normalize_legacy_path(path))
        except ValueError as exc:
            problems.append(f"redirect_from: {exc}")

    published = metadata.get("published", True)
    if not isinstance(published, bool):
        problems.append(f"published: expected true or false, got {published!r}")
        published = True

    filename_date, slug = split_filename(source)
    if not SLUG_PATTERN.match(slug):
        problems.append(f"slug: {slug!r} derived from the filename is not URL-safe")

    if problems:
        raise InvalidPost(source, problems)

    permalink = resolve_permalink(
        filename_date or post_date.date(),
        slug,
        _unique(categories),
        config.permalink,
    )
    return Post(
        source=source,
        slug=slug,
        date=post_date,
        title=title,
        layout=layout,
        permalink=permalink,
        body=body,
        categories=_unique(categories),
        tags=frozenset(tags),
        redirect_from=frozenset(redirect_from),
        published=published,
    )
