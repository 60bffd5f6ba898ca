"""Collect ``redirect_from`` legacy paths into one read-only redirect table."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .errors import BuildFailed, RedirectCollision


def ensure_trailing_slash(value: str) -> str:
    if not value:
        return value
    return value if value.endswith("/") else value + "/"


def normalize_legacy_path(value: str) -> str:
    """Return the table key for a legacy path.

    Legacy paths are absolute site paths. ``/old-path`` and ``/old-path/``
    name the same page; paths ending in a file name keep their extension.
    """
    value = str(value).strip()
    if not value:
        raise ValueError("empty path")
    if value.startswith(("http://", "https://", "//")):
        raise ValueError(f"{value!r} is a URL, expected an absolute path")
    if not value.startswith("/"):
        raise ValueError(f"{value!r} must start with '/'")
    value = re.sub(r"/{2,}", "/", value)
    last_segment = value.rstrip("/").rsplit("/", 1)[-1]
    if "." in last_segment and not value.endswith("/"):
        return value
    return ensure_trailing_slash(value)


class RedirectTable(Mapping):
    """Legacy path -> canonical permalink. Immutable once built."""

    def __init__(self, entries: Mapping[str, str], sources: Mapping[str, str]) -> None:
        self._entries = MappingProxyType(dict(entries))
        self._sources = MappingProxyType(dict(sources))

    def __getitem__(self, path: str) -> str:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RedirectTable({dict(self._entries)!r})"

    def source_of(self, path: str) -> str:
        """Slug of the post that declared ``path``."""
        return self._sources[path]

    def lookup(self, path: str) -> str | None:
        try:
            key = normalize_legacy_path(path)
        except ValueError:
            return None
        return self._entries.get(key)


class RedirectTableBuilder:
    """Write-once accumulator; needs every post's permalink up front."""

    def __init__(self, posts: Iterable) -> None:
        self._owners: dict[str, Any] = {}
        for post in posts:
            self._owners.setdefault(post.permalink, post)
        self._entries: dict[str, str] = {}
        self._declared_by: dict[str, Any] = {}
        self._built = False

    def add(self, post, path: str) -> None:
        if self._built:
            raise RuntimeError("redirect table already built")

        # Posts are told apart by identity; slugs are only for reporting.
        owner = self._owners.get(path)
        if owner is post:
            raise RedirectCollision(path, [post.slug], "redirects to its own permalink")
        if owner is not None:
            raise RedirectCollision(path, [post.slug, owner.slug], f"is the permalink of {owner.slug!r}")

        existing = self._declared_by.get(path)
        if existing is not None:
            if existing is post:
                return
            raise RedirectCollision(path, [existing.slug, post.slug], "declared by two posts")

        self._entries[path] = post.permalink
        self._declared_by[path] = post

    def build(self) -> RedirectTable:
        self._built = True
        sources = {path: post.slug for path, post in self._declared_by.items()}
        return RedirectTable(self._entries, sources)


def build_redirect_table(posts: Iterable) -> RedirectTable:
    """Build the table, raising ``BuildFailed`` with every collision found."""
    posts = list(posts)
    builder = RedirectTableBuilder(posts)
    collisions: list[RedirectCollision] = []
    for post in posts:
        for path in sorted(post.redirect_from):
            try:
                builder.add(post, path)
            except RedirectCollision as exc:
                collisions.append(exc)
    if collisions:
        raise BuildFailed(collisions)
    return builder.build()
